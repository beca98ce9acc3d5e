# File path: modules/jobs_management/routes/__init__.py
# V1 Job list + refresh from operations
# V2 Job detail: notes, reminders, priority

from . import index  # noqa: F401
from . import detail  # noqa: F401
