# File path: modules/work_centers/routes/__init__.py

from . import index  # noqa: F401
from . import api  # noqa: F401
