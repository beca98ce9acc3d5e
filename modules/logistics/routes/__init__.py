# File path: modules/logistics/routes/__init__.py

from . import index  # noqa: F401
from . import purchase  # noqa: F401
