# File path: modules/admin/routes/__init__.py

from . import index  # noqa: F401
