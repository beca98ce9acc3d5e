# File path: modules/ncr/routes/__init__.py

from . import index  # noqa: F401
