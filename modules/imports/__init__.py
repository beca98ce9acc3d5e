# File path: modules/imports/__init__.py
