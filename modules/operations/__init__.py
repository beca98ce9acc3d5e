# File path: modules/operations/__init__.py
# Operation rows shared by jobs, work centers and the importers. No pages of its own.
