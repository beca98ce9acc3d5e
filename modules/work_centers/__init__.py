# File path: modules/work_centers/__init__.py

from flask import Blueprint

work_centers_bp = Blueprint("work_centers_bp", __name__)
api_bp = Blueprint("api_bp", __name__)

# Import routes AFTER blueprints exist
from .routes import *  # noqa
