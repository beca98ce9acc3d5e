# File path: modules/logistics/__init__.py

from flask import Blueprint

logistics_bp = Blueprint("logistics_bp", __name__)
purchase_bp = Blueprint("purchase_bp", __name__)

# Import routes AFTER blueprints exist
from .routes import *  # noqa
