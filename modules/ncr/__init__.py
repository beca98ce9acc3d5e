# File path: modules/ncr/__init__.py

from flask import Blueprint

ncr_bp = Blueprint("ncr_bp", __name__)

from .routes import *  # noqa
