# /app/modules/__init__.py

# Import each module's blueprint
from .jobs_management import jobs_bp
from .work_centers import work_centers_bp, api_bp
from .logistics import logistics_bp, purchase_bp
from .ncr import ncr_bp
from .admin import admin_bp
from .user.routes import admin_users_bp


module_blueprints = [
    ("jobs_bp", jobs_bp, "/jobs"),
    ("work_centers_bp", work_centers_bp, "/work-centers"),
    ("api_bp", api_bp, "/api"),
    ("logistics_bp", logistics_bp, "/logistics"),
    ("purchase_bp", purchase_bp, "/purchase"),
    ("ncr_bp", ncr_bp, "/ncr"),
    ("admin_bp", admin_bp, "/admin"),
    ("admin_users_bp", admin_users_bp, "/user"),
]

# Optional: export list so app.py can loop through them
__all__ = ["module_blueprints"]
