# File path: modules/work_centers/routes/api.py
# JSON endpoints behind the work-center cards and their drill-down modal.

from flask import jsonify, request

from modules.user.decorators import api_auth_required
from modules.work_centers import api_bp
from modules.work_centers.services.metrics import BUCKETS
from modules.work_centers.services.work_center_service import (
    all_work_center_metrics,
    job_operations_for,
    work_center_details,
)


def _args(*names):
    return [(request.args.get(n) or "").strip() for n in names]


def _bad_bucket(bucket):
    return jsonify({"error": f"type must be one of: {', '.join(BUCKETS)}"}), 400


@api_bp.route("/work_centers")
@api_auth_required
def api_work_centers():
    return jsonify(all_work_center_metrics())


@api_bp.route("/work_center_details")
@api_auth_required
def api_work_center_details():
    center, bucket = _args("center", "type")
    if not center:
        return jsonify({"error": "center is required"}), 400
    if bucket not in BUCKETS:
        return _bad_bucket(bucket)
    return jsonify(work_center_details(center, bucket))


@api_bp.route("/job_operations")
@api_auth_required
def api_job_operations():
    job, center, bucket = _args("job", "center", "type")
    if not job or not center:
        return jsonify({"error": "job and center are required"}), 400
    if bucket not in BUCKETS:
        return _bad_bucket(bucket)
    return jsonify(job_operations_for(job, center, bucket))
