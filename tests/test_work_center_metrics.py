from datetime import datetime

import pytest

from modules.operations.services import upsert_job_operations, upsert_sap_operations
from modules.work_centers.services.metrics import (
    bucket_hours,
    efficiency,
    group_by_work_center,
    in_bucket,
    operation_status,
    summarize_work_center,
    work_center_metrics,
)
from modules.work_centers.services.work_center_service import (
    get_jobs_by_work_center,
    get_work_centers,
    job_operations_for,
    update_work_centers_from_operations,
    utilization_overview,
    work_center_details,
)

NOW = datetime(2024, 5, 2, 12, 0)


def test_efficiency():
    assert efficiency(0, 5) == 0.0
    assert efficiency(10, 5) == 50.0
    assert efficiency(10, 12) == 120.0


def test_group_by_work_center_skips_blank_centers(sap_rows):
    groups = group_by_work_center(sap_rows + [{"order_number": "9", "work_center": ""}])
    assert list(groups) == ["MILL", "SR"]
    assert len(groups["MILL"]) == 2


def test_work_center_metrics(sap_rows):
    mill = [r for r in sap_rows if r["work_center"] == "MILL"]

    m = work_center_metrics(mill)

    assert m["total_operations"] == 2
    assert m["total_orders"] == 2
    assert m["planned_hours"] == 15.0
    assert m["actual_hours"] == 9.0
    assert m["efficiency"] == pytest.approx(60.0)
    assert m["utilization_rate"] == 60
    assert m["in_progress_hours"] == 6.0
    assert m["backlog_hours"] == 0.0
    assert m["remaining_hours"] == 6.0
    assert m["avg_hours_per_job"] == 7.5
    assert m["peak_load"] is False


def test_metrics_for_no_operations():
    m = work_center_metrics([])
    assert m["efficiency"] == 0.0
    assert m["avg_hours_per_job"] == 0.0
    assert m["available_work_hours"] == 0.0


def test_summarize_work_center(sap_rows):
    mill = [r for r in sap_rows if r["work_center"] == "MILL"]

    row = summarize_work_center("MILL", mill, NOW)

    assert row["name"] == "MILL"
    assert row["type"] == "Manufacturing"
    assert row["status"] == "Running"
    assert row["active_jobs"] == 1
    assert row["utilization"] == 60
    assert row["total_capacity"] == 100
    assert row["operator_count"] == 1
    assert row["last_maintenance"].startswith("2024-04-25")
    assert row["next_maintenance"].startswith("2024-05-25")


def test_utilization_rounds_half_up():
    rows = [{"order_number": "1", "work_center": "MILL", "planned_work": 200, "actual_work": 5}]

    assert work_center_metrics(rows)["utilization_rate"] == 3
    assert summarize_work_center("MILL", rows, NOW)["utilization"] == 3


def test_hour_totals_do_not_depend_on_row_order():
    rows = [
        {"order_number": "1", "work_center": "MILL", "planned_work": 0.1, "actual_work": 0.3},
        {"order_number": "2", "work_center": "MILL", "planned_work": 0.2, "actual_work": 0.2},
        {"order_number": "3", "work_center": "MILL", "planned_work": 0.3, "actual_work": 0.1},
    ]

    forward = work_center_metrics(rows)
    backward = work_center_metrics(list(reversed(rows)))

    assert forward["planned_hours"] == backward["planned_hours"] == 0.6
    assert forward["actual_hours"] == backward["actual_hours"] == 0.6
    assert forward["efficiency"] == backward["efficiency"] == 100.0


def test_idle_center_when_nothing_in_progress():
    row = summarize_work_center("SAW", [{"order_number": "1", "work_center": "SAW", "planned_work": 2}], NOW)
    assert row["status"] == "Idle"
    assert row["active_jobs"] == 0


def test_operation_status_labels():
    assert operation_status(5, 5) == "Available"
    assert operation_status(5, 1) == "In Progress"
    assert operation_status(5, 0) == "Backlog"


def test_buckets():
    op = {"Work": 10.0, "Actual work": 4.0}
    assert in_bucket(op, "in_progress")
    assert not in_bucket(op, "backlog")
    assert bucket_hours(op, "in_progress") == 6.0
    assert bucket_hours({"Work": 8.0, "Actual work": 0.0}, "backlog") == 8.0
    with pytest.raises(ValueError):
        in_bucket(op, "weekend")


def test_refresh_and_stored_work_centers(public, sap_rows):
    upsert_sap_operations(sap_rows, public)

    saved = update_work_centers_from_operations(public, NOW)

    assert sorted(r["name"] for r in saved) == ["MILL", "SR"]
    assert public.count("work_centers") == 2
    update_work_centers_from_operations(public, NOW)
    assert public.count("work_centers") == 2

    overview = utilization_overview(public)
    assert overview["running"] == 1
    assert overview["idle"] == 1
    assert [c["name"] for c in get_work_centers(public)] == ["MILL", "SR"]


def test_refresh_without_operations_changes_nothing(public):
    assert update_work_centers_from_operations(public, NOW) == []
    assert public.count("work_centers") == 0


def test_jobs_by_work_center(public, sap_rows):
    upsert_sap_operations(sap_rows, public)
    public.insert("jobs", [
        {"job_number": "1001", "title": "Housing", "customer": "Acme"},
        {"job_number": "2002", "title": "Plate", "work_center": "MILL"},
    ])

    jobs = get_jobs_by_work_center("MILL", client=public)

    by_number = {j["job_number"]: j for j in jobs}
    assert set(by_number) == {"1001", "1002", "2002"}
    assert by_number["1001"]["operationStatus"] == "In Progress"
    assert by_number["1001"]["remaining_hours"] == 6.0
    assert by_number["1001"]["customer"] == "Acme"
    assert by_number["1002"]["operationStatus"] == "Available"

    in_progress = get_jobs_by_work_center("MILL", status="In Progress", client=public)
    assert [j["job_number"] for j in in_progress] == ["1001"]


def test_details_and_job_operations(public, sap_rows):
    upsert_sap_operations(sap_rows, public)
    public.insert("jobs", {"job_number": "1001", "title": "Housing", "customer": "Acme", "reference_name": "Pump"})

    details = work_center_details("MILL", "in_progress", public)
    assert details["work_center"] == "MILL"
    assert details["jobs"] == [{"job_number": "1001", "customer": "Acme", "reference": "Pump", "total_hours": 6.0}]

    ops = job_operations_for("1001", "MILL", "in_progress", public)
    assert len(ops["operations"]) == 1
    op = ops["operations"][0]
    assert op["operation_number"] == "0010"
    assert op["remaining_work"] == 6.0
    assert op["status"] == "In Progress"
