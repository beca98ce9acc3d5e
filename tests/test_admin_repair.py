import random
from datetime import datetime

import pytest

from modules.admin.services.diagnostics import (
    STATUS_ISSUES,
    STATUS_OK,
    TABLES,
    check_tables_exist,
    debug_table_data,
    diagnose_page_data,
    fix_page_data,
)
from modules.admin.services.seeding import SAMPLE_ORDERS, insert_test_data, sample_shipment_logs, seed_table
from modules.logistics.services.repair import (
    RepairReport,
    build_timeline_entries,
    build_vendor_operations,
    fix_logistics_data,
)

TODAY = datetime(2024, 5, 10)


def test_build_vendor_operations():
    pos = [
        {"po_number": "PO9", "job_id": 1, "issue_date": "2024-05-01T00:00:00", "expected_date": None},
        {"po_number": "PO10", "job_id": None},
    ]

    ops = build_vendor_operations(pos, TODAY)

    assert len(ops) == 1
    assert ops[0]["operation"] == "Vendor operation for PO9"
    assert ops[0]["vendor"] == "Unknown Vendor"
    assert ops[0]["date_range"] == "2024-05-01 to 2024-05-24"
    assert ops[0]["status"] == "In Progress"
    assert ops[0]["notes"] == "Created from PO PO9"


def test_build_timeline_entries_skips_jobs():
    pos = [
        {"po_number": "PO1", "job_id": 1, "vendor": "Coaters"},
        {"po_number": "PO2", "job_id": 2},
    ]

    entries = build_timeline_entries(pos, TODAY, skip_job_ids={2})

    assert len(entries) == 1
    assert entries[0]["title"] == "Purchase Order Created"
    assert entries[0]["description"] == "PO PO1 for Coaters created"
    assert entries[0]["date"] == TODAY.isoformat()
    assert entries[0]["status"] == "completed"


def test_repair_report_message():
    report = RepairReport(linked=2, vendor_operations=1, timeline_entries=1)
    assert report.success
    assert report.message() == (
        "Linked 2 purchase orders, created 1 vendor operations and 1 timeline entries"
    )

    report.errors.append("ncrs: boom")
    assert not report.success
    assert report.message().endswith("(1 errors: ncrs: boom)")


def test_fix_logistics_data_is_repeatable(public, service):
    public.insert("jobs", {"job_number": "100575804", "title": "Housing"})
    public.insert("purchase_orders", [
        {"po_number": "PO1", "notes": "For 100575804", "vendor": "Coaters"},
        {"po_number": "PO2", "notes": "Stock"},
    ])

    first = fix_logistics_data(service, TODAY)
    second = fix_logistics_data(service, TODAY)

    assert (first.linked, first.vendor_operations, first.timeline_entries) == (1, 1, 1)
    assert (second.linked, second.vendor_operations, second.timeline_entries) == (0, 0, 0)
    assert first.success and second.success
    assert service.count("vendor_operations") == 1
    assert service.count("job_timelines") == 1


def test_fix_logistics_data_without_linked_orders(service):
    report = fix_logistics_data(service, TODAY)
    assert report.success
    assert report.vendor_operations == 0


def test_check_tables_exist_on_empty_database(app):
    status = check_tables_exist()

    assert set(status) == set(TABLES)
    assert all(entry["exists"] for entry in status.values())
    assert all(entry["count"] == 0 for entry in status.values())


def test_check_tables_exist_reports_missing_tables(public):
    class PartialSchema:
        def list_tables(self):
            return [t for t in public.list_tables() if t != "jobs"]

        def count(self, table):
            return public.count(table)

    status = check_tables_exist(PartialSchema())

    assert status["jobs"] == {"exists": False, "count": None}
    assert status["purchase_orders"] == {"exists": True, "count": 0}


def test_debug_table_data(public):
    public.insert("jobs", {"job_number": "J-1", "title": "x"})
    data = debug_table_data("jobs")
    assert data["count"] == 1
    assert data["rows"][0]["job_number"] == "J-1"
    assert "error" in debug_table_data("nope")


def test_diagnose_reports_empty_tables(app):
    result = diagnose_page_data("logistics")
    assert result["status"] == STATUS_ISSUES
    assert "jobs is empty" in result["message"]


def test_diagnose_after_seeding(app):
    insert_test_data()

    assert diagnose_page_data("ncr")["status"] == STATUS_OK
    purchase = diagnose_page_data("purchase")
    assert purchase["status"] == STATUS_ISSUES
    assert "1 purchase orders are not linked to a job" in purchase["message"]


def test_diagnose_unknown_page(app):
    with pytest.raises(ValueError):
        diagnose_page_data("inventory")
    with pytest.raises(ValueError):
        fix_page_data("inventory")


def test_fix_page_data(app, service):
    result = fix_page_data("ncr")

    assert result["success"]
    assert "seeded 1 rows into ncrs" in result["message"]
    assert fix_page_data("ncr")["message"] == "Nothing to fix"


def test_fix_work_centers_page(public):
    result = fix_page_data("work-centers")

    assert result["success"]
    assert "refreshed 3 work centers" in result["message"]
    assert {wc["name"] for wc in public.select("work_centers")} == {"MILL", "LATHE", "SR"}


def test_insert_test_data_seeds_empty_tables_once(public, service):
    first = insert_test_data()

    assert first == {
        "jobs": 2,
        "sap_operations": 6,
        "job_operations": 6,
        "purchase_orders": 3,
        "shipmentlogs": 10,
        "vendor_operations": 2,
        "job_timelines": 2,
        "ncrs": 1,
        "work_centers": 3,
    }
    assert all(count == 0 for count in insert_test_data().values())

    linked = public.select("purchase_orders", [("job_id", "isnot", None)])
    assert len(linked) == 2


def test_insert_test_data_for_selected_tables(app):
    assert insert_test_data(["jobs"]) == {"jobs": 2}
    with pytest.raises(ValueError, match="jbos"):
        insert_test_data(["jobs", "jbos"])
    assert insert_test_data(["jobs"]) == {"jobs": 0}
    with pytest.raises(ValueError):
        seed_table("users")


def test_sample_shipments_are_consistent(app):
    logs = sample_shipment_logs(count=40, now=TODAY, rng=random.Random(7))

    assert len(logs) == 40
    assert len({log["tracking_number"] for log in logs}) == 40
    for log in logs:
        if log["received_date"]:
            assert log["status"] == "Delivered"
        else:
            assert log["status"] in ("Scheduled", "In Transit", "Delayed")
        assert log["expected_delivery"] > log["shipment_date"]


def test_sample_orders_match_jobs(public):
    seed_table("jobs")
    assert [j["job_number"] for j in public.select("jobs", order_by="id")] == list(SAMPLE_ORDERS)
