from datetime import datetime

import pytest

from modules.backend import BackendError
from modules.logistics.services import purchase_orders
from modules.logistics.services.purchase_orders import (
    dedupe_by_po_number,
    get_purchase_orders,
    get_purchase_orders_for_job,
    po_status_counts,
    purchase_summary,
    upsert_purchase_orders,
)
from modules.logistics.services.shipments import (
    inbound_shipments,
    outbound_shipments,
    recent_shipments,
    upsert_shipment_logs,
)

TODAY = datetime(2024, 5, 10)


class RecordingClient:
    """Counts upsert calls and fails the batches listed in fail_on (1-based)."""

    def __init__(self, fail_on=()):
        self.calls = []
        self.fail_on = set(fail_on)

    def select(self, table, *args, **kwargs):
        return []

    def upsert(self, table, rows, on_conflict="id"):
        if table == "purchase_orders":
            self.calls.append(list(rows))
            if len(self.calls) in self.fail_on:
                raise BackendError("boom")
        return rows


def _pos(n):
    return [{"po_number": f"PO{i:03d}", "vendor": "Acme"} for i in range(n)]


def test_dedupe_keeps_last_occurrence():
    rows = [{"po_number": "A", "v": 1}, {"po_number": " B ", "v": 2}, {"po_number": "A", "v": 3}, {"po_number": ""}]

    out = dedupe_by_po_number(rows)

    assert [(r["po_number"], r["v"]) for r in out] == [("B", 2), ("A", 3)]


@pytest.mark.parametrize("count, batch_size, expected_calls", [
    (0, 50, 0),
    (1, 50, 1),
    (50, 50, 1),
    (51, 50, 2),
    (120, 50, 3),
])
def test_batch_count(app, count, batch_size, expected_calls):
    client = RecordingClient()

    result = upsert_purchase_orders(_pos(count), batch_size=batch_size, client=client, delay=0)

    assert len(client.calls) == expected_calls
    assert result.batches == expected_calls
    assert result.rows == count
    assert result.ok


def test_batches_count_unique_rows(app):
    client = RecordingClient()
    rows = _pos(50) + _pos(50)

    result = upsert_purchase_orders(rows, batch_size=50, client=client, delay=0)

    assert len(client.calls) == 1
    assert result.rows == 50


def test_failed_batch_does_not_stop_later_batches(app):
    client = RecordingClient(fail_on={1})

    result = upsert_purchase_orders(_pos(120), batch_size=50, client=client, delay=0)

    assert len(client.calls) == 3
    assert result.failed == 1
    assert result.succeeded == 2
    assert not result.ok
    assert result.errors == ["boom"]


def test_sleeps_between_batches_only(app, monkeypatch):
    sleeps = []
    monkeypatch.setattr(purchase_orders.time, "sleep", sleeps.append)

    upsert_purchase_orders(_pos(120), batch_size=50, client=RecordingClient(), delay=0.25)

    assert sleeps == [0.25, 0.25]


def test_batch_size_from_config(app):
    app.config["PO_BATCH_SIZE"] = 10
    client = RecordingClient()

    upsert_purchase_orders(_pos(25), client=client, delay=0)

    assert len(client.calls) == 3


def test_explicit_job_number_links_at_write_time(public):
    job = public.insert("jobs", {"job_number": "100575804", "title": "Housing"})[0]

    result = upsert_purchase_orders([
        {"po_number": "PO1", "job_number": "100575804"},
        {"po_number": "PO2", "notes": "for job 100575804"},
        {"po_number": "PO3", "notes": "stock"},
    ], client=public, delay=0)

    assert result.ok
    linked = {po["po_number"]: po["job_id"] for po in get_purchase_orders(public)}
    assert linked == {"PO1": job["id"], "PO2": job["id"], "PO3": None}
    assert len(get_purchase_orders_for_job(job["id"], public)) == 2


def test_upsert_keeps_existing_link(public):
    first = public.insert("jobs", {"job_number": "100575804", "title": "Housing"})[0]
    second = public.insert("jobs", {"job_number": "100575126", "title": "Bracket"})[0]
    public.insert("purchase_orders", {"po_number": "PO1", "job_id": first["id"]})

    upsert_purchase_orders([{"po_number": "PO1", "notes": "ref 100575126"}], client=public, delay=0)
    assert get_purchase_orders(public)[0]["job_id"] == first["id"]

    upsert_purchase_orders([{"po_number": "PO1", "job_number": "100575126"}], client=public, delay=0)
    assert get_purchase_orders(public)[0]["job_id"] == second["id"]


def test_upsert_updates_existing_po(public):
    upsert_purchase_orders([{"po_number": "PO1", "status": "Open"}], client=public, delay=0)
    upsert_purchase_orders([{"po_number": "PO1", "status": "Received"}], client=public, delay=0)

    pos = get_purchase_orders(public)
    assert len(pos) == 1
    assert pos[0]["status"] == "Received"


def test_purchase_summary():
    pos = [
        {"status": "Open", "amount": 100, "expected_date": "2024-05-01T00:00:00"},
        {"status": "In Progress", "amount": 50.5, "expected_date": "2024-05-12T00:00:00"},
        {"status": "In Progress", "amount": None, "received_date": "2024-05-05T00:00:00"},
        {"status": "Received", "amount": 10, "expected_date": "2024-05-02T00:00:00"},
        {"status": "Delayed", "amount": 0, "expected_date": "2024-05-12T09:00:00"},
    ]

    s = purchase_summary(pos, TODAY)

    assert s["open_count"] == 1
    assert s["total_value"] == 160.5
    assert s["pending_deliveries"] == 1
    assert s["late_deliveries"] == 1
    assert s["status_chart"] == [
        {"name": "Open", "value": 1},
        {"name": "In Progress", "value": 2},
        {"name": "Received", "value": 1},
        {"name": "Delayed", "value": 1},
    ]
    assert s["delivery_timeline"] == [
        {"date": "2024-05-01", "deliveries": 1},
        {"date": "2024-05-02", "deliveries": 1},
        {"date": "2024-05-12", "deliveries": 2},
    ]


def test_po_status_counts():
    counts = po_status_counts([{"status": "Open"}, {"status": "Closed"}, {"status": "Open"}, {"status": "Received"}])
    assert counts == {"open": 2, "in_progress": 0, "closed": 1}


def test_shipment_views():
    logs = [
        {"tracking_number": "T1", "shipment_date": "2024-05-01", "received_date": None, "shipment_type": "Inbound"},
        {"tracking_number": "T2", "shipment_date": "2024-05-08", "received_date": "2024-05-09", "shipment_type": "Outbound"},
        {"tracking_number": "T3", "shipment_date": "2024-05-03", "received_date": "2024-05-20", "shipment_type": "Inbound"},
        {"tracking_number": "T4", "shipment_date": None, "received_date": None, "shipment_type": "Outbound"},
    ]

    assert [s["tracking_number"] for s in inbound_shipments(logs, TODAY)] == ["T1", "T3", "T4"]
    assert [s["tracking_number"] for s in outbound_shipments(logs)] == ["T2", "T4"]
    assert [s["tracking_number"] for s in recent_shipments(logs)] == ["T2", "T3", "T1"]


def test_shipment_logs_upsert_on_tracking_number(public):
    upsert_shipment_logs([{"tracking_number": "T1", "status": "In Transit"}, {"vendor": "Acme"}], public)
    upsert_shipment_logs([{"tracking_number": "T1", "status": "Delivered"}], public)

    rows = public.select("shipmentlogs", order_by="id")
    assert len(rows) == 2
    assert rows[0]["status"] == "Delivered"
