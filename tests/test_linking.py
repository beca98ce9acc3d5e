from modules.logistics.services.linking import (
    job_match_tokens,
    link_purchase_orders_to_jobs,
    match_job_id,
    po_search_text,
)


def test_search_text_joins_fields_lower_case():
    po = {"po_number": "PO-1", "notes": "For JOB 123", "description": None, "vendor": "Acme"}
    assert po_search_text(po) == "po-1 for job 123 acme"


def test_match_tokens_include_long_suffix_only():
    assert job_match_tokens("WO-2024-10045") == ["wo-2024-10045", "10045"]
    assert job_match_tokens("WO-123") == ["wo-123"]
    assert job_match_tokens("100575804") == ["100575804"]
    assert job_match_tokens("") == []


def test_first_job_by_id_wins():
    jobs = [{"id": 1, "job_number": "A-5555"}, {"id": 2, "job_number": "B-5555"}]
    assert match_job_id({"notes": "ref 5555"}, jobs) == 1
    assert match_job_id({"notes": "nothing here"}, jobs) is None
    assert match_job_id({}, jobs) is None


def test_link_purchase_orders_is_idempotent(public):
    job_a = public.insert("jobs", {"job_number": "100575804", "title": "A"})[0]
    job_b = public.insert("jobs", {"job_number": "WO-2024-10045", "title": "B"})[0]
    public.insert("purchase_orders", [
        {"po_number": "PO1", "description": "Coating for order 100575804"},
        {"po_number": "PO2", "notes": "work order 10045"},
        {"po_number": "PO3", "notes": "stock"},
        {"po_number": "PO4", "notes": "100575804", "job_id": job_b["id"]},
    ])

    assert link_purchase_orders_to_jobs(public) == 2
    assert link_purchase_orders_to_jobs(public) == 0

    links = {po["po_number"]: po["job_id"] for po in public.select("purchase_orders")}
    assert links == {"PO1": job_a["id"], "PO2": job_b["id"], "PO3": None, "PO4": job_b["id"]}


def test_link_without_jobs(public):
    public.insert("purchase_orders", {"po_number": "PO1", "notes": "100575804"})
    assert link_purchase_orders_to_jobs(public) == 0
