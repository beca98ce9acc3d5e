import pytest

from database.models import ROLE_ADMIN, User
from modules.admin.services.seeding import SAMPLE_ORDERS, insert_test_data
from modules.user.services import create_user

API_HEADERS = {"apikey": "test-anon-key"}


@pytest.fixture
def seeded(app):
    insert_test_data()


def test_login_and_logout(app, client):
    create_user("alice", "pw", ROLE_ADMIN)

    resp = client.post("/", data={"username": "alice", "password": "pw"})
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/dashboard/")
    with client.session_transaction() as sess:
        assert sess["role"] == ROLE_ADMIN

    client.get("/logout")
    with client.session_transaction() as sess:
        assert "user_id" not in sess


def test_bad_login(app, client):
    create_user("alice", "pw", ROLE_ADMIN)
    resp = client.post("/", data={"username": "alice", "password": "nope"})
    assert resp.status_code == 200
    assert b"Invalid username or password" in resp.data


def test_pages_require_login(client):
    resp = client.get("/dashboard/")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/")


@pytest.mark.parametrize("url", [
    "/dashboard/",
    "/dashboard/?tab=overdue&q=acme",
    "/jobs/",
    "/work-centers/",
    "/work-centers/MILL",
    "/logistics/",
    "/logistics/?tab=po-tracking",
    "/logistics/?tab=job-status",
    "/purchase/",
    "/ncr/",
    "/ncr/new",
    "/admin/",
])
def test_pages_render_when_empty(auth_client, url):
    assert auth_client.get(url).status_code == 200


@pytest.mark.parametrize("url", [
    "/dashboard/",
    "/dashboard/?tab=critical",
    "/jobs/",
    f"/jobs/{SAMPLE_ORDERS[0]}",
    "/work-centers/",
    "/work-centers/MILL?status=Backlog",
    "/logistics/",
    "/logistics/?tab=shipment-log",
    "/logistics/?tab=inbound",
    "/logistics/?tab=outbound",
    "/logistics/?tab=job-status&job=1&job_tab=timeline",
    "/purchase/?q=coating",
    "/ncr/",
    "/ncr/1/edit",
    "/admin/?page=logistics&table=jobs",
])
def test_pages_render_with_data(auth_client, seeded, url):
    assert auth_client.get(url).status_code == 200


def test_unknown_job_is_404(auth_client):
    assert auth_client.get("/jobs/does-not-exist").status_code == 404


def test_api_requires_auth(client):
    resp = client.get("/api/work_centers")
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "authentication required"}

    assert client.get("/api/work_centers", headers={"apikey": "wrong"}).status_code == 401


def test_api_work_centers(client, seeded):
    resp = client.get("/api/work_centers", headers=API_HEADERS)

    data = resp.get_json()
    assert resp.status_code == 200
    assert set(data) == {"MILL", "LATHE", "SR"}
    assert data["MILL"]["planned_hours"] == 10.0
    assert data["MILL"]["actual_hours"] == 5.0


def test_api_work_center_details(client, seeded):
    resp = client.get("/api/work_center_details?center=SR&type=backlog", headers=API_HEADERS)

    data = resp.get_json()
    assert data["work_center"] == "SR"
    assert [j["job_number"] for j in data["jobs"]] == sorted(SAMPLE_ORDERS)
    assert all(j["total_hours"] == 8.0 for j in data["jobs"])


def test_api_job_operations(auth_client, seeded):
    resp = auth_client.get(f"/api/job_operations?job={SAMPLE_ORDERS[0]}&center=MILL&type=in_progress")

    data = resp.get_json()
    assert data["job_number"] == SAMPLE_ORDERS[0]
    assert [op["operation_number"] for op in data["operations"]] == ["0010"]


@pytest.mark.parametrize("url", [
    "/api/work_center_details?type=backlog",
    "/api/work_center_details?center=MILL&type=everything",
    "/api/job_operations?center=MILL&type=backlog",
])
def test_api_bad_arguments(client, url):
    assert client.get(url, headers=API_HEADERS).status_code == 400


def test_create_purchase_order(auth_client, public):
    public.insert("jobs", {"job_number": "J-1001", "title": "Housing"})

    resp = auth_client.post("/purchase/new", data={
        "po_number": "PO-77", "vendor": "Coaters", "job_number": "J-1001", "amount": "125.5",
    })

    assert resp.status_code == 302
    po = public.select("purchase_orders", {"po_number": "PO-77"})[0]
    assert po["amount"] == 125.5
    assert po["job_id"] is not None


def test_purchase_order_status(auth_client, public):
    public.insert("purchase_orders", {"po_number": "PO-1", "status": "Open"})

    auth_client.post("/purchase/PO-1/status", data={"status": "Received", "received_date": "2024-05-01"})

    po = public.select("purchase_orders", {"po_number": "PO-1"})[0]
    assert po["status"] == "Received"
    assert po["received_date"] == "2024-05-01T00:00:00"
    assert auth_client.post("/purchase/PO-404/status", data={"status": "Open"}).status_code == 404


def test_create_and_edit_ncr(auth_client, service):
    resp = auth_client.post("/ncr/new", data={
        "job_number": "J-1", "part_name": "Housing", "issue_category": "Dimensional Issue",
        "financial_impact": "200",
    })
    assert resp.status_code == 302

    ncr = service.select("ncrs")[0]
    assert ncr["ncr_number"].startswith("NCR-")
    assert ncr["status"] == "Submitted"

    auth_client.post(f"/ncr/{ncr['id']}/edit", data={"job_number": "J-1", "status": "Closed"})
    assert service.select("ncrs")[0]["status"] == "Closed"


def test_ncr_form_rejects_missing_job(auth_client, service):
    resp = auth_client.post("/ncr/new", data={"part_name": "Housing"})
    assert resp.status_code == 200
    assert service.count("ncrs") == 0


def test_job_forms(auth_client, seeded, public):
    job = public.select("jobs", {"job_number": SAMPLE_ORDERS[0]})[0]

    auth_client.post(f"/jobs/{job['id']}/priority", data={"priority": "low"})
    auth_client.post(f"/jobs/{job['id']}/notes", data={"title": "Call", "content": "Vendor"})
    auth_client.post(f"/jobs/{job['id']}/reminders", data={"date": "2024-06-01", "description": "Chase"})

    assert public.select("jobs", {"id": job["id"]})[0]["priority"] == "Low"
    assert public.count("job_notes") == 1
    assert public.count("job_reminders") == 1


def test_admin_tools(auth_client, service):
    resp = auth_client.post("/admin/test-data")
    assert resp.status_code == 302
    assert service.count("ncrs") == 1

    assert auth_client.post("/admin/diagnose/ncr").status_code == 302
    assert auth_client.post("/admin/fix/ncr").status_code == 302
    assert auth_client.post("/admin/fix/inventory").status_code == 404


def test_refresh_buttons(auth_client, seeded, public):
    public.delete("work_centers", {"name": "MILL"})

    assert auth_client.post("/work-centers/refresh").status_code == 302
    assert auth_client.post("/jobs/refresh").status_code == 302
    assert public.count("work_centers") == 3


def test_user_admin_needs_admin_role(auth_client):
    resp = auth_client.get("/user/")
    assert resp.status_code == 302


def test_user_admin(app, client):
    admin = create_user("root", "pw", ROLE_ADMIN)
    with client.session_transaction() as sess:
        sess["user_id"] = admin.id
        sess["username"] = admin.username
        sess["role"] = admin.role

    assert client.get("/user/").status_code == 200
    client.post("/user/add_user", data={"username": "bob", "password": "pw", "role": "machinist"})
    client.post("/user/add_user", data={"username": "bob", "password": "pw", "role": "machinist"})

    assert User.query.filter_by(username="bob").count() == 1
