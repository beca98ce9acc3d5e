from datetime import datetime

from modules.jobs_management.services.dashboard import calculate_metrics, filter_jobs, sort_jobs

TODAY = datetime(2024, 5, 10)

JOBS = [
    {"job_number": "1", "title": "Housing", "customer": "Acme", "status": "In Progress",
     "priority": "Medium", "progress": 50, "due_date": "2024-05-01T00:00:00"},
    {"job_number": "2", "title": "Bracket", "customer": "Globex", "status": "Completed",
     "priority": "Low", "progress": 100, "due_date": "2024-05-01T00:00:00"},
    {"job_number": "3", "title": "Shaft", "customer": "Acme", "status": "New",
     "priority": "High", "progress": 0, "due_date": "2024-06-30T00:00:00", "had_issues": True},
    {"job_number": "4", "title": "Plate", "customer": "Initech", "status": "In Progress",
     "priority": "Low", "progress": 80, "due_date": "2024-05-11T00:00:00"},
    {"job_number": "5", "title": "Cover", "customer": "Initech", "status": "Cancelled",
     "priority": "Low", "progress": 10, "due_date": None},
]


def test_metrics():
    m = calculate_metrics(JOBS, TODAY)

    assert m["total_jobs"] == 5
    assert m["completed_jobs"] == 1
    assert m["in_progress_jobs"] == 2
    assert m["scheduled_jobs"] == 1
    assert m["delayed_jobs"] == 1
    assert m["on_time_delivery"] == 0
    assert m["quality_rating"] == 80


def test_percentages_round_half_up():
    jobs = [{"status": "New"} for _ in range(7)] + [{"status": "New", "had_issues": True}]
    assert calculate_metrics(jobs, TODAY)["quality_rating"] == 88


def test_metrics_on_empty_list():
    m = calculate_metrics([], TODAY)
    assert m["on_time_delivery"] == 0
    assert m["quality_rating"] == 0


def test_on_time_delivery_is_never_negative():
    late = [{"status": "In Progress", "due_date": "2024-01-01"} for _ in range(3)]
    assert calculate_metrics(late, TODAY)["on_time_delivery"] == 0


def test_filter_tabs_and_search():
    assert [j["job_number"] for j in filter_jobs(JOBS, "", "all", TODAY)] == ["1", "3", "4"]
    assert [j["job_number"] for j in filter_jobs(JOBS, "acme", "all", TODAY)] == ["1", "3"]
    assert [j["job_number"] for j in filter_jobs(JOBS, "", "overdue", TODAY)] == ["1"]
    assert [j["job_number"] for j in filter_jobs(JOBS, "", "critical", TODAY)] == ["1", "3", "4"]


def test_sort_urgent_first_then_due_date():
    jobs = [
        {"job_number": "a", "priority": "Low", "progress": 90, "due_date": None},
        {"job_number": "b", "priority": "Low", "progress": 90, "due_date": "2024-05-20"},
        {"job_number": "c", "priority": "High", "progress": 90, "due_date": "2024-06-01"},
        {"job_number": "d", "priority": "Low", "progress": 10, "due_date": "2024-05-25"},
    ]

    assert [j["job_number"] for j in sort_jobs(jobs)] == ["d", "c", "b", "a"]
