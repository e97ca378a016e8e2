from datetime import date, datetime, timedelta

from civitasfix import stats
from civitasfix.models import Report, ReportStatus

from .conftest import auth_headers


def _set_status(client, user, report_id, status):
    r = client.patch(f"/reports/{report_id}/status", json={"status": status}, headers=auth_headers(user))
    assert r.status_code == 200, r.text


def test_summary_is_scoped_to_student(client, student, other_student, lecturer, create_report):
    mine = create_report(student)
    create_report(student, title="Window")
    create_report(other_student)
    _set_status(client, lecturer, mine["id"], "CONFIRMED")

    r = client.get("/stats/summary", headers=auth_headers(student))
    assert r.status_code == 200
    summary = r.json()["summary"]
    assert summary["total"] == 2
    assert summary["pending"] == 1
    assert summary["confirmed"] == 1
    assert summary["completed"] == 0
    assert summary["weekly"] == 2
    assert summary["monthly"] == 2

    r = client.get("/stats/summary", headers=auth_headers(lecturer))
    assert r.json()["summary"]["total"] == 3


def test_summary_weekly_and_monthly_windows(client, db, student, create_report):
    old = create_report(student)
    older = create_report(student)
    db.get(Report, old["id"]).created_at = datetime.utcnow() - timedelta(days=10)
    db.get(Report, older["id"]).created_at = datetime.utcnow() - timedelta(days=45)
    db.commit()
    create_report(student)

    summary = client.get("/stats/summary", headers=auth_headers(student)).json()["summary"]
    assert summary["total"] == 3
    assert summary["weekly"] == 1
    assert summary["monthly"] == 2


def test_weekly_breakdown_shape(client, student, lecturer, create_report):
    create_report(student, category="FURNITURE")
    create_report(student, category="electronic")

    r = client.get("/stats/weekly", headers=auth_headers(student))
    assert r.status_code == 200
    body = r.json()["stats"]
    assert set(body["by_status"]) == {s.value for s in ReportStatus}
    assert body["by_category"]["FURNITURE"] == 1
    assert body["by_category"]["ELECTRONIC"] == 1
    assert body["by_category"]["OTHER"] == 0
    assert len(body["daily"]) == 7
    assert body["daily"][-1]["count"] == 2
    assert body["totals"] == {"all": 2, "pending": 2, "completed": 0}


def test_daily_created_buckets_oldest_first(db, student, create_report):
    report = create_report(student)
    db.get(Report, report["id"]).created_at = datetime(2024, 3, 5, 12, 0)
    db.commit()

    daily = stats.daily_created(db, student, days=3, today=date(2024, 3, 6))
    assert daily == [
        {"date": "2024-03-04", "count": 0},
        {"date": "2024-03-05", "count": 1},
        {"date": "2024-03-06", "count": 0},
    ]


def test_profile_statistics_counts_active(client, db, student, lecturer, create_report):
    a = create_report(student)
    b = create_report(student)
    c = create_report(student)
    _set_status(client, lecturer, a["id"], "CONFIRMED")
    _set_status(client, lecturer, b["id"], "IN_PROGRESS")
    _set_status(client, lecturer, c["id"], "COMPLETED")
    create_report(student)

    assert stats.profile_statistics(db, student) == {
        "total_reports": 4,
        "active_reports": 2,
        "completed_reports": 1,
        "pending_reports": 1,
    }


def test_stats_require_auth(client):
    assert client.get("/stats/summary").status_code == 401
