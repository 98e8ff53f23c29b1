from __future__ import annotations

import pytest

from src.attendance_portal.attendance_portal.main import create_app
from src.attendance_portal.attendance_portal.requests.model import NewRequestInput


@pytest.fixture
def app():
    return create_app("config.testing")


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, username):
    resp = client.post("/login", json={"username": username, "password": "password"})
    assert resp.status_code == 200
    return resp


def submit(client, **overrides):
    body = {"subject": "Math", "date": "2024-03-10", "reason": "sick", "sentTo": "hod"}
    body.update(overrides)
    return client.post("/requests", json=body)


def test_login_rejects_bad_password(client):
    resp = client.post("/login", json={"username": "student1", "password": "nope"})
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Invalid username or password"


def test_endpoints_require_login(client):
    assert client.get("/requests").status_code == 401
    assert client.get("/me").status_code == 401


def test_roles_are_enforced(client):
    login(client, "student1")
    assert client.get("/queue").status_code == 403
    assert client.post("/holidays", json={"date": "2024-03-25", "label": "Holi"}).status_code == 403


def test_student_submits_and_hod_rejects(client):
    login(client, "student1")
    resp = submit(client)
    assert resp.status_code == 201
    request_id = resp.get_json()["created"][0]["id"]

    client.post("/logout")
    login(client, "hod1")
    queue = client.get("/queue").get_json()
    assert queue["queue"] == "pendingRequests"
    assert [r["id"] for r in queue["requests"]] == [request_id]
    assert queue["requests"][0]["pendingSince"]
    assert "Invalid date" in queue["rejectionReasons"]

    resp = client.post(f"/queue/{request_id}/reject", json={"rejectionReason": "Invalid date"})
    assert resp.status_code == 200
    assert resp.get_json()["request"]["status"] == "rejected"

    again = client.post(f"/queue/{request_id}/approve")
    assert again.status_code == 409

    client.post("/logout")
    login(client, "student1")
    mine = client.get("/requests").get_json()["requests"]
    assert mine[0]["status"] == "rejected"
    assert mine[0]["rejectionReason"] == "Invalid date"


def test_submit_validation_error_is_400(client):
    login(client, "student1")
    resp = submit(client, subject="")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Subject is required"


def test_faculty_cannot_review_hod_queue(client):
    login(client, "student1")
    request_id = submit(client).get_json()["created"][0]["id"]

    client.post("/logout")
    login(client, "faculty1")
    assert client.post(f"/queue/{request_id}/approve").status_code == 404


def test_bulk_and_keyword_review(client):
    login(client, "student1")
    submit(client, sentTo="faculty", reason="fever")
    submit(client, sentTo="faculty", reason="travel")
    both = submit(client, sentTo="both", reason="wedding").get_json()["created"]
    assert len(both) == 2

    client.post("/logout")
    login(client, "faculty1")
    resp = client.post("/queue/keyword", json={"keyword": "FEVER", "decision": "approved"})
    assert resp.get_json()["reviewed"] == 1

    pending = [r["id"] for r in client.get("/queue?status=pending").get_json()["requests"]]
    assert len(pending) == 2
    resp = client.post("/queue/bulk", json={"ids": pending + ["missing"], "decision": "rejected"})
    assert resp.get_json()["reviewed"] == 2

    # faculty approvals never reach the HOD-approved list
    assert client.get("/approved").get_json()["requests"] == []


def test_statistics_and_notifications(client):
    login(client, "student1")
    submit(client, urgent=True)

    stats = client.get("/statistics").get_json()
    assert stats["total"] == 1
    assert stats["pending"] == 1
    assert stats["averageResponse"] == "No data"

    feed = client.get("/notifications").get_json()
    assert feed["unread"] == 1
    assert feed["notifications"][0]["message"].startswith("URGENT: ")

    assert client.post("/notifications/read-all").get_json()["unread"] == 0
    assert client.delete("/notifications").status_code == 200
    assert client.get("/notifications").get_json()["notifications"] == []


def test_export_csv_and_report(client):
    login(client, "student1")
    assert client.get("/export/csv").status_code == 400

    submit(client)
    resp = client.get("/export/csv?filename=my_requests")
    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "attachment; filename=my_requests_" in resp.headers["Content-Disposition"]
    assert resp.get_data(as_text=True).startswith("Student Name,")

    report = client.get("/export/report")
    assert report.status_code == 200
    assert report.data[:2] == b"PK"


def test_calendar_and_holidays(client):
    login(client, "student1")
    submit(client)

    view = client.get("/calendar?year=2024&month=3").get_json()
    assert view["title"] == "March 2024"
    cells = {c["date"]: c for week in view["weeks"] for c in week if c}
    assert cells["2024-03-10"]["status"] == "pending"

    client.post("/logout")
    login(client, "hod1")
    assert client.post("/holidays", json={"date": "2024-03-25", "label": "Holi"}).status_code == 201
    holidays = client.get("/holidays?year=2024").get_json()["holidays"]
    assert holidays["2024-03-25"] == "Holi"
    assert client.delete("/holidays/2024-03-25").status_code == 200
    assert client.delete("/holidays/2024-03-25").status_code == 404


def test_non_text_json_fields_are_400(client):
    login(client, "student1")
    resp = submit(client, subject=123)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Subject must be text"

    client.post("/logout")
    login(client, "hod1")
    resp = client.post("/queue/keyword", json={"keyword": 5, "decision": "approved"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Keyword must be text"

    assert client.post("/login", json={"username": ["hod1"], "password": 1}).status_code == 401


def test_student_subject_choices_only_cover_own_requests(app, client):
    store = app.extensions["attendance_portal"].request_store
    store.submit(
        NewRequestInput(subject="Chemistry", date="2024-03-11", reason="travel"),
        student_name="student2",
    )

    login(client, "student1")
    submit(client)

    body = client.get("/requests").get_json()
    assert body["subjects"] == ["Math"]
    assert [r["studentName"] for r in body["requests"]] == ["student1"]
