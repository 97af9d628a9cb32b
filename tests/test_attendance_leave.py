"""Attendance clocking, daily report and leave reviews."""

from datetime import datetime

import pytest
from conftest import auth_headers, make_application, make_employee, make_user

from hrms.models import Attendance
from hrms.models.base import utcnow
from hrms.services.attendance import derive_day_status, format_worked
from hrms.services.leave import leave_day_count

ATTENDANCE = "/api/v1/attendance"
LEAVE = "/api/v1/leave-requests"


@pytest.fixture
def team(db):
    manager = make_employee(db, role="team_manager", first_name="Mona")
    alice = make_employee(db, manager=manager, first_name="Alice")
    bob = make_employee(db, manager=manager, first_name="Bob")
    outsider = make_employee(db, first_name="Omar")
    return manager, alice, bob, outsider


def test_day_status_and_duration():
    start = datetime(2025, 6, 2, 9, 0)
    assert derive_day_status(None, None) == "absent"
    assert derive_day_status(start, None) == "partial"
    assert derive_day_status(start, datetime(2025, 6, 2, 17, 45)) == "present"
    assert format_worked(start, datetime(2025, 6, 2, 17, 45)) == "8h 45m"
    assert format_worked(start, None) is None


def test_leave_day_count_is_inclusive():
    assert leave_day_count(datetime(2025, 6, 2).date(), datetime(2025, 6, 2).date()) == 1
    assert leave_day_count(datetime(2025, 6, 2).date(), datetime(2025, 6, 4).date()) == 3


# Attendance

def test_clock_in_and_out(client, db, team):
    _, alice, _, _ = team
    headers = auth_headers(alice)

    today = client.get(f"{ATTENDANCE}/today", headers=headers).json()
    assert today["status"] == "absent"
    assert today["id"] is None

    response = client.post(f"{ATTENDANCE}/clock-in", headers=headers)
    assert response.status_code == 200
    assert response.json()["status"] == "partial"
    assert response.json()["checkIn"] is not None

    response = client.post(f"{ATTENDANCE}/clock-in", headers=headers)
    assert response.status_code == 409

    response = client.post(f"{ATTENDANCE}/clock-out", headers=headers)
    assert response.status_code == 200
    assert response.json()["status"] == "present"
    assert response.json()["worked"].endswith("m")

    response = client.post(f"{ATTENDANCE}/clock-out", headers=headers)
    assert response.status_code == 409

    assert db.query(Attendance).filter_by(employee_id=alice.id).count() == 1


def test_clock_out_without_clock_in(client, team):
    _, alice, _, _ = team
    response = client.post(f"{ATTENDANCE}/clock-out", headers=auth_headers(alice))
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"


def test_clock_in_needs_employee_record(client, db):
    user = make_user(db)
    response = client.post(f"{ATTENDANCE}/clock-in", headers=auth_headers(user))
    assert response.status_code == 403


def test_daily_report_scoped_to_team(client, db, team):
    manager, alice, bob, outsider = team
    client.post(f"{ATTENDANCE}/clock-in", headers=auth_headers(alice))

    response = client.get(ATTENDANCE, headers=auth_headers(manager))
    assert response.status_code == 200
    rows = {row["employeeId"]: row for row in response.json()["data"]}
    assert set(rows) == {manager.id, alice.id, bob.id}
    assert rows[alice.id]["status"] == "partial"
    assert rows[bob.id]["status"] == "absent"


def test_daily_report_search_and_hr_scope(client, db, team, hr_headers):
    _, alice, _, outsider = team
    response = client.get(ATTENDANCE, params={"search": "omar"}, headers=hr_headers)
    assert [row["employeeId"] for row in response.json()["data"]] == [outsider.id]

    response = client.get(ATTENDANCE, params={"date": "2020-01-01"}, headers=hr_headers)
    assert all(row["status"] == "absent" for row in response.json()["data"])


def test_daily_report_forbidden_for_employees(client, team):
    _, alice, _, _ = team
    assert client.get(ATTENDANCE, headers=auth_headers(alice)).status_code == 403


# Leave

def leave_body(**overrides):
    body = {"leaveType": "Casual", "startDate": "2025-07-01", "endDate": "2025-07-03", "reason": "Family event"}
    body.update(overrides)
    return body


def test_submit_leave(client, team):
    _, alice, _, _ = team
    response = client.post(LEAVE, json=leave_body(), headers=auth_headers(alice))
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending"
    assert body["days"] == 3
    assert body["leaveType"] == "casual"

    mine = client.get(f"{LEAVE}/mine", headers=auth_headers(alice)).json()
    assert mine["total"] == 1


def test_leave_dates_validated(client, team):
    _, alice, _, _ = team
    response = client.post(LEAVE, json=leave_body(endDate="2025-06-30"), headers=auth_headers(alice))
    assert response.status_code == 422


def test_recent_requests_are_capped(client, team):
    _, alice, _, _ = team
    for day in range(1, 8):
        client.post(
            LEAVE,
            json=leave_body(startDate=f"2025-08-0{day}", endDate=f"2025-08-0{day}"),
            headers=auth_headers(alice),
        )
    assert client.get(f"{LEAVE}/mine", headers=auth_headers(alice)).json()["total"] == 5


def test_manager_reviews_team_leave_once(client, team):
    manager, alice, _, _ = team
    leave_id = client.post(LEAVE, json=leave_body(), headers=auth_headers(alice)).json()["id"]

    pending = client.get(LEAVE, params={"status": "pending"}, headers=auth_headers(manager)).json()
    assert [r["id"] for r in pending["data"]] == [leave_id]

    response = client.post(
        f"{LEAVE}/{leave_id}/review",
        json={"decision": "approved", "comment": "Enjoy"},
        headers=auth_headers(manager),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "approved"
    assert response.json()["reviewedBy"] == manager.id
    assert response.json()["managerComment"] == "Enjoy"

    response = client.post(f"{LEAVE}/{leave_id}/review", json={"decision": "rejected"}, headers=auth_headers(manager))
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INVALID_TRANSITION"


def test_cannot_review_own_leave(client, team, hr_headers):
    manager, _, _, _ = team
    leave_id = client.post(LEAVE, json=leave_body(), headers=auth_headers(manager)).json()["id"]

    response = client.post(f"{LEAVE}/{leave_id}/review", json={"decision": "approved"}, headers=auth_headers(manager))
    assert response.status_code == 403

    response = client.post(f"{LEAVE}/{leave_id}/review", json={"decision": "approved"}, headers=hr_headers)
    assert response.status_code == 200


def test_manager_cannot_see_other_teams(client, team):
    manager, _, _, outsider = team
    leave_id = client.post(LEAVE, json=leave_body(), headers=auth_headers(outsider)).json()["id"]

    listed = client.get(LEAVE, headers=auth_headers(manager)).json()
    assert leave_id not in [r["id"] for r in listed["data"]]

    response = client.post(f"{LEAVE}/{leave_id}/review", json={"decision": "approved"}, headers=auth_headers(manager))
    assert response.status_code == 404


def test_employees_cannot_review(client, team):
    _, alice, bob, _ = team
    leave_id = client.post(LEAVE, json=leave_body(), headers=auth_headers(bob)).json()["id"]
    response = client.post(f"{LEAVE}/{leave_id}/review", json={"decision": "approved"}, headers=auth_headers(alice))
    assert response.status_code == 403


def test_invalid_review_decision(client, team):
    manager, alice, _, _ = team
    leave_id = client.post(LEAVE, json=leave_body(), headers=auth_headers(alice)).json()["id"]
    response = client.post(f"{LEAVE}/{leave_id}/review", json={"decision": "maybe"}, headers=auth_headers(manager))
    assert response.status_code == 422


# Dashboard

def test_dashboard_stats(client, db, team, hr_headers):
    manager, alice, bob, _ = team
    client.post(f"{ATTENDANCE}/clock-in", headers=auth_headers(alice))
    today = utcnow().date().isoformat()
    leave_id = client.post(
        LEAVE, json=leave_body(startDate=today, endDate=today), headers=auth_headers(bob)
    ).json()["id"]
    client.post(f"{LEAVE}/{leave_id}/review", json={"decision": "approved"}, headers=auth_headers(manager))
    client.post(LEAVE, json=leave_body(), headers=auth_headers(alice))
    make_application(db, status="new")
    make_application(db, status="hired")

    stats = client.get("/api/v1/dashboard/stats", headers=hr_headers).json()
    assert stats == {
        "activeEmployees": 5,
        "presentToday": 1,
        "onLeaveToday": 1,
        "pendingLeaveRequests": 1,
        "openApplications": 1,
    }


def test_dashboard_requires_hr(client, team):
    manager, _, _, _ = team
    assert client.get("/api/v1/dashboard/stats", headers=auth_headers(manager)).status_code == 403
