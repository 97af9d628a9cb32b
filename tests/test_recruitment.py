"""Careers form, recruiter workflow and offer letters."""

from conftest import auth_headers, make_application, make_employee, make_onboarding

from hrms.config.settings import settings
from hrms.models import Application, ApplicationStatusChange, GeneratedDocument, Onboarding
from hrms.services.workflow import PeriodUnit

APPLICATIONS = "/api/v1/applications"
CAREERS = "/api/v1/public/applications"

INTERVIEW = {
    "interviewDate": "2025-06-10",
    "interviewTime": "10:30 AM",
    "mode": "Online",
    "location": "https://meet.example.com/abc",
    "interviewer": "Asha Rao",
}


def careers_form(**overrides):
    data = {
        "full_name": "Ravi Kumar",
        "email": "Ravi.Kumar@Example.com",
        "phone": "+91 99887 76655",
        "position": "Data Analyst",
        "university": "BITS Pilani",
        "graduation_year": "2025",
    }
    data.update(overrides)
    return data


def resume(name="cv.pdf", content=b"%PDF-1.4 resume"):
    return {"resume": (name, content, "application/pdf")}


# Careers form

def test_submit_application(client, db, storage, mailer, hr_admin):
    response = client.post(CAREERS, data=careers_form(), files=resume())
    assert response.status_code == 201
    application_id = response.json()["id"]

    application = db.get(Application, application_id)
    assert application.email == "ravi.kumar@example.com"
    assert application.status == "new"
    assert (settings.RESUMES_BUCKET, application.resume_link) in storage.objects

    recipients = {mail["to"] for mail in mailer.sent}
    assert recipients == {"ravi.kumar@example.com", hr_admin.email}


def test_duplicate_application_rejected(client):
    assert client.post(CAREERS, data=careers_form(), files=resume()).status_code == 201
    response = client.post(CAREERS, data=careers_form(email="ravi.kumar@example.com"), files=resume())
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"

    # Same person, different position is fine
    response = client.post(CAREERS, data=careers_form(position="ML Intern"), files=resume())
    assert response.status_code == 201


def test_application_email_failure_does_not_fail_submission(client, mailer):
    mailer.fail = True
    response = client.post(CAREERS, data=careers_form(), files=resume())
    assert response.status_code == 201


def test_resume_type_and_size(client):
    response = client.post(CAREERS, data=careers_form(), files=resume("cv.exe"))
    assert response.status_code == 422
    assert response.json()["error"]["details"]["field"] == "resume"

    too_big = b"0" * (settings.MAX_RESUME_SIZE_MB * 1024 * 1024 + 1)
    response = client.post(CAREERS, data=careers_form(), files=resume(content=too_big))
    assert response.status_code == 422


def test_invalid_form_fields(client):
    response = client.post(CAREERS, data=careers_form(email="not-an-email"), files=resume())
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


# Access control

def test_recruiter_endpoints_require_auth(client):
    response = client.get(APPLICATIONS)
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHENTICATED"


def test_recruiter_endpoints_require_hr_role(client, db):
    employee = make_employee(db)
    response = client.get(APPLICATIONS, headers=auth_headers(employee))
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


def test_super_admin_inherits_hr_access(client, db):
    admin = make_employee(db, role="super_admin")
    assert client.get(APPLICATIONS, headers=auth_headers(admin)).status_code == 200


# Listing and status changes

def test_list_with_stats(client, db, hr_headers):
    make_application(db, status="new", full_name="Alpha One")
    make_application(db, status="new", full_name="Beta Two")
    make_application(db, status="interviewed", full_name="Gamma Three")

    response = client.get(APPLICATIONS, headers=hr_headers)
    body = response.json()
    assert body["total"] == 3
    assert body["stats"]["new"] == 2
    assert body["stats"]["interviewed"] == 1
    assert body["stats"]["total"] == 3

    response = client.get(APPLICATIONS, params={"search": "gamma"}, headers=hr_headers)
    assert [a["fullName"] for a in response.json()["data"]] == ["Gamma Three"]


def test_detail_lists_available_actions(client, db, hr_headers):
    application = make_application(db, status="interviewed")
    body = client.get(f"{APPLICATIONS}/{application.id}", headers=hr_headers).json()
    assert body["availableActions"] == ["approve", "hold", "reject", "edit_offer", "preview_offer", "share_offer"]
    assert body["canProvision"] is False
    assert body["onboarding"] is None


def test_plain_status_change_is_audited(client, db, hr_admin, hr_headers):
    application = make_application(db, status="new")
    response = client.patch(
        f"{APPLICATIONS}/{application.id}/status",
        json={"status": "reviewing", "comment": "Strong CV"},
        headers=hr_headers,
    )
    assert response.status_code == 200
    assert response.json()["status"] == "reviewing"
    assert response.json()["statusHistory"][0]["comment"] == "Strong CV"

    change = db.query(ApplicationStatusChange).filter_by(application_id=application.id).one()
    assert (change.action, change.from_status, change.to_status) == ("review", "new", "reviewing")
    assert change.user_id == hr_admin.auth_id


def test_invalid_transition(client, db, hr_headers):
    application = make_application(db, status="new")
    response = client.patch(f"{APPLICATIONS}/{application.id}/status", json={"status": "hired"}, headers=hr_headers)
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INVALID_TRANSITION"


def test_side_effect_statuses_need_their_operation(client, db, hr_headers):
    application = make_application(db, status="shortlisted")
    response = client.patch(
        f"{APPLICATIONS}/{application.id}/status",
        json={"status": "interview_scheduled"},
        headers=hr_headers,
    )
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "PRECONDITION_FAILED"


def test_notes_and_resume_link(client, db, hr_headers):
    application = make_application(db, status="reviewing")
    response = client.patch(f"{APPLICATIONS}/{application.id}/notes", json={"notes": "Call back"}, headers=hr_headers)
    assert response.json()["notes"] == "Call back"

    response = client.get(f"{APPLICATIONS}/{application.id}/resume", headers=hr_headers)
    assert response.status_code == 200
    assert application.resume_link in response.json()["url"]


# Interview and decision

def test_schedule_interview_sends_invite(client, db, mailer, hr_headers):
    application = make_application(db, status="shortlisted")
    response = client.post(f"{APPLICATIONS}/{application.id}/interview", json=INTERVIEW, headers=hr_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "interview_scheduled"
    assert len(mailer.sent) == 1
    assert mailer.sent[0]["to"] == application.email
    assert "June 10, 2025" in mailer.sent[0]["html"]


def test_failed_invite_keeps_status(client, db, mailer, hr_headers):
    application = make_application(db, status="shortlisted")
    mailer.fail = True
    response = client.post(f"{APPLICATIONS}/{application.id}/interview", json=INTERVIEW, headers=hr_headers)
    assert response.status_code == 502
    assert response.json()["error"]["code"] == "EXTERNAL_SERVICE_ERROR"

    db.expire_all()
    assert db.get(Application, application.id).status == "shortlisted"


def test_interview_from_wrong_status_sends_nothing(client, db, mailer, hr_headers):
    application = make_application(db, status="new")
    response = client.post(f"{APPLICATIONS}/{application.id}/interview", json=INTERVIEW, headers=hr_headers)
    assert response.status_code == 409
    assert mailer.sent == []


def test_approve_emails_candidate(client, db, mailer, hr_headers):
    application = make_application(db, status="interviewed")
    response = client.post(f"{APPLICATIONS}/{application.id}/decision", json={"decision": "approve"}, headers=hr_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "approved"
    assert "Congratulations" in mailer.sent[0]["subject"]


def test_reject_needs_no_email(client, db, mailer, hr_headers):
    application = make_application(db, status="interviewed")
    mailer.fail = True
    response = client.post(f"{APPLICATIONS}/{application.id}/decision", json={"decision": "reject"}, headers=hr_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "rejected"
    assert response.json()["availableActions"] == []


def test_held_candidate_approved_later(client, db, mailer, hr_headers):
    application = make_application(db, status="on_hold")
    body = client.get(f"{APPLICATIONS}/{application.id}", headers=hr_headers).json()
    assert body["availableActions"] == ["approve", "reject"]

    response = client.post(f"{APPLICATIONS}/{application.id}/decision", json={"decision": "approve"}, headers=hr_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "approved"
    assert "Congratulations" in mailer.sent[0]["subject"]


# Offer letter

def test_offer_details_defaults(client, db, hr_headers):
    application = make_application(db, status="approved")
    response = client.get(f"{APPLICATIONS}/{application.id}/offer", headers=hr_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["periodCount"] == 6
    assert body["letterType"] == "internship"
    assert body["defaultBody"].startswith("Dear Jane Doe,")
    assert body["resolvedBody"] == body["defaultBody"]


def test_offer_details_read_creates_no_record(client, db, hr_headers):
    application = make_application(db, status="new")
    response = client.get(f"{APPLICATIONS}/{application.id}/offer", headers=hr_headers)
    assert response.status_code == 200
    assert response.json()["onboardingId"] is None
    assert response.json()["personalEmail"] == application.email
    assert db.query(Onboarding).filter_by(application_id=application.id).count() == 0


def test_save_custom_offer_body(client, db, hr_headers):
    application = make_application(db, status="approved")
    response = client.put(
        f"{APPLICATIONS}/{application.id}/offer",
        json={"periodCount": 3, "periodUnit": "months", "offerLetterBody": "Custom letter text"},
        headers=hr_headers,
    )
    assert response.status_code == 200
    assert response.json()["resolvedBody"] == "Custom letter text"
    assert "3 months" in response.json()["defaultBody"]


def test_offer_details_need_interview(client, db, hr_headers):
    application = make_application(db, status="reviewing")
    response = client.put(f"{APPLICATIONS}/{application.id}/offer", json={}, headers=hr_headers)
    assert response.status_code == 409


def test_preview_renders_draft_before_sharing(client, db, generator, hr_headers):
    application = make_application(db, status="approved")
    response = client.get(f"{APPLICATIONS}/{application.id}/offer/preview", headers=hr_headers)
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert generator.calls[-1][1]["draft"] is True
    assert db.query(GeneratedDocument).count() == 0


def test_share_requires_confirmation(client, db, mailer, hr_headers):
    application = make_application(db, status="approved")
    response = client.post(f"{APPLICATIONS}/{application.id}/offer/share", json={"confirm": False}, headers=hr_headers)
    assert response.status_code == 422
    assert mailer.sent == []


def test_share_offer_letter(client, db, storage, mailer, hr_headers):
    application = make_application(db, status="interviewed")
    response = client.post(
        f"{APPLICATIONS}/{application.id}/offer/share",
        json={"confirm": True, "personalEmail": "jane.personal@example.com"},
        headers=hr_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "approved"
    assert body["emailSent"] is True
    assert body["onboardingUrl"].endswith(f"/onboarding/{body['onboardingId']}")

    assert mailer.sent[-1]["to"] == "jane.personal@example.com"
    assert body["onboardingUrl"] in mailer.sent[-1]["html"]

    document = db.get(GeneratedDocument, body["documentId"])
    assert document.doc_type == "offer_letter"
    assert (settings.GENERATED_DOCS_BUCKET, document.file_path) in storage.objects


def test_share_keeps_saved_offer(client, db, generator, hr_headers):
    application = make_application(db, status="approved")
    response = client.put(
        f"{APPLICATIONS}/{application.id}/offer",
        json={
            "periodCount": 3,
            "periodUnit": "weeks",
            "customPosition": "ml researcher",
            "offerLetterBody": "HR EDITED BODY",
        },
        headers=hr_headers,
    )
    assert response.status_code == 200

    response = client.post(f"{APPLICATIONS}/{application.id}/offer/share", json={"confirm": True}, headers=hr_headers)
    assert response.status_code == 200

    kind, rendered = generator.calls[-1]
    assert kind == "offer_letter"
    assert rendered["custom_body"] == "HR EDITED BODY"
    assert rendered["draft"] is False
    assert rendered["options"].period_count == 3
    assert rendered["options"].period_unit == PeriodUnit.WEEKS
    assert rendered["options"].position_override == "ml researcher"

    db.expire_all()
    record = db.query(Onboarding).filter_by(application_id=application.id).one()
    assert record.offer_letter_body == "HR EDITED BODY"
    assert record.custom_position == "ml researcher"
    assert (record.period_count, record.period_unit) == (3, "weeks")


def test_share_applies_only_sent_fields(client, db, generator, hr_headers):
    application = make_application(db, status="approved")
    client.put(
        f"{APPLICATIONS}/{application.id}/offer",
        json={"periodCount": 3, "offerLetterBody": "HR EDITED BODY"},
        headers=hr_headers,
    )
    response = client.post(
        f"{APPLICATIONS}/{application.id}/offer/share",
        json={"confirm": True, "letterType": "project"},
        headers=hr_headers,
    )
    assert response.status_code == 200

    db.expire_all()
    record = db.query(Onboarding).filter_by(application_id=application.id).one()
    assert record.letter_type == "project"
    assert record.period_count == 3
    assert record.offer_letter_body == "HR EDITED BODY"


def test_resharing_keeps_one_offer_letter(client, db, storage, hr_headers):
    application = make_application(db, status="approved")
    for _ in range(3):
        response = client.post(f"{APPLICATIONS}/{application.id}/offer/share", json={"confirm": True}, headers=hr_headers)
        assert response.status_code == 200

    letters = db.query(GeneratedDocument).filter_by(candidate_id=application.id, doc_type="offer_letter").all()
    assert len(letters) == 1
    stored = [path for bucket, path in storage.objects if bucket == settings.GENERATED_DOCS_BUCKET]
    assert stored == [letters[0].file_path]

    response = client.get(
        f"{APPLICATIONS}/{application.id}/offer/preview",
        headers=hr_headers,
        follow_redirects=False,
    )
    assert response.status_code == 307
    assert letters[0].file_path in response.headers["location"]


def test_share_email_failure_keeps_letter(client, db, mailer, hr_headers):
    application = make_application(db, status="interviewed")
    mailer.fail = True
    response = client.post(f"{APPLICATIONS}/{application.id}/offer/share", json={"confirm": True}, headers=hr_headers)
    assert response.status_code == 502
    assert "Letter saved" in response.json()["error"]["message"]

    db.expire_all()
    assert db.get(Application, application.id).status == "interviewed"
    assert db.query(GeneratedDocument).filter_by(candidate_id=application.id).count() == 1


def test_application_documents(client, db, hr_headers):
    application = make_application(db, status="approved")
    make_onboarding(db, application)
    client.post(f"{APPLICATIONS}/{application.id}/offer/share", json={"confirm": True}, headers=hr_headers)

    response = client.get(f"{APPLICATIONS}/{application.id}/documents", headers=hr_headers)
    assert response.json()["total"] == 1
    assert response.json()["data"][0]["docType"] == "offer_letter"
