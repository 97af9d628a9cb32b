"""Employee directory, self-service profile and certificates."""

from conftest import PASSWORD, auth_headers, make_application, make_employee

from hrms.models import GeneratedDocument

EMPLOYEES = "/api/v1/employees"


def employee_body(**overrides):
    body = {
        "firstName": "Ravi",
        "lastName": "Kumar",
        "email": "Ravi.Kumar@goaitech.com",
        "password": PASSWORD,
        "designation": "Data Analyst",
        "hrmsRole": "employee",
    }
    body.update(overrides)
    return body


def test_hr_creates_and_lists_employees(client, hr_headers):
    response = client.post(EMPLOYEES, json=employee_body(), headers=hr_headers)
    assert response.status_code == 201
    created = response.json()
    assert created["email"] == "ravi.kumar@goaitech.com"
    assert created["fullName"] == "Ravi Kumar"
    assert created["employeeCode"].startswith("EMP-")
    assert created["status"] == "active"

    listed = client.get(EMPLOYEES, params={"search": "analyst"}, headers=hr_headers).json()
    assert [e["id"] for e in listed["data"]] == [created["id"]]

    response = client.post(
        "/api/v1/auth/login", json={"email": "ravi.kumar@goaitech.com", "password": PASSWORD}
    )
    assert response.status_code == 200


def test_duplicate_email(client, hr_headers):
    client.post(EMPLOYEES, json=employee_body(), headers=hr_headers)
    response = client.post(EMPLOYEES, json=employee_body(), headers=hr_headers)
    assert response.status_code == 409


def test_password_policy(client, hr_headers):
    response = client.post(EMPLOYEES, json=employee_body(password="password"), headers=hr_headers)
    assert response.status_code == 422
    assert response.json()["error"]["details"]["field"] == "password"


def test_directory_requires_hr(client, db):
    employee = make_employee(db, role="team_manager")
    assert client.get(EMPLOYEES, headers=auth_headers(employee)).status_code == 403
    assert client.post(EMPLOYEES, json=employee_body(), headers=auth_headers(employee)).status_code == 403


def test_hr_updates_employee(client, db, hr_headers):
    manager = make_employee(db, role="team_manager")
    employee = make_employee(db)
    response = client.patch(
        f"{EMPLOYEES}/{employee.id}",
        json={"managerId": manager.id, "designation": "ML Engineer"},
        headers=hr_headers,
    )
    assert response.status_code == 200
    assert response.json()["managerId"] == manager.id
    assert response.json()["designation"] == "ML Engineer"

    response = client.patch(f"{EMPLOYEES}/{employee.id}", json={"managerId": employee.id}, headers=hr_headers)
    assert response.status_code == 422

    response = client.patch(f"{EMPLOYEES}/{employee.id}", json={"status": "fired"}, headers=hr_headers)
    assert response.status_code == 422


def test_deactivated_employee_loses_access(client, db, hr_headers):
    employee = make_employee(db)
    client.patch(f"{EMPLOYEES}/{employee.id}", json={"status": "inactive"}, headers=hr_headers)
    assert client.get(f"{EMPLOYEES}/me", headers=auth_headers(employee)).status_code == 403


def test_unknown_employee(client, hr_headers):
    response = client.get(f"{EMPLOYEES}/nope", headers=hr_headers)
    assert response.status_code == 404
    assert response.json()["error"]["details"] == {"resource": "Employee", "id": "nope"}


def test_self_service_profile(client, db):
    employee = make_employee(db)
    headers = auth_headers(employee)

    assert client.get(f"{EMPLOYEES}/me", headers=headers).json()["id"] == employee.id

    response = client.patch(
        f"{EMPLOYEES}/me",
        json={"phoneNumber": " +91 90000 00000 ", "emergencyContactName": "Asha"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["phoneNumber"] == "+91 90000 00000"
    assert response.json()["emergencyContactName"] == "Asha"

    # role is not self-editable
    response = client.patch(f"{EMPLOYEES}/me", json={"hrmsRole": "hr_admin"}, headers=headers)
    assert response.json()["hrmsRole"] == "employee"


def test_profile_photo(client, db, storage):
    employee = make_employee(db)
    headers = auth_headers(employee)

    assert client.get(f"{EMPLOYEES}/me/photo", headers=headers).status_code == 422

    response = client.post(
        f"{EMPLOYEES}/me/photo", files={"photo": ("me.png", b"\x89PNG", "image/png")}, headers=headers
    )
    assert response.status_code == 200
    assert response.json()["photoUrl"].startswith(f"avatars/{employee.employee_code}_")

    url = client.get(f"{EMPLOYEES}/me/photo", headers=headers).json()["url"]
    assert url.startswith("https://storage.test/onboarding_docs/avatars/")

    response = client.post(
        f"{EMPLOYEES}/me/photo", files={"photo": ("me.pdf", b"%PDF", "application/pdf")}, headers=headers
    )
    assert response.status_code == 422


def test_certificate_and_document_access(client, db, storage, generator, hr_headers):
    employee = make_employee(db, designation="Data Analyst")
    other = make_employee(db)

    response = client.post(f"{EMPLOYEES}/{employee.id}/certificate", headers=hr_headers)
    assert response.status_code == 201
    document = response.json()
    assert document["docType"] == "certificate"
    assert document["employeeId"] == employee.id
    assert ("certificate", {"employee_id": employee.id}) in generator.calls
    assert ("hrms_generated_docs", document["filePath"]) in storage.objects

    mine = client.get(f"{EMPLOYEES}/me/documents", headers=auth_headers(employee)).json()
    assert [d["id"] for d in mine["data"]] == [document["id"]]
    assert client.get(f"{EMPLOYEES}/{employee.id}/documents", headers=hr_headers).json()["total"] == 1

    url = f"/api/v1/documents/{document['id']}/url"
    response = client.get(url, headers=auth_headers(employee))
    assert response.status_code == 200
    assert response.json()["url"].startswith("https://storage.test/hrms_generated_docs/")

    assert client.get(url, headers=hr_headers).status_code == 200
    assert client.get(url, headers=auth_headers(other)).status_code == 404


def test_candidate_documents_follow_the_hire(client, db, hr_headers):
    application = make_application(db, status="hired")
    employee = make_employee(db, application_id=application.id)
    nda = GeneratedDocument(candidate_id=application.id, doc_type="nda", file_path=f"{application.id}/1_NDA.pdf")
    db.add(nda)
    db.commit()

    mine = client.get(f"{EMPLOYEES}/me/documents", headers=auth_headers(employee)).json()
    assert [d["docType"] for d in mine["data"]] == ["nda"]
    assert client.get(f"/api/v1/documents/{nda.id}/url", headers=auth_headers(employee)).status_code == 200


def test_certificate_generation_failure(client, db, generator, hr_headers):
    from hrms.services.documents import DocumentError

    async def broken(employee, issued_at=None):
        raise DocumentError("WeasyPrint not available - cannot generate PDF documents")

    generator.render_certificate = broken
    employee = make_employee(db)
    response = client.post(f"{EMPLOYEES}/{employee.id}/certificate", headers=hr_headers)
    assert response.status_code == 502
    assert response.json()["error"]["details"] == {"service": "documents"}
    assert db.query(GeneratedDocument).count() == 0


def test_health(client):
    assert client.get("/health").status_code == 200
    body = client.get("/api/v1/health").json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"
    assert client.get("/api/v1/health/live").json() == {"status": "alive"}
