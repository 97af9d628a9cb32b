"""Public onboarding wizard."""

from types import SimpleNamespace

from conftest import make_application, make_onboarding

from hrms.models import GeneratedDocument, Onboarding
from hrms.services.onboarding import resolve_step

BASE = "/api/v1/public/onboarding"


def record(**kwargs):
    data = {
        "nda_status": "pending",
        "offer_status": "pending",
        "photo_url": None,
        "id_proof_url": None,
        "residential_address": None,
    }
    data.update(kwargs)
    return SimpleNamespace(**data)


def test_resolve_step_from_fields():
    assert resolve_step(record()) == 1
    assert resolve_step(record(residential_address="   ")) == 1
    assert resolve_step(record(residential_address="12 MG Road")) == 2
    assert resolve_step(record(residential_address="12 MG Road", photo_url="p.jpg")) == 2
    assert resolve_step(record(photo_url="p.jpg", id_proof_url="id.pdf")) == 3
    assert resolve_step(record(offer_status="accepted")) == 4
    assert resolve_step(record(nda_status="signed")) == 5


def upload_files():
    return {
        "photo": ("me.jpg", b"\xff\xd8jpeg-bytes", "image/jpeg"),
        "id_proof": ("aadhaar.pdf", b"%PDF-id", "application/pdf"),
    }


def test_full_wizard(client, db, storage, generator):
    application = make_application(db, status="approved")
    onboarding = make_onboarding(db, application)
    url = f"{BASE}/{onboarding.id}"

    response = client.get(url)
    assert response.status_code == 200
    assert response.json()["step"] == 1
    assert response.json()["candidateName"] == "jane DOE"
    assert response.json()["position"] == "Ai Engineer"

    response = client.post(f"{url}/address", json={"residentialAddress": "12 MG Road, Bengaluru"})
    assert response.status_code == 200
    assert response.json()["step"] == 2

    response = client.post(f"{url}/documents", files=upload_files())
    assert response.status_code == 200
    body = response.json()
    assert body["step"] == 3
    assert body["photoUploaded"] and body["idProofUploaded"]
    assert not body["certificatesUploaded"]
    assert any(path.startswith(f"{onboarding.id}/photo_") for _, path in storage.objects)

    response = client.get(f"{url}/offer-letter")
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")

    response = client.post(f"{url}/accept-offer", json={"agreed": True})
    assert response.status_code == 200
    assert response.json()["step"] == 4
    assert response.json()["offerStatus"] == "accepted"

    response = client.get(f"{url}/nda")
    assert response.status_code == 200
    assert response.json()["title"] == "CONFIDENTIALITY AGREEMENT"
    assert response.json()["clauses"][0]["heading"] == "Parties"

    response = client.post(
        f"{url}/sign-nda",
        json={"agreed": True},
        headers={"User-Agent": "pytest-browser", "X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
    )
    assert response.status_code == 200
    assert response.json()["step"] == 5
    assert response.json()["ndaStatus"] == "signed"

    db.expire_all()
    saved = db.get(Onboarding, onboarding.id)
    assert saved.ip_address == "203.0.113.7"
    assert saved.user_agent == "pytest-browser"
    assert saved.nda_signed_at is not None
    nda = db.query(GeneratedDocument).filter(GeneratedDocument.doc_type == "nda").one()
    assert nda.candidate_id == application.id
    assert ("nda", {"ip_address": "203.0.113.7", "user_agent": "pytest-browser"}) in generator.calls


def test_onboarding_is_public(client, db):
    onboarding = make_onboarding(db, make_application(db, status="approved"))
    assert client.get(f"{BASE}/{onboarding.id}").status_code == 200


def test_unknown_onboarding_id(client):
    response = client.get(f"{BASE}/does-not-exist")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_cannot_skip_steps(client, db):
    onboarding = make_onboarding(db, make_application(db, status="approved"))
    url = f"{BASE}/{onboarding.id}"

    response = client.post(f"{url}/documents", files=upload_files())
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "PRECONDITION_FAILED"

    response = client.post(f"{url}/accept-offer", json={"agreed": True})
    assert response.status_code == 409

    response = client.post(f"{url}/sign-nda", json={"agreed": True})
    assert response.status_code == 409


def test_acknowledgement_required(client, db):
    onboarding = make_onboarding(
        db,
        make_application(db, status="approved"),
        residential_address="12 MG Road",
        photo_url="p.jpg",
        id_proof_url="id.pdf",
    )
    response = client.post(f"{BASE}/{onboarding.id}/accept-offer", json={"agreed": False})
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_step_never_moves_backwards(client, db):
    onboarding = make_onboarding(
        db,
        make_application(db, status="approved"),
        residential_address="12 MG Road",
        photo_url="p.jpg",
        id_proof_url="id.pdf",
        furthest_step=3,
    )
    url = f"{BASE}/{onboarding.id}"

    # Re-saving the address is allowed and keeps the step
    response = client.post(f"{url}/address", json={"residentialAddress": "221B Baker Street"})
    assert response.status_code == 200
    assert response.json()["step"] == 3

    # Blank address would fall back to step 1
    response = client.post(f"{url}/address", json={"residentialAddress": "   "})
    assert response.status_code == 422

    db.expire_all()
    assert db.get(Onboarding, onboarding.id).furthest_step == 3


def test_completed_onboarding_is_locked(client, db):
    onboarding = make_onboarding(
        db,
        make_application(db, status="approved"),
        residential_address="12 MG Road",
        photo_url="p.jpg",
        id_proof_url="id.pdf",
        offer_status="accepted",
        nda_status="signed",
        furthest_step=5,
    )
    response = client.post(f"{BASE}/{onboarding.id}/address", json={"residentialAddress": "New place"})
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"


def test_rejects_unsupported_photo_type(client, db):
    onboarding = make_onboarding(db, make_application(db, status="approved"), residential_address="12 MG Road")
    files = upload_files()
    files["photo"] = ("me.gif", b"GIF89a", "image/gif")
    response = client.post(f"{BASE}/{onboarding.id}/documents", files=files)
    assert response.status_code == 422
    assert response.json()["error"]["details"]["field"] == "photo"


def test_storage_failure_records_nothing(client, db, storage):
    onboarding = make_onboarding(db, make_application(db, status="approved"), residential_address="12 MG Road")
    storage.fail_uploads = True
    response = client.post(f"{BASE}/{onboarding.id}/documents", files=upload_files())
    assert response.status_code == 502

    db.expire_all()
    saved = db.get(Onboarding, onboarding.id)
    assert saved.photo_url is None
    assert saved.id_proof_url is None
