"""Shared fixtures: in-memory database, fake integrations and API client."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DEBUG", "false")

from datetime import date  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from hrms.config.database import Base, get_db  # noqa: E402
from hrms.integrations.s3 import S3Error, get_storage_service  # noqa: E402
from hrms.integrations.ses import SESError, get_email_service  # noqa: E402
from hrms.main import app  # noqa: E402
from hrms.models import Application, Employee, Onboarding, User  # noqa: E402
from hrms.services.documents import RenderedDocument, get_document_generator  # noqa: E402
from hrms.services.passwords import hash_password  # noqa: E402
from hrms.services.token import create_session_token  # noqa: E402

PASSWORD = "Sup3r-Secret!pw"


class FakeStorage:
    """Keeps uploaded objects in memory."""

    def __init__(self):
        self.objects: dict[tuple[str, str], bytes] = {}
        self.removed: list[str] = []
        self.fail_uploads = False

    async def upload(self, bucket, path, content, content_type=None):
        if self.fail_uploads:
            raise S3Error("storage is down")
        self.objects[(bucket, path)] = content
        return path

    async def download(self, bucket, path):
        return self.objects[(bucket, path)]

    async def exists(self, bucket, path):
        return (bucket, path) in self.objects

    async def remove(self, bucket, paths):
        for path in paths:
            self.objects.pop((bucket, path), None)
            self.removed.append(path)

    async def create_signed_url(self, bucket, path, expires_in=None, filename=None):
        return f"https://storage.test/{bucket}/{path}?signature=abc"


class FakeMailer:
    """Records sent emails; can be switched to fail."""

    def __init__(self):
        self.sent: list[dict] = []
        self.fail = False

    async def send_email(self, to, subject, html_body, text_body=None, reply_to=None, bcc=None):
        if self.fail:
            raise SESError("Email address is not verified")
        self.sent.append({"to": to, "subject": subject, "html": html_body, "bcc": bcc})
        return f"msg-{len(self.sent)}"


class FakeGenerator:
    """Returns a placeholder PDF instead of running WeasyPrint."""

    def __init__(self):
        self.calls: list[tuple[str, dict]] = []

    async def render_offer_letter(self, application, options, custom_body=None, draft=False):
        self.calls.append(("offer_letter", {"custom_body": custom_body, "draft": draft, "options": options}))
        return RenderedDocument(b"%PDF-fake offer", "Offer_Letter_Test.pdf")

    async def render_nda(self, application, signed_at, ip_address, user_agent):
        self.calls.append(("nda", {"ip_address": ip_address, "user_agent": user_agent}))
        return RenderedDocument(b"%PDF-fake nda", "NDA_Test.pdf")

    async def render_certificate(self, employee, issued_at=None):
        self.calls.append(("certificate", {"employee_id": employee.id}))
        return RenderedDocument(b"%PDF-fake certificate", f"Certificate_{employee.employee_code}.pdf")


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def client(session_factory, storage, mailer, generator):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage_service] = lambda: storage
    app.dependency_overrides[get_email_service] = lambda: mailer
    app.dependency_overrides[get_document_generator] = lambda: generator
    yield TestClient(app)
    app.dependency_overrides.clear()


# Data helpers

_counter = {"n": 0}


def _next() -> int:
    _counter["n"] += 1
    return _counter["n"]


def make_employee(db, role="employee", manager=None, first_name=None, password=None, **kwargs) -> Employee:
    n = _next()
    email = kwargs.pop("email", f"user{n}@goaitech.com")
    user = User(
        email=email,
        password_hash=hash_password(password) if password else None,
        provider="email",
    )
    db.add(user)
    db.flush()
    employee = Employee(
        auth_id=user.id,
        employee_code=f"EMP-{1000 + n}",
        first_name=first_name or f"Person{n}",
        last_name="Tester",
        email=email,
        hrms_role=role,
        status="active",
        manager_id=manager.id if manager else None,
        **kwargs,
    )
    db.add(employee)
    db.commit()
    db.refresh(employee)
    return employee


def make_user(db, email=None, password=None) -> User:
    user = User(
        email=email or f"user{_next()}@example.com",
        password_hash=hash_password(password) if password else None,
        provider="email",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_application(db, status="new", **kwargs) -> Application:
    n = _next()
    data = {
        "full_name": "jane DOE",
        "email": f"candidate{n}@example.com",
        "phone": "+91 98765 43210",
        "position": "ai engineer",
        "university": "IIT Madras",
        "resume_link": f"resume_{n}.pdf",
        "status": status,
    }
    data.update(kwargs)
    application = Application(**data)
    db.add(application)
    db.commit()
    db.refresh(application)
    return application


def make_onboarding(db, application, **kwargs) -> Onboarding:
    data = {"application_id": application.id, "personal_email": application.email, "joining_date": date(2025, 6, 1)}
    data.update(kwargs)
    record = Onboarding(**data)
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def auth_headers(employee_or_user) -> dict[str, str]:
    if isinstance(employee_or_user, Employee):
        token = create_session_token(employee_or_user.auth_id, employee_or_user.email)
    else:
        token = create_session_token(employee_or_user.id, employee_or_user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def hr_admin(db):
    return make_employee(db, role="hr_admin", first_name="Hera")


@pytest.fixture
def hr_headers(hr_admin):
    return auth_headers(hr_admin)
