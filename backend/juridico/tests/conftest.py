import os
import tempfile
from pathlib import Path

_TMP_DIR = Path(tempfile.mkdtemp(prefix="juridico-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR / 'test.db'}"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["BOOTSTRAP_ADMIN_EMAIL"] = ""
os.environ["BOOTSTRAP_ADMIN_PASSWORD"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

import json
import uuid

import httpx
import pytest
from fastapi.testclient import TestClient

from juridico.api.v1.deps import get_gateway, get_storage
from juridico.core.security import get_password_hash
from juridico.db.database import Base, SessionLocal, engine, get_db
from juridico.db.models import User, UserProfile, UserRole, UserRoleGrant
from juridico.main import app
from juridico.services.ai_gateway import AIGateway
from juridico.utils.exceptions import UploadFailedError

DEFAULT_PASSWORD = "secret123"


def override_get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def fresh_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


# ----------------------------------------------------------------------------
# External collaborators
# ----------------------------------------------------------------------------

class FakeStorage:
    """Records uploads; a filename listed in ``fail_on`` raises like S3 would."""

    def __init__(self):
        self.uploads = []
        self.fail_on = set()

    def upload_file(self, owner_id, filename, fileobj, content_type=None, size=None):
        if filename in self.fail_on:
            raise UploadFailedError(filename=filename, reason="AccessDenied")
        data = fileobj.read()
        self.uploads.append({"owner_id": owner_id, "filename": filename, "size": len(data)})
        return f"https://files.example.com/{owner_id}/{len(self.uploads)}_{filename}"


class FakeWorkflow:
    """httpx transport standing in for the workflow-engine webhooks."""

    def __init__(self):
        self.requests = []
        self.answers = {
            "createSummary": "Resumo gerado",
            "createDefense": "Defesa gerada",
            "analisarDefesa": "Analise gerada",
            "chat": "Resposta do chat",
        }
        self.status_code = 200
        self.file_status_code = 200
        self.raise_error = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_error:
            raise httpx.ConnectError("connection refused", request=request)
        if request.url.path.endswith("azulpack_file"):
            return httpx.Response(self.file_status_code, text="ok")
        payload = json.loads(request.content)
        return httpx.Response(self.status_code, text=self.answers.get(payload["action"], ""))

    def json_payloads(self):
        return [
            json.loads(r.content)
            for r in self.requests
            if not r.url.path.endswith("azulpack_file")
        ]

    def file_requests(self):
        return [r for r in self.requests if r.url.path.endswith("azulpack_file")]


@pytest.fixture
def storage():
    fake = FakeStorage()
    app.dependency_overrides[get_storage] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_storage, None)


@pytest.fixture
def workflow():
    fake = FakeWorkflow()
    gateway = AIGateway(transport=httpx.MockTransport(fake.handler))
    app.dependency_overrides[get_gateway] = lambda: gateway
    yield fake
    app.dependency_overrides.pop(get_gateway, None)


@pytest.fixture
def client(storage, workflow):
    return TestClient(app)


# ----------------------------------------------------------------------------
# Accounts
# ----------------------------------------------------------------------------

def create_user(email=None, password=DEFAULT_PASSWORD, admin=False, nome=None):
    email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
    session = SessionLocal()
    try:
        user = User(email=email.lower(), password_hash=get_password_hash(password), is_active=True)
        user.profile = UserProfile(nome=nome)
        user.roles.append(UserRoleGrant(role=UserRole.admin if admin else UserRole.user))
        session.add(user)
        session.commit()
        return user.id, user.email
    finally:
        session.close()


def login(client, email, password=DEFAULT_PASSWORD):
    resp = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def auth_headers(client, admin=False, nome=None, email=None):
    """Create an account and sign it in; returns (headers, user_id, email)."""
    user_id, email = create_user(email=email, admin=admin, nome=nome)
    return login(client, email), user_id, email


def create_process(client, headers, **fields):
    data = {"titulo": "Processo", "numero_processo": "0001"}
    data.update(fields)
    resp = client.post("/api/v1/processes/", data=data, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()
