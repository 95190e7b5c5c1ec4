"""
Shared fixtures: in-memory SQLite database, a fake analyzer and an API client.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from resume_scanner.main import app
from resume_scanner.core import config
from resume_scanner.core.auth_dependency import get_db
from resume_scanner.db.base import Base
import resume_scanner.db.models  # noqa: F401
from resume_scanner.api.routes.resume import get_analyzer
from resume_scanner.services.analysis_service import AnalysisResult


# Setup in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    """Override get_db dependency for testing."""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


class FakeAnalyzer:
    """Stands in for ResumeAnalyzer; records calls and returns a fixed analysis."""

    def __init__(self, result: AnalysisResult):
        self.result = result
        self.calls = []

    def analyze(self, file_path: str, job_description: str) -> AnalysisResult:
        self.calls.append((file_path, job_description))
        return self.result


@pytest.fixture(autouse=True)
def setup_db():
    """Create and drop tables for each test."""
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db():
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    """Keep uploads out of the working tree."""
    path = tmp_path / "uploads"
    monkeypatch.setattr(config, "UPLOAD_DIR", str(path))
    return path


@pytest.fixture
def analysis_result():
    return AnalysisResult(
        ats_score=82,
        keyword_match=71,
        missing_keywords=["Kubernetes", "Terraform"],
        formatting_issues=["Use consistent date formats"],
        improvements=["Quantify impact in the Acme role"],
        summary="Strong backend profile with minor gaps.",
        resume_text="Jane Doe\nSenior Python Engineer",
    )


@pytest.fixture
def fake_analyzer(analysis_result):
    return FakeAnalyzer(analysis_result)


@pytest.fixture
def client(fake_analyzer):
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_analyzer] = lambda: fake_analyzer
    yield TestClient(app)
    app.dependency_overrides.clear()


def register(client: TestClient, name: str, email: str, password: str = "pw123") -> str:
    response = client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password},
    )
    assert response.status_code == 200, response.text
    return response.json()["token"]


@pytest.fixture
def alice_headers(client):
    return {"x-auth-token": register(client, "Alice", "a@x.com")}


@pytest.fixture
def bob_headers(client):
    return {"x-auth-token": register(client, "Bob", "b@x.com")}


def upload_pdf(client: TestClient, headers: dict, filename: str = "cv.pdf",
               content_type: str = "application/pdf", data: dict = None,
               body: bytes = b"%PDF-1.4\n% test resume\n"):
    return client.post(
        "/api/resume/upload",
        headers=headers,
        files={"resume": (filename, body, content_type)},
        data=data or {},
    )
