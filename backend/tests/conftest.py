import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from collections.abc import Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.api.v1.dependencies import (  # noqa: E402
    get_db,
    get_identity_verifier,
    get_object_store,
    get_summarizer,
    get_text_extractor,
)
from app.core.exceptions import UnauthorizedError  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.main import app  # noqa: E402
from app.schemas.auth import CallerIdentity  # noqa: E402
from app.services.summarizer import Summarizer  # noqa: E402

ALICE_TOKEN = "token-alice"
BOB_TOKEN = "token-bob"


class FakeObjectStore:
    """In-memory stand-in for the bucket-backed store."""

    public_prefix = "https://storage.example.com/test-bucket/"

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.content_types: dict[str, str | None] = {}
        self.deleted: list[str] = []

    def object_path(self, file_url: str) -> str | None:
        if file_url.startswith(self.public_prefix):
            return file_url[len(self.public_prefix):]
        if file_url.startswith("gs://test-bucket/"):
            return file_url[len("gs://test-bucket/"):]
        if file_url.startswith(("gs://", "http://", "https://")):
            return None
        return file_url

    def upload(self, data: bytes, path: str | None = None, content_type: str | None = None) -> str:
        file_path = path or "uploads/generated"
        self.objects[file_path] = data
        self.content_types[file_path] = content_type
        return f"{self.public_prefix}{file_path}"

    def get_download_url(self, file_url: str, expires_in=None) -> str:
        if file_url.startswith(("http://", "https://")):
            return file_url
        return f"https://signed.example.com/{file_url}?sig=test"

    def delete(self, file_url: str) -> None:
        self.deleted.append(file_url)


class FakeIdentityVerifier:
    def __init__(self) -> None:
        self.identities = {
            ALICE_TOKEN: CallerIdentity(id="alice", email="alice@example.com"),
            BOB_TOKEN: CallerIdentity(id="bob", email="bob@example.com", role="admin"),
        }

    def verify(self, token: str) -> CallerIdentity:
        try:
            return self.identities[token]
        except KeyError:
            raise UnauthorizedError("Invalid or expired token") from None


class FakeTextExtractor:
    """Returns canned text, or raises ``error`` when set."""

    def __init__(self, text: str = "Hello world", error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.calls: list[tuple[str, str | None]] = []

    async def extract(self, file_url: str, declared_type: str | None = None) -> str:
        self.calls.append((file_url, declared_type))
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(engine) -> Generator[Session, None, None]:
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def text_extractor() -> FakeTextExtractor:
    return FakeTextExtractor()


@pytest.fixture
def summarizer() -> Summarizer:
    return Summarizer(api_key=None)


@pytest.fixture
def client(db_session, object_store, text_extractor, summarizer) -> Generator[TestClient, None, None]:
    def override_get_db():
        yield db_session

    verifier = FakeIdentityVerifier()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_verifier] = lambda: verifier
    app.dependency_overrides[get_object_store] = lambda: object_store
    app.dependency_overrides[get_text_extractor] = lambda: text_extractor
    app.dependency_overrides[get_summarizer] = lambda: summarizer
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def alice_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {ALICE_TOKEN}"}


@pytest.fixture
def bob_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {BOB_TOKEN}"}
