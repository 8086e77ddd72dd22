"""Test configuration and fixtures."""

import os
import tempfile
from datetime import date

# precisa vir antes de qualquer import de app.* (settings lê o ambiente no import)
_TMP = tempfile.mkdtemp(prefix="coa-tests-")
os.environ.setdefault("DATA_DIR", _TMP)
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_TMP, 'boot.db')}")
os.environ["RUN_MIGRATIONS_ON_STARTUP"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["PUBLIC_BASE_URL"] = "https://coa.example.com"
os.environ.pop("OWNER_EMAIL", None)
os.environ.pop("OWNER_PASSWORD", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

import app.models  # noqa: E402,F401
from app.api.deps import get_storage  # noqa: E402
from app.core.tokens import create_access_token  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.session import get_db, make_engine  # noqa: E402
from app.main import api  # noqa: E402
from app.models.event import Event  # noqa: E402
from app.models.profile import Profile  # noqa: E402
from app.services.storage import LocalStorage  # noqa: E402

# senha comum a todos os profiles de teste
_PASSWORD = "password123"


@pytest.fixture(scope="session")
def password_hash() -> str:
    from app.core.security_password import hash_password
    return hash_password(_PASSWORD)


@pytest.fixture
def engine(tmp_path):
    eng = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage(tmp_path) -> LocalStorage:
    return LocalStorage(root=str(tmp_path / "storage"), base_url="/api/v1/files", secret="test-secret-key")


@pytest.fixture
def client(session_factory, storage):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    api.dependency_overrides[get_db] = _get_db
    api.dependency_overrides[get_storage] = lambda: storage
    with TestClient(api) as c:
        yield c
    api.dependency_overrides.clear()


@pytest.fixture
def make_profile(db, password_hash):
    def _make(email: str, role=None, full_name="Test User") -> Profile:
        p = Profile(email=email, role=role, full_name=full_name, hashed_password=password_hash)
        db.add(p)
        db.commit()
        db.refresh(p)
        return p
    return _make


@pytest.fixture
def owner(make_profile):
    return make_profile("owner@example.com", "owner", "Olivia Owner")


@pytest.fixture
def reviewer(make_profile):
    return make_profile("reviewer@example.com", "reviewer", "Rita Reviewer")


@pytest.fixture
def artist(make_profile):
    return make_profile("artist@example.com", "artist", "Stan Artist")


@pytest.fixture
def collector(make_profile):
    return make_profile("collector@example.com", None, "Carl Collector")


@pytest.fixture
def make_event(db):
    def _make(artist=None, *, slug="stan-artist-nycc-2026-05-01-abc123", is_active=True, **kw) -> Event:
        ev = Event(
            slug=slug,
            artist_user_id=artist.id if artist else None,
            artist_name=kw.pop("artist_name", artist.full_name if artist else "Stan Artist"),
            event_name=kw.pop("event_name", "NYCC"),
            event_location=kw.pop("event_location", "New York"),
            event_date=kw.pop("event_date", date(2026, 5, 1)),
            event_end_date=kw.pop("event_end_date", date(2026, 5, 3)),
            is_active=is_active,
        )
        db.add(ev)
        db.commit()
        db.refresh(ev)
        return ev
    return _make


@pytest.fixture
def event(make_event, artist):
    return make_event(artist)


def auth_headers(profile: Profile) -> dict:
    token = create_access_token(sub=profile.id, role=profile.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers():
    return auth_headers


@pytest.fixture
def image_files():
    """Multipart com as duas fotos exigidas na submissão."""
    def _files() -> dict:
        return {
            "proof_image": ("selfie.jpg", b"\xff\xd8proof", "image/jpeg"),
            "book_image": ("cover.png", b"\x89PNGbook", "image/png"),
        }
    return _files
