"""Shared fixtures: an isolated app per test on in-memory SQLite."""
import pytest
from fastapi.testclient import TestClient

import accounts
from config import Settings
from main import create_app

TEST_SECRET = "test-secret-key-with-enough-length-for-hs256"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
GIF_BYTES = b"GIF89a" + b"\x00" * 32


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway database and upload directory."""
    return Settings(
        secret_key=TEST_SECRET,
        database_url="sqlite://",
        upload_dir=str(tmp_path / "uploads"),
        log_level="WARNING",
        log_file="",
    )


@pytest.fixture
def app(settings):
    application = create_app(settings)
    yield application
    application.state.engine.dispose()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db(app):
    """A session bound to the app's database, for service-level tests."""
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def images(app):
    return app.state.image_store


@pytest.fixture
def tokens(app):
    return app.state.token_service


@pytest.fixture
def alice(db):
    return accounts.signup(db, "alice@example.com", "secret1")


@pytest.fixture
def bob(db):
    return accounts.signup(db, "bob@example.com", "secret2")


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
