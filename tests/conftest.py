import os
import sys
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient


# Ensure `import backend.app...` works regardless of where pytest is run from.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Must be set before backend.app.main is imported: it builds a default app at import time.
os.environ["DISABLE_DOTENV"] = "1"

TEST_SECRET = "test-secret-key"
DEFAULT_PASSWORD = "secret123"


@pytest.fixture()
def app(tmp_path: Path) -> FastAPI:
    """
    Create the FastAPI app wired to a temporary SQLite DB.

    Settings are passed explicitly, so nothing in the process environment leaks in.
    """
    from backend.app.config import Settings
    from backend.app.database import init_db
    from backend.app.main import create_app

    settings = Settings(
        database_url=f"sqlite+pysqlite:///{tmp_path / 'test.sqlite3'}",
        secret_key=TEST_SECRET,
    )
    fastapi_app = create_app(settings)
    init_db(fastapi_app.state.engine)
    yield fastapi_app
    fastapi_app.state.engine.dispose()


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def db_session(app: FastAPI):
    """
    Direct SQLAlchemy session bound to the same temporary SQLite DB used by the test app.
    """
    db = app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def token_service(app: FastAPI):
    return app.state.token_service


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def register(client: TestClient):
    """Sign up a user and return (token, user payload)."""

    def _register(email: str, user_type: str = "client", name: str = "Test User", **extra):
        body = {
            "email": email,
            "password": DEFAULT_PASSWORD,
            "name": name,
            "userType": user_type,
            **extra,
        }
        r = client.post("/api/auth/signup", json=body)
        assert r.status_code == 201, r.text
        data = r.json()
        return data["token"], data["user"]

    return _register
