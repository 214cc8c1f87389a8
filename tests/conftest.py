import os
import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

# Cheap argon2 parameters keep the suite fast; read when dating.auth.passwords is imported.
os.environ.setdefault("DATING_ARGON2_TIME_COST", "1")
os.environ.setdefault("DATING_ARGON2_MEMORY_COST", "1024")
os.environ.setdefault("DATING_ARGON2_PARALLELISM", "1")

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from dating.app import create_app
from dating.config import Settings
from dating.infra.user_repo import UserStore


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(db_path=tmp_path / "data" / "dating.db", secret_key="test-secret")


@pytest.fixture()
def store(settings):
    """Second handle on the app's database, for seeding and assertions."""
    s = UserStore.for_path(settings.db_path)
    s.init_schema()
    yield s
    s.close()


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def register(client):
    def _register(name="Ava", email="ava@x.com", password="secret123", bio="hi"):
        return client.post(
            "/register",
            data={"name": name, "email": email, "password": password, "bio": bio},
            follow_redirects=False,
        )

    return _register


@pytest.fixture()
def login(client):
    def _login(email="ava@x.com", password="secret123"):
        return client.post("/login", data={"email": email, "password": password}, follow_redirects=False)

    return _login
