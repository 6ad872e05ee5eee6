import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import NullPool

from skillsync.database import get_db, get_engine, init_db, make_sessionmaker
from skillsync.main import app
from skillsync.services.auth_service import auth_service
from skillsync.services.notification_service import notifier

from helpers import API, PASSWORD


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "skillsync.sqlite"


@pytest.fixture
def test_db(db_path):
    # NullPool: TestClient may drive each request on its own event loop
    engine = get_engine(db_path, poolclass=NullPool)
    asyncio.run(init_db(engine))
    TestSession = make_sessionmaker(engine)

    async def override_get_db():
        async with TestSession() as db:
            yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestSession
    app.dependency_overrides.clear()
    asyncio.run(engine.dispose())


@pytest.fixture
def fresh_auth_service():
    auth_service.reset()
    yield auth_service
    auth_service.reset()


@pytest.fixture
def outbox():
    """Capture notifications instead of handing them to the log transport."""
    sent = []

    async def capture(message):
        sent.append(message)

    original = notifier.transport
    notifier.transport = capture
    yield sent
    notifier.transport = original


@pytest.fixture
def client(test_db, fresh_auth_service, outbox):
    return TestClient(app)


@pytest.fixture
def register(client):
    """Register a user and return ``(user_id, auth_headers)``."""
    counter = {"n": 0}

    def _register(role: str, first_name: str = "Test") -> tuple[str, dict]:
        counter["n"] += 1
        r = client.post(f"{API}/auth/register", json={
            "first_name": first_name,
            "last_name": "User",
            "email": f"{role}{counter['n']}@skillsync.dev",
            "password": PASSWORD,
            "role": role,
        })
        assert r.status_code == 201, r.text
        data = r.json()
        return data["user"]["id"], {"Authorization": f"Bearer {data['token']}"}

    return _register


@pytest.fixture
def admin_headers(client, test_db):
    async def _create():
        async with test_db() as db:
            await auth_service.ensure_admin(db, "admin@skillsync.dev", PASSWORD)

    asyncio.run(_create())
    r = client.post(f"{API}/auth/login", json={"email": "admin@skillsync.dev", "password": PASSWORD})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['token']}"}
