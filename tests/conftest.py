import os

os.environ["ENV"] = "test"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ["SEED_DATABASE"] = "0"
os.environ["AUTO_APPLY_MIGRATIONS"] = "0"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "123"
os.environ["USER_USERNAME"] = "user"
os.environ["USER_PASSWORD"] = "123"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from orders_api.core.database import Base, get_db  # noqa: E402
from orders_api.core.metrics import request_metrics  # noqa: E402
import orders_api.models  # noqa: E402,F401


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def client(db_session, monkeypatch):
    from orders_api import main

    monkeypatch.setattr(main, "_startup_tasks", lambda: None)
    main.app.dependency_overrides[get_db] = lambda: db_session
    request_metrics.reset()

    with TestClient(main.app) as test_client:
        yield test_client

    main.app.dependency_overrides.clear()


def _login(client: TestClient, username: str, password: str) -> dict:
    response = client.post("/api/auth/login", params={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def admin_headers(client):
    return _login(client, "admin", "123")


@pytest.fixture
def user_headers(client):
    return _login(client, "user", "123")
