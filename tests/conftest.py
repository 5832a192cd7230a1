import os

os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_nykapital.db")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("FX_RATES_TO_DKK", "DKK=1,EUR=7.5")

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from nykapital.data.base import Base, SessionLocal, create_tables, engine  # noqa: E402
from nykapital.data.repositories.scope import LedgerScope  # noqa: E402
from nykapital.domain.helpers import dates  # noqa: E402
from nykapital.domain.services.auth_service import register_user  # noqa: E402
from nykapital.main import app  # noqa: E402

OWNER_EMAIL = "ejer@nykapital.dk"
OWNER_PASSWORD = "hemmelig-kode"


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    create_tables()
    yield


@pytest.fixture()
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def user(db):
    return register_user(
        db,
        OWNER_EMAIL,
        OWNER_PASSWORD,
        name="Mette Jensen",
        company_name="Jensen ApS",
        cvr="12345678",
    )


@pytest.fixture()
def scope(db, user) -> LedgerScope:
    return LedgerScope(db, user.id)


@pytest.fixture()
def other_scope(db) -> LedgerScope:
    other = register_user(db, "anden@firma.dk", "en-anden-kode", name="Lars Holm")
    return LedgerScope(db, other.id)


class Clock:
    def __init__(self, current: datetime):
        self.current = current

    def set(self, *args) -> datetime:
        self.current = datetime(*args)
        return self.current

    def __call__(self) -> datetime:
        return self.current


@pytest.fixture()
def clock(monkeypatch) -> Clock:
    fixed = Clock(datetime(2025, 6, 15, 12, 0))
    monkeypatch.setattr(dates, "now", fixed)
    return fixed


@pytest.fixture()
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture()
def auth_client(client: TestClient, user) -> TestClient:
    response = client.post(
        "/api/auth/token",
        data={"username": OWNER_EMAIL, "password": OWNER_PASSWORD},
    )
    assert response.status_code == 200
    client.headers.update({"Authorization": f"Bearer {response.json()['access_token']}"})
    return client
