"""tests/conftest.py – shared fixtures: throwaway SQLite store, wired services, sample rows."""
from contextlib import contextmanager
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from surplus import deps
from surplus.config import Settings
from surplus.core.orders import OrderHistoryStore
from surplus.core.ledger import InventoryLedger
from surplus.db.models import Listing, User
from surplus.db.session import Database


def make_user(db: Database, role: str = "student", email: str | None = None) -> str:
    with db.session() as session:
        user = User(name=f"{role} user", email=email or f"{role}-{uuid4().hex[:8]}@test.io",
                    password_hash="not-a-hash", role=role)
        session.add(user)
        session.flush()
        return user.id


def make_listing(db: Database, restaurant_id: str, quantity: int = 5, price: float = 30, title: str = "Veg Box") -> str:
    with db.session() as session:
        listing = Listing(restaurant_id=restaurant_id, title=title, description="Rice & veg",
                          price=price, quantity_available=quantity, image_url="")
        session.add(listing)
        session.flush()
        return listing.id


def quantity_of(db: Database, listing_id: str) -> int:
    with db.session() as session:
        return session.get(Listing, listing_id).quantity_available


class BrokenSession:
    """Every statement fails the way SQLite does when the file is unreachable."""

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise OperationalError(name, {}, Exception("unable to open database file"))
        return fail


class BrokenDatabase:

    @contextmanager
    def session(self):
        yield BrokenSession()


# ── Store + services ───────────────────────────────────────────────────────────

@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        session_secret="test-session-secret",
        jwt_secret="test-jwt-secret",
        media_dir=str(tmp_path / "media"),
        bcrypt_rounds=4,
    )


@pytest.fixture
def db(settings):
    database = Database(settings.database_url)
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture
def orders(db) -> OrderHistoryStore:
    return OrderHistoryStore(db)


@pytest.fixture
def ledger(db, orders) -> InventoryLedger:
    return InventoryLedger(db, orders)


@pytest.fixture
def restaurant_id(db) -> str:
    return make_user(db, "restaurant", "resto@test.io")


@pytest.fixture
def student_id(db) -> str:
    return make_user(db, "student", "student@test.io")


# ── HTTP ───────────────────────────────────────────────────────────────────────

@pytest.fixture
def wired(settings, db):
    """Point every deps singleton at the throwaway store."""
    deps.wire(settings, db)
    yield


@pytest.fixture
def client(wired):
    from surplus.main import app
    with TestClient(app) as c:
        yield c


def api_register(client: TestClient, email: str, role: str = "student", password: str = "pw-123456") -> dict:
    r = client.post("/api/auth/register", json={"name": email.split("@")[0], "email": email,
                                                "password": password, "role": role})
    assert r.status_code == 200, r.text
    return r.json()


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
