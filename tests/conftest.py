import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

import threading
import time

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.auth import TokenCodec, hash_password
from core.db import Base, get_db
from core.inventory_db import ExclusiveSession
from main import create_app
from models.models_user import User
from services.inventory import InventoryGateway, InventoryQueryBuilder

VIEW = "SRLMAZZ_LANTEK.dbo.VGiacenzaLamiere"


def stock_row(i, tenant):
    return (f"L{i:03d}", "S235JR", 2.0, 3000.0, 1500.0, 4.5, 70.65, 0, 3, tenant, "magazzino A", None)


# 25 rows for ACME, 20 for GLOBEX
SAMPLE_ROWS = [stock_row(i, "ACME") for i in range(25)] + [stock_row(100 + i, "GLOBEX") for i in range(20)]


class FakeInventorySource:
    """In-memory stand-in for the inventory view that records every query it runs."""

    def __init__(self, rows=None, delay=0.0):
        self.rows = list(rows or [])
        self.delay = delay
        self.fail = None
        self.calls = []
        self._guard = threading.Lock()

    def _matching(self, sql, params):
        if " WHERE Udata1 = :p1" in sql:
            return [r for r in self.rows if r[9] == params[0]]
        return list(self.rows)

    def run_parameterized_query(self, sql, params):
        with self._guard:
            self.calls.append((threading.get_ident(), sql, tuple(params)))
        if self.delay:
            time.sleep(self.delay)
        if self.fail is not None:
            raise self.fail
        rows = self._matching(sql, params)
        if sql.startswith("SELECT COUNT(*)"):
            return [(len(rows),)]
        offset, size = params[-2], params[-1]
        return rows[offset:offset + size]


@pytest.fixture
def db_session():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def codec():
    return TokenCodec(b"test-secret")


@pytest.fixture
def inventory_source():
    return FakeInventorySource(SAMPLE_ROWS)


@pytest.fixture
def gateway(inventory_source):
    return InventoryGateway(ExclusiveSession(inventory_source, lock_timeout=0.2), InventoryQueryBuilder(VIEW))


@pytest.fixture
def app(db_session, codec, gateway):
    app = create_app(token_codec=codec, inventory=gateway, static_dir="/nonexistent-static-dir")

    def _db():
        yield db_session

    app.dependency_overrides[get_db] = _db
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def make_user(db_session):
    def _make(email, role="user", customer_name=None, password="s3cret-pass", name="Test User"):
        u = User(
            name=name,
            email=email.lower(),
            password=hash_password(password),
            role=role,
            customer_name=customer_name,
        )
        db_session.add(u)
        db_session.commit()
        db_session.refresh(u)
        return u

    return _make


@pytest.fixture
def auth_headers(codec):
    def _headers(user, now=None, ttl=3600):
        token = codec.issue(user.id, int(now if now is not None else time.time()), ttl)
        return {"Authorization": f"Bearer {token}"}

    return _headers
