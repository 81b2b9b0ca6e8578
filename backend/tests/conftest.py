"""
Shared pytest fixtures for the storefront backend tests.

The app runs against in-memory SQLite and a dict-backed Redis stand-in;
Stripe and Resend calls are patched per test.
"""

import os

# Must be set before storefront.core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DEBUG"] = "false"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_storefront"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test"
os.environ["RESEND_API_KEY"] = "re_test_storefront"
os.environ["ADMIN_NOTIFICATION_EMAIL"] = "orders@shop.io"

from datetime import timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.core.database import Base, get_db
from storefront.core.redis import get_redis
from storefront.main import app
from storefront.models.discount_code import DiscountCode
from storefront.services import auth_service
from storefront.services.discount_service import utcnow
import storefront.models  # noqa: F401


class FakeRedis:
    """The subset of redis.asyncio.Redis used by admin sessions"""

    def __init__(self):
        self.store: dict[str, dict] = {}

    async def hset(self, key, field=None, value=None, mapping=None):
        h = self.store.setdefault(key, {})
        if mapping:
            h.update(mapping)
        if field is not None:
            h[field] = value
        return 1

    async def hgetall(self, key):
        return dict(self.store.get(key, {}))

    async def expire(self, key, seconds):
        return key in self.store

    async def delete(self, key):
        return 1 if self.store.pop(key, None) is not None else 0

    async def ping(self):
        return True


# ============================================================================
# Database
# ============================================================================


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
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def client(session_factory, fake_redis):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    async def override_get_redis():
        return fake_redis

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ============================================================================
# Domain fixtures
# ============================================================================


@pytest.fixture
def make_code(db):
    """Factory for discount codes with sensible defaults"""

    def _make(code="SAVE10", discount_type="percentage", discount_value="10", **kwargs):
        data = {
            "code": code,
            "name": kwargs.pop("name", f"{code} promo"),
            "discount_type": discount_type,
            "discount_value": Decimal(str(discount_value)),
            "minimum_order_amount": Decimal(str(kwargs.pop("minimum_order_amount", "0"))),
            "used_count": kwargs.pop("used_count", 0),
            "is_active": kwargs.pop("is_active", True),
        }
        if "maximum_discount_amount" in kwargs:
            data["maximum_discount_amount"] = Decimal(str(kwargs.pop("maximum_discount_amount")))
        data.update(kwargs)
        discount = DiscountCode(**data)
        db.add(discount)
        db.commit()
        db.refresh(discount)
        return discount

    return _make


@pytest.fixture
def expired_window():
    now = utcnow()
    return {"valid_from": now - timedelta(days=30), "valid_until": now - timedelta(days=1)}


@pytest.fixture
def admin_user(db):
    return auth_service.create_user(db, "admin@shop.io", "s3cret-pass", name="Admin", role="admin")


@pytest.fixture
def customer_user(db):
    return auth_service.create_user(db, "jane@mailbox.org", "customer-pass", name="Jane")


@pytest.fixture
def admin_headers(client, admin_user):
    resp = client.post("/api/admin/login", json={"email": "admin@shop.io", "password": "s3cret-pass"})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def order_payload():
    """Checkout body factory for POST /api/orders.

    The default cart is 2 x 20.00 shipped to Spain: subtotal 40, shipping 10,
    tax 8.40, total 58.40.
    """

    def _payload(items=None, subtotal=None, total=None, **overrides):
        items = items or [{"id": "tee-1", "name": "T-shirt", "price": 20, "quantity": 2, "size": "M"}]
        payload = {
            "customer_info": {"name": "Jane Doe", "email": "Jane@Mailbox.org"},
            "items": items,
            "subtotal": subtotal if subtotal is not None else sum(i["price"] * i["quantity"] for i in items),
            "shipping_address": {
                "line1": "Calle Mayor 1",
                "city": "Madrid",
                "postal_code": "28013",
                "country": "ES",
            },
            "total": total if total is not None else 58.4,
        }
        payload.update(overrides)
        return payload

    return _payload
