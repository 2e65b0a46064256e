import os
import tempfile

# Must run before any shopapi import: settings are read at import time
_DB_PATH = os.path.join(tempfile.gettempdir(), f"shopapi-test-{os.getpid()}.db")
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_PATH}"
os.environ["JWT_SECRET"] = "test-secret-for-the-shop-api-suite"
os.environ["ORDER_STATUS_STRICT"] = "true"
os.environ["FORCE_HTTPS"] = "false"
os.environ["ENV"] = "test"
os.environ["TESTING"] = "1"
os.environ.pop("RABBITMQ_URL", None)

import jwt
import pytest
from fastapi.testclient import TestClient

from shopapi import models  # noqa: F401
from shopapi.core.database import Base, SessionLocal, engine
from shopapi.repositories.order_repositories import OrderRepository
from shopapi.schemas.order_schemas import OrderCreate

TEST_SECRET = "test-secret-for-the-shop-api-suite"


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def token_factory():
    def make(**claims):
        return jwt.encode(claims, TEST_SECRET, algorithm="HS256")
    return make


@pytest.fixture
def admin_token(token_factory):
    return token_factory(id="admin-1", email="admin@example.com", role="admin")


@pytest.fixture
def user_token(token_factory):
    return token_factory(id="user-1", email="jane@example.com")


def order_payload(name="Rose Serum", quantity=1, size="50ml", amount=25.0, first_name="Jane"):
    return {
        "items": [{"name": name, "quantity": quantity, "size": size, "price": amount / quantity}],
        "amount": amount,
        "address": {
            "firstName": first_name,
            "lastName": "Doe",
            "email": "jane@example.com",
            "street": "12 Moi Avenue",
            "city": "Nairobi",
            "state": "Nairobi",
            "country": "Kenya",
            "zipcode": "00100",
            "phone": "+254700000000",
        },
    }


@pytest.fixture
def order_factory(db_session):
    """Seed an order directly through the repository."""
    repo = OrderRepository(db_session)

    def make(user_id="user-1", **overrides):
        return repo.create(user_id, OrderCreate(**order_payload(**overrides)), "COD")
    return make


@pytest.fixture
def client():
    from shopapi.main import app
    return TestClient(app)


@pytest.fixture
def payload_factory():
    return order_payload
