"""
Shared fixtures: in-memory SQLite database, in-memory device storage,
fake relay/gateway clients and TestClients for both applications.
"""

import os

# before any storefront import - settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = "memory://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["ADMIN_TOKEN"] = "test-admin"
os.environ["SEED_CATALOG"] = "false"
os.environ["PAYMENT_MERCHANT_SECRET"] = "8gBm/:&EnhH.1/q"

from decimal import Decimal

import pytest
import requests
from fastapi.testclient import TestClient

import storefront.data.models  # noqa: F401
from storefront.data.database import Base, SessionLocal, engine
from storefront.data.seed import seed
from storefront.domain.schemas import CartLine, ContactInfo, ShippingAddress
from storefront.services.cache import InvalidationBus
from storefront.services.checkout_service import collect
from storefront.services.device_storage import InMemoryDeviceStorage, ORDER_INTENT_SLOT

SECRET = "8gBm/:&EnhH.1/q"


class FakeRelayClient:
    verify_url = "http://relay.test/verify-payment"

    def __init__(self):
        self.calls = []
        self.fail = False

    def initiate_payment(self, amount, product_code, success_url, failure_url):
        self.calls.append(
            {"amount": amount, "product_code": product_code, "success_url": success_url, "failure_url": failure_url}
        )
        if self.fail:
            raise requests.ConnectionError("relay down")
        return "https://gateway.test/epay/session/1"


class FakeGateway:
    def __init__(self):
        self.forms = []
        self.status = "COMPLETE"
        self.fail_submit = False
        self.fail_status = False
        self.status_calls = 0

    def submit_form(self, form):
        if self.fail_submit:
            raise requests.ConnectionError("gateway down")
        self.forms.append(form)
        return "https://gateway.test/epay/session/" + form["transaction_uuid"]

    def transaction_status(self, product_code, total_amount, transaction_uuid):
        self.status_calls += 1
        if self.fail_status:
            raise requests.Timeout("status endpoint timed out")
        return {"product_code": product_code, "transaction_uuid": transaction_uuid, "status": self.status}


class FakeNotifications:
    def __init__(self):
        self.sent = []

    def send_order_confirmation(self, order_id, order_number, recipient):
        self.sent.append((order_id, order_number, recipient))


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    seed(db)
    yield db
    db.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage():
    return InMemoryDeviceStorage()


@pytest.fixture
def bus():
    return InvalidationBus()


@pytest.fixture
def fake_relay():
    return FakeRelayClient()


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def notifications():
    return FakeNotifications()


@pytest.fixture
def contact():
    return ContactInfo(first_name="Ada", last_name="Lovelace", email="ada@example.com", phone="555-0100")


@pytest.fixture
def address():
    return ShippingAddress(address="1 Spore Lane", city="Portland", state="OR", lat=45.52, lng=-122.68)


@pytest.fixture
def sample_lines():
    return [
        CartLine(product_id=1, name="Organic Shiitake", price=Decimal("12.99"), quantity=2),
        CartLine(product_id=4, name="Dried Porcini", price=Decimal("5.00"), quantity=1),
    ]


@pytest.fixture
def stash_intent(storage, contact, address, sample_lines):
    def _stash(device_id="device-1", owner_ref=None, lines=None):
        intent = collect(lines or sample_lines, contact, address, owner_ref)
        storage.write_json(device_id, ORDER_INTENT_SLOT, intent.model_dump(mode="json"))
        return intent

    return _stash


@pytest.fixture
def api(db_session, storage, fake_relay):
    from storefront.main import create_app

    app = create_app()
    app.state.device_storage = storage
    app.state.relay_client = fake_relay
    with TestClient(app) as client:
        yield client


@pytest.fixture
def relay_api(fake_gateway):
    from storefront.payment_relay.main import create_app

    app = create_app()
    app.state.gateway = fake_gateway
    with TestClient(app) as client:
        yield client
