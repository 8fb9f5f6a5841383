from decimal import Decimal

import pytest

from storefront.data.models.pending_checkout import PendingCheckoutModel
from storefront.domain.order_status import PendingCheckoutStatus
from storefront.domain.schemas import ContactInfo, OrderIntent, ShippingAddress
from storefront.repos.cart_repo import LocalDeviceCartRepository
from storefront.services.checkout_service import CheckoutError, CheckoutService, collect, order_total
from storefront.services.device_storage import ORDER_INTENT_SLOT


@pytest.fixture
def guest_cart(storage, sample_lines):
    repo = LocalDeviceCartRepository(storage, "device-1")
    for line in sample_lines:
        repo.save_line(line)
    return repo


@pytest.fixture
def service(db_session, storage, guest_cart, fake_relay):
    return CheckoutService(db_session, storage, guest_cart, fake_relay)


def test_order_total():
    assert order_total(Decimal("12.99") * 2 + Decimal("5.00")) == Decimal("36.97")
    assert order_total(Decimal("10"), Decimal("0")) == Decimal("10.00")


def test_collect_builds_intent(sample_lines, contact, address):
    intent = collect(sample_lines, contact, address, "user-1")

    assert intent.total_price == Decimal("30.98")
    assert intent.owner_ref == "user-1"
    assert len(intent.checkout_token) == 32


def test_collect_requires_non_empty_fields(sample_lines, address):
    contact = ContactInfo(first_name="Ada", last_name="  ", email="", phone="555")

    with pytest.raises(ValueError, match="last_name, email"):
        collect(sample_lines, contact, address, None)


def test_collect_requires_address(sample_lines, contact):
    with pytest.raises(ValueError, match="city"):
        collect(sample_lines, contact, ShippingAddress(address="1 Spore Lane", state="OR"), None)


def test_collect_rejects_empty_cart(contact, address):
    with pytest.raises(ValueError, match="Cart is empty"):
        collect([], contact, address, None)


def test_place_order_stashes_intent_and_calls_relay(service, storage, db_session, fake_relay, contact, address):
    result = service.place_order("device-1", contact, address)

    assert result["payment_url"] == "https://gateway.test/epay/session/1"
    assert result["amount"] == Decimal("36.97")

    intent = OrderIntent.model_validate(storage.read_json("device-1", ORDER_INTENT_SLOT))
    assert intent.checkout_token == result["checkout_token"]
    assert intent.owner_ref is None

    pending = db_session.get(PendingCheckoutModel, result["checkout_token"])
    assert pending.status == PendingCheckoutStatus.PENDING.value

    call = fake_relay.calls[0]
    assert call["amount"] == Decimal("36.97")
    assert call["product_code"] == "EPAYTEST"
    assert call["success_url"] == fake_relay.verify_url


def test_new_checkout_overwrites_previous_intent(service, storage, contact, address):
    first = service.place_order("device-1", contact, address)
    second = service.place_order("device-1", contact, address)

    stashed = storage.read_json("device-1", ORDER_INTENT_SLOT)
    assert stashed["checkout_token"] == second["checkout_token"] != first["checkout_token"]


def test_relay_failure_keeps_intent(service, storage, fake_relay, contact, address):
    fake_relay.fail = True

    with pytest.raises(CheckoutError):
        service.place_order("device-1", contact, address)

    assert storage.get_item("device-1", ORDER_INTENT_SLOT) is not None
