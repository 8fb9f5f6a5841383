# storefront/services/checkout_service.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List

import requests
from sqlalchemy.orm import Session

from storefront.data.models.pending_checkout import PendingCheckoutModel
from storefront.domain.schemas import CartLine, ContactInfo, OrderIntent, ShippingAddress
from storefront.repos.cart_repo import CartRepository
from storefront.repos.checkout_repo import CheckoutRepo
from storefront.services.cart_service import cart_total
from storefront.services.device_storage import DeviceStorage, ORDER_INTENT_SLOT
from storefront.services.relay_client import RelayClient
from storefront.utils.settings import PAYMENT_FAILURE_URL, PAYMENT_PRODUCT_CODE, SHIPPING_SURCHARGE
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

CONTACT_FIELDS = ("first_name", "last_name", "email", "phone")
ADDRESS_FIELDS = ("address", "city", "state")
CENTS = Decimal("0.01")


class CheckoutError(Exception):
    pass


def order_total(total_price: Decimal, surcharge: Decimal = SHIPPING_SURCHARGE) -> Decimal:
    return (Decimal(total_price) + surcharge).quantize(CENTS)


def collect(
    cart_lines: List[CartLine],
    contact: ContactInfo,
    shipping_address: ShippingAddress,
    owner_ref: str | None,
) -> OrderIntent:
    """Zbiera dane z formularza checkoutu. Sprawdzamy tylko czy pola nie sa puste."""
    if not cart_lines:
        raise ValueError("Cart is empty")

    missing = [f for f in CONTACT_FIELDS if not getattr(contact, f).strip()]
    missing += [f for f in ADDRESS_FIELDS if not getattr(shipping_address, f).strip()]
    if missing:
        raise ValueError(f"Missing checkout fields: {', '.join(missing)}")

    return OrderIntent(
        checkout_token=uuid.uuid4().hex,
        cart_lines=cart_lines,
        contact=contact,
        shipping_address=shipping_address,
        total_price=cart_total(cart_lines),
        owner_ref=owner_ref,
        created_at=datetime.now(timezone.utc),
    )


class CheckoutService:
    def __init__(
        self,
        db: Session,
        storage: DeviceStorage,
        cart_repo: CartRepository,
        relay: RelayClient,
        surcharge: Decimal = SHIPPING_SURCHARGE,
        product_code: str = PAYMENT_PRODUCT_CODE,
        failure_url: str = PAYMENT_FAILURE_URL,
    ):
        self.checkouts = CheckoutRepo(db)
        self.storage = storage
        self.cart_repo = cart_repo
        self.relay = relay
        self.surcharge = surcharge
        self.product_code = product_code
        self.failure_url = failure_url

    def place_order(self, device_id: str, contact: ContactInfo, shipping_address: ShippingAddress) -> Dict[str, Any]:
        intent = collect(self.cart_repo.list_lines(), contact, shipping_address, self.cart_repo.owner_ref)
        payload = intent.model_dump(mode="json")

        # jeden checkout na raz - slot jest nadpisywany
        self.storage.write_json(device_id, ORDER_INTENT_SLOT, payload)
        self.checkouts.create(
            PendingCheckoutModel(
                token=intent.checkout_token,
                owner_ref=intent.owner_ref,
                total_price=intent.total_price,
                intent=payload,
            )
        )

        amount = order_total(intent.total_price, self.surcharge)
        logger.info(f"Checkout {intent.checkout_token} awaiting payment of {amount}")

        try:
            payment_url = self.relay.initiate_payment(
                amount=amount,
                product_code=self.product_code,
                success_url=self.relay.verify_url,
                failure_url=self.failure_url,
            )
        except requests.RequestException as e:
            logger.error(f"Relay failed for checkout {intent.checkout_token}: {e}")
            raise CheckoutError("Failed to initiate payment") from e

        return {
            "payment_url": payment_url,
            "checkout_token": intent.checkout_token,
            "amount": amount,
        }
