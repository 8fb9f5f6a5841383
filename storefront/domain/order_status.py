# storefront/domain/order_status.py
from enum import Enum
from typing import assert_never


class OrderStatus(str, Enum):
    """Status zamowienia - jedyne zrodlo prawdy dla wszystkich konsumentow."""

    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class CheckoutState(str, Enum):
    IDLE = "idle"
    AWAITING_REDIRECT = "awaiting-redirect"
    SUCCESS_CONFIRMED = "success-confirmed"
    ORDER_CREATED = "order-created"
    ORDER_WRITE_FAILED = "order-write-failed"
    FAILURE_CONFIRMED = "failure-confirmed"


class PendingCheckoutStatus(str, Enum):
    PENDING = "PENDING"
    FINALIZED = "FINALIZED"
    FAILED = "FAILED"
    STRANDED = "STRANDED"


PENDING_BUCKET = "pending"
DELIVERED_BUCKET = "delivered"


def guest_bucket(status: OrderStatus) -> str:
    match status:
        case OrderStatus.DELIVERED:
            return DELIVERED_BUCKET
        case (
            OrderStatus.PENDING
            | OrderStatus.PROCESSING
            | OrderStatus.SHIPPED
            | OrderStatus.CANCELLED
            | OrderStatus.COMPLETED
        ):
            return PENDING_BUCKET
        case _:
            assert_never(status)
