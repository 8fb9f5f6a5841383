# storefront/services/order_finalizer.py
import time
from typing import Any, Dict

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.customer_detail import CustomerDetailModel
from storefront.data.models.guest_order import GuestOrderModel
from storefront.data.models.order import OrderModel
from storefront.domain.order_status import CheckoutState, OrderStatus, PendingCheckoutStatus
from storefront.domain.schemas import GuestSession, OrderIntent
from storefront.repos.cart_repo import cart_repository_for
from storefront.repos.checkout_repo import CheckoutRepo
from storefront.repos.order_repo import OrderRepo
from storefront.services.cache import InvalidationBus, ORDERS
from storefront.services.checkout_service import order_total
from storefront.services.device_storage import DeviceStorage, GUEST_SESSIONS_SLOT, ORDER_INTENT_SLOT
from storefront.services.notification_service import NotificationService
from storefront.utils.settings import SHIPPING_SURCHARGE
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

PLACED = "Payment successful and order placed!"
INTENT_MISSING = "Payment successful, but order details not found."
INVALID_STATUS = "Invalid payment status."


def _db_error(e: SQLAlchemyError) -> str:
    return str(getattr(e, "orig", None) or e)


def _result(state: CheckoutState, message: str, order: OrderModel | None = None) -> Dict[str, Any]:
    return {"state": state, "message": message, "order": order}


def shipping_snapshot(intent: OrderIntent) -> dict:
    address = intent.shipping_address
    return {
        "phone": intent.contact.phone,
        "address": address.address,
        "city": address.city,
        "state": address.state,
        "latitude": address.lat,
        "longitude": address.lng,
    }


class OrderFinalizer:
    """
    Tworzy zamowienie po powrocie z bramki platniczej.

    idle -> awaiting-redirect -> success-confirmed -> order-created | order-write-failed
                              -> failure-confirmed
    Zamowienie powstaje najwyzej raz na checkout_token - odswiezenie strony
    po sukcesie nie tworzy duplikatu.
    """

    def __init__(
        self,
        db: Session,
        storage: DeviceStorage,
        bus: InvalidationBus,
        notifications: NotificationService | None = None,
        surcharge=SHIPPING_SURCHARGE,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.checkouts = CheckoutRepo(db)
        self.storage = storage
        self.bus = bus
        self.notifications = notifications or NotificationService()
        self.surcharge = surcharge

    def state(self, device_id: str) -> CheckoutState:
        if self.storage.get_item(device_id, ORDER_INTENT_SLOT) is None:
            return CheckoutState.IDLE
        return CheckoutState.AWAITING_REDIRECT

    def _load_intent(self, device_id: str) -> OrderIntent | None:
        raw = self.storage.read_json(device_id, ORDER_INTENT_SLOT)
        if raw is None:
            return None
        try:
            return OrderIntent.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Stashed order intent for device {device_id} is unreadable: {e}")
            return None

    def finalize(self, device_id: str, status: str | None, message: str | None = None) -> Dict[str, Any]:
        if status == "failure":
            self._mark_failed(device_id)
            return _result(CheckoutState.FAILURE_CONFIRMED, f"Payment failed: {message or 'Unknown error'}")
        if status != "success":
            return _result(CheckoutState.FAILURE_CONFIRMED, INVALID_STATUS)

        intent = self._load_intent(device_id)
        if intent is None:
            return _result(CheckoutState.ORDER_WRITE_FAILED, INTENT_MISSING)

        existing = self.repo.get_by_checkout_token(intent.checkout_token)
        if existing:
            logger.info(f"Checkout {intent.checkout_token} already produced order {existing.id}")
            self._complete(device_id, intent, existing)
            return _result(CheckoutState.ORDER_CREATED, PLACED, existing)

        return self._write_order(device_id, intent)

    def _mark_failed(self, device_id: str):
        # bramka potwierdzila porazke - checkout nie trafi do przegladu stranded
        intent = self._load_intent(device_id)
        if intent is None:
            return
        self.checkouts.mark(intent.checkout_token, PendingCheckoutStatus.FAILED)
        logger.info(f"Checkout {intent.checkout_token} marked failed")

    def _build_order(self, intent: OrderIntent) -> OrderModel:
        return OrderModel(
            order_number=f"ORD-{int(time.time() * 1000)}",
            total_amount=order_total(intent.total_price, self.surcharge),
            status=OrderStatus.PENDING.value,
            user_id=intent.owner_ref,
            items=[
                {
                    "product_id": line.product_id,
                    "name": line.name,
                    "quantity": line.quantity,
                    "price": str(line.price),
                }
                for line in intent.cart_lines
            ],
            checkout_token=intent.checkout_token,
        )

    def _write_order(self, device_id: str, intent: OrderIntent) -> Dict[str, Any]:
        order = self._build_order(intent)
        customer_name = intent.contact.full_name or "Guest"
        address = shipping_snapshot(intent)

        # zalogowany: najpierw customer_detail, bez niego nie ma zamowienia
        if intent.owner_ref:
            try:
                detail = self.repo.add_customer_detail(
                    CustomerDetailModel(
                        user_id=intent.owner_ref,
                        customer_name=customer_name,
                        shipping_address=address,
                    )
                )
            except SQLAlchemyError as e:
                self.repo.rollback()
                logger.error(f"Customer detail insert failed for checkout {intent.checkout_token}: {e}")
                return _result(
                    CheckoutState.ORDER_WRITE_FAILED,
                    f"Payment successful, but failed to create customer details: {_db_error(e)}",
                )
            order.customer_detail_id = detail.id

        try:
            self.repo.add_order(order)
            if not intent.owner_ref:
                self.repo.add_guest_order(
                    GuestOrderModel(
                        order_id=order.id,
                        customer_name=customer_name,
                        customer_email=intent.contact.email,
                        shipping_address=address,
                    )
                )
            self.repo.commit()
        except IntegrityError as e:
            self.repo.rollback()
            # rownolegla finalizacja tego samego checkoutu
            existing = self.repo.get_by_checkout_token(intent.checkout_token)
            if existing:
                self._complete(device_id, intent, existing)
                return _result(CheckoutState.ORDER_CREATED, PLACED, existing)
            logger.error(f"Order insert failed for checkout {intent.checkout_token}: {e}")
            return _result(
                CheckoutState.ORDER_WRITE_FAILED,
                f"Payment successful, but failed to create order: {_db_error(e)}",
            )
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Order insert failed for checkout {intent.checkout_token}: {e}")
            return _result(
                CheckoutState.ORDER_WRITE_FAILED,
                f"Payment successful, but failed to create order: {_db_error(e)}",
            )

        logger.info(f"Order {order.order_number} (id {order.id}) created for checkout {intent.checkout_token}")

        if not intent.owner_ref:
            self._remember_guest_order(device_id, intent, order, customer_name)
        self._complete(device_id, intent, order)

        try:
            self.notifications.send_order_confirmation(order.id, order.order_number, intent.contact.email)
        except Exception as e:
            logger.warning(f"Failed to queue confirmation for order {order.id}: {e}")

        return _result(CheckoutState.ORDER_CREATED, PLACED, order)

    def _remember_guest_order(self, device_id: str, intent: OrderIntent, order: OrderModel, customer_name: str):
        sessions = self.storage.read_json(device_id, GUEST_SESSIONS_SLOT, default=[])
        if not isinstance(sessions, list):
            sessions = []

        session = GuestSession(
            order_id=order.id,
            order_number=order.order_number,
            customer_email=intent.contact.email,
            customer_name=customer_name,
            order_data={
                "status": order.status,
                "total_amount": str(order.total_amount),
                "order_date": order.order_date.isoformat(),
                "items": order.items,
            },
        )
        sessions.append(session.model_dump(mode="json"))
        self.storage.write_json(device_id, GUEST_SESSIONS_SLOT, sessions)

    def _complete(self, device_id: str, intent: OrderIntent, order: OrderModel):
        self.storage.remove_item(device_id, ORDER_INTENT_SLOT)
        cart_repository_for(self.db, self.storage, device_id, intent.owner_ref).delete_all()
        self.checkouts.mark(intent.checkout_token, PendingCheckoutStatus.FINALIZED)
        self.bus.invalidate(ORDERS)
