# storefront/services/order_service.py
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.domain.order_status import OrderStatus
from storefront.domain.schemas import OrderOut
from storefront.repos.order_repo import OrderRepo
from storefront.services.cache import InvalidationBus, QueryCache, ORDERS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class OrderService:
    """
    Odczyt statusu zamowienia (sledzenie) i zmiana statusu przez admina.
    """

    def __init__(self, db: Session, bus: InvalidationBus, cache: QueryCache):
        self.repo = OrderRepo(db)
        self.bus = bus
        self.cache = cache

    def _load(self, order_id: int) -> dict | None:
        order = self.repo.get_order(order_id)
        if order is None:
            return None
        return OrderOut.model_validate(order).model_dump(mode="json")

    def get_order(self, order_id: int) -> dict:
        order = self.cache.get_or_load(("order", order_id), lambda: self._load(order_id))
        if not order:
            raise LookupError("Order ID not found")
        return order

    def update_status(self, order_id: int, status: OrderStatus) -> OrderModel:
        order = self.repo.update_order_status(order_id, status)
        if not order:
            raise LookupError("Order ID not found")

        logger.info(f"Order {order_id} moved to {status.value}")
        self.bus.invalidate(ORDERS)
        return order
