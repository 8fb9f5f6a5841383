# storefront/repos/order_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.customer_detail import CustomerDetailModel
from storefront.data.models.guest_order import GuestOrderModel
from storefront.data.models.order import OrderModel
from storefront.domain.order_status import OrderStatus


class OrderRepo:
    """Zapisy nie commituja - transakcje kontroluje serwis."""

    def __init__(self, db: Session):
        self.db = db

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_orders(self, order_ids: list[int]) -> dict[int, OrderModel]:
        if not order_ids:
            return {}
        rows = self.db.execute(select(OrderModel).where(OrderModel.id.in_(order_ids))).scalars().all()
        return {row.id: row for row in rows}

    def get_by_checkout_token(self, token: str) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(OrderModel.checkout_token == token)
        ).scalar_one_or_none()

    def add_customer_detail(self, detail: CustomerDetailModel) -> CustomerDetailModel:
        self.db.add(detail)
        self.db.flush()
        return detail

    def add_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def add_guest_order(self, guest: GuestOrderModel) -> GuestOrderModel:
        self.db.add(guest)
        self.db.flush()
        return guest

    def update_order_status(self, order_id: int, status: OrderStatus) -> OrderModel | None:
        order = self.get_order(order_id)
        if order:
            order.status = status.value
            self.db.commit()
            self.db.refresh(order)
        return order

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
