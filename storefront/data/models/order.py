from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric, JSON
from sqlalchemy.orm import relationship

from storefront.data.database import Base
from storefront.domain.order_status import OrderStatus


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    order_number = Column(String, nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String, nullable=False, default=OrderStatus.PENDING.value)
    order_date = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    user_id = Column(String, nullable=True, index=True)  # NULL = zamowienie goscia
    items = Column(JSON, nullable=False, default=list)
    customer_detail_id = Column(Integer, ForeignKey("customer_detail.id"), nullable=True)
    checkout_token = Column(String, nullable=True, unique=True)

    customer_detail = relationship("CustomerDetailModel")
    guest_order = relationship("GuestOrderModel", back_populates="order", uselist=False)
