from sqlalchemy import Column, Integer, ForeignKey, String, JSON
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class GuestOrderModel(Base):
    __tablename__ = "guest_order"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, unique=True)
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False)
    shipping_address = Column(JSON, nullable=False)

    order = relationship("OrderModel", back_populates="guest_order")
