from sqlalchemy import Column, Integer, String, JSON

from storefront.data.database import Base


class CustomerDetailModel(Base):
    __tablename__ = "customer_detail"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    customer_name = Column(String, nullable=False)
    shipping_address = Column(JSON, nullable=False)
