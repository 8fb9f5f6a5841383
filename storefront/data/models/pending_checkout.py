from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Numeric, JSON

from storefront.data.database import Base
from storefront.domain.order_status import PendingCheckoutStatus


def _now():
    return datetime.now(timezone.utc)


class PendingCheckoutModel(Base):
    """Kopia OrderIntent po stronie serwera, klucz = checkout_token."""

    __tablename__ = "pending_checkouts"

    token = Column(String, primary_key=True)
    owner_ref = Column(String, nullable=True)
    total_price = Column(Numeric(10, 2), nullable=False)
    intent = Column(JSON, nullable=False)

    status = Column(String, nullable=False, default=PendingCheckoutStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)
