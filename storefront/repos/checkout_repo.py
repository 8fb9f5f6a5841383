# storefront/repos/checkout_repo.py
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.pending_checkout import PendingCheckoutModel
from storefront.domain.order_status import PendingCheckoutStatus


class CheckoutRepo:
    def __init__(self, db: Session):
        self.db = db

    def create(self, checkout: PendingCheckoutModel) -> PendingCheckoutModel:
        self.db.add(checkout)
        self.db.commit()
        self.db.refresh(checkout)
        return checkout

    def get(self, token: str) -> PendingCheckoutModel | None:
        return self.db.get(PendingCheckoutModel, token)

    def mark(self, token: str, status: PendingCheckoutStatus) -> PendingCheckoutModel | None:
        checkout = self.get(token)
        if checkout:
            checkout.status = status.value
            self.db.commit()
        return checkout

    def find_pending_before(self, cutoff: datetime) -> list[PendingCheckoutModel]:
        return list(
            self.db.execute(
                select(PendingCheckoutModel).where(
                    PendingCheckoutModel.status == PendingCheckoutStatus.PENDING.value,
                    PendingCheckoutModel.created_at < cutoff,
                )
            ).scalars().all()
        )
