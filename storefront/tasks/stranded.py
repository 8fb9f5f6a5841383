# storefront/tasks/stranded.py
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from storefront.celery_worker import celery_app
from storefront.data.database import SessionLocal
from storefront.domain.order_status import PendingCheckoutStatus
from storefront.repos.checkout_repo import CheckoutRepo
from storefront.utils.settings import STRANDED_CHECKOUT_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def flag_stranded_checkouts(db: Session, now: datetime | None = None, max_age: int = STRANDED_CHECKOUT_SECONDS) -> list[str]:
    """
    Checkouty bez zamowienia po max_age sekundach. Platnosc mogla przejsc
    w bramce - wymagaja recznego uzgodnienia.
    """
    now = now or datetime.now(timezone.utc)
    repo = CheckoutRepo(db)

    stale = repo.find_pending_before(now - timedelta(seconds=max_age))
    for checkout in stale:
        logger.warning(
            f"Checkout {checkout.token} (owner {checkout.owner_ref or 'guest'}, "
            f"total {checkout.total_price}) stranded since {checkout.created_at}"
        )
        checkout.status = PendingCheckoutStatus.STRANDED.value
    db.commit()

    return [checkout.token for checkout in stale]


@celery_app.task(name="storefront.tasks.stranded.flag_stranded_checkouts_task")
def flag_stranded_checkouts_task():
    logger.info("Stranded checkout sweep started")

    db = SessionLocal()
    try:
        tokens = flag_stranded_checkouts(db)
        logger.info(f"Flagged {len(tokens)} stranded checkouts")
        return tokens
    finally:
        db.close()
