from datetime import datetime, timedelta, timezone
from decimal import Decimal

from storefront.data.models.pending_checkout import PendingCheckoutModel
from storefront.domain.order_status import PendingCheckoutStatus
from storefront.services.order_finalizer import OrderFinalizer
from storefront.tasks.stranded import flag_stranded_checkouts


def _checkout(token, status=PendingCheckoutStatus.PENDING):
    return PendingCheckoutModel(
        token=token,
        owner_ref=None,
        total_price=Decimal("30.98"),
        intent={"checkout_token": token},
        status=status.value,
    )


def test_old_pending_checkouts_are_flagged(db_session):
    db_session.add_all([
        _checkout("pending-1"),
        _checkout("done-1", PendingCheckoutStatus.FINALIZED),
    ])
    db_session.commit()

    later = datetime.now(timezone.utc) + timedelta(hours=2)
    flagged = flag_stranded_checkouts(db_session, now=later, max_age=60)

    assert flagged == ["pending-1"]
    assert db_session.get(PendingCheckoutModel, "pending-1").status == PendingCheckoutStatus.STRANDED.value
    assert db_session.get(PendingCheckoutModel, "done-1").status == PendingCheckoutStatus.FINALIZED.value


def test_recent_checkouts_are_left_alone(db_session):
    db_session.add(_checkout("pending-1"))
    db_session.commit()

    assert flag_stranded_checkouts(db_session, max_age=3600) == []
    assert db_session.get(PendingCheckoutModel, "pending-1").status == PendingCheckoutStatus.PENDING.value


def test_failed_payments_are_not_flagged(db_session, storage, bus, notifications, stash_intent):
    intent = stash_intent()
    db_session.add(_checkout(intent.checkout_token))
    db_session.commit()

    finalizer = OrderFinalizer(db_session, storage, bus, notifications=notifications)
    finalizer.finalize("device-1", "failure", "CANCELED")

    later = datetime.now(timezone.utc) + timedelta(hours=2)
    assert flag_stranded_checkouts(db_session, now=later, max_age=60) == []
    assert db_session.get(PendingCheckoutModel, intent.checkout_token).status == PendingCheckoutStatus.FAILED.value
