import pytest
from sqlalchemy.exc import OperationalError

from storefront.data.models.order import OrderModel
from storefront.domain.order_status import OrderStatus, guest_bucket
from storefront.repos.order_repo import OrderRepo
from storefront.services.device_storage import GUEST_SESSIONS_SLOT
from storefront.services.guest_order_service import GuestOrderService
from storefront.services.order_finalizer import OrderFinalizer


@pytest.fixture
def place_guest_order(db_session, storage, bus, notifications, stash_intent):
    finalizer = OrderFinalizer(db_session, storage, bus, notifications=notifications)

    def _place(device_id="device-1"):
        stash_intent(device_id=device_id)
        return finalizer.finalize(device_id, "success")["order"]

    return _place


@pytest.fixture
def service(db_session, storage):
    return GuestOrderService(db_session, storage)


def test_every_status_has_a_bucket():
    buckets = {status: guest_bucket(status) for status in OrderStatus}

    assert buckets.pop(OrderStatus.DELIVERED) == "delivered"
    assert set(buckets.values()) == {"pending"}


def test_no_sessions(service):
    assert service.list_orders("device-1") == {"pending": [], "delivered": []}


def test_statuses_are_refreshed_and_bucketed(service, place_guest_order, db_session, storage):
    first = place_guest_order()
    second = place_guest_order()
    OrderRepo(db_session).update_order_status(first.id, OrderStatus.DELIVERED)
    OrderRepo(db_session).update_order_status(second.id, OrderStatus.SHIPPED)

    buckets = service.list_orders("device-1")

    assert [s.order_id for s in buckets["delivered"]] == [first.id]
    assert [s.order_id for s in buckets["pending"]] == [second.id]
    assert buckets["pending"][0].order_data["status"] == "shipped"

    cached = storage.read_json("device-1", GUEST_SESSIONS_SLOT)
    assert {s["order_id"]: s["order_data"]["status"] for s in cached} == {
        first.id: "delivered",
        second.id: "shipped",
    }


def test_removed_orders_are_dropped(service, place_guest_order, db_session):
    kept = place_guest_order()
    removed = place_guest_order()
    db_session.query(OrderModel).filter_by(id=removed.id).delete()
    db_session.commit()

    buckets = service.list_orders("device-1")

    assert [s.order_id for s in buckets["pending"]] == [kept.id]


def test_sessions_belong_to_their_device(service, place_guest_order):
    place_guest_order("device-1")

    assert service.list_orders("device-2") == {"pending": [], "delivered": []}


def test_forget(service, place_guest_order, storage):
    first = place_guest_order()
    second = place_guest_order()

    service.forget("device-1", first.id)
    assert [s.order_id for s in service.list_orders("device-1")["pending"]] == [second.id]

    service.forget_all("device-1")
    assert storage.get_item("device-1", GUEST_SESSIONS_SLOT) is None


def test_refresh_retries_after_dropped_connection(service, place_guest_order, monkeypatch):
    order = place_guest_order()
    real_get_orders = service.repo.get_orders
    real_rollback = service.repo.rollback
    calls = []

    def flaky_get_orders(order_ids):
        calls.append("read")
        if len(calls) == 1:
            raise OperationalError("SELECT", {}, Exception("server closed the connection unexpectedly"))
        return real_get_orders(order_ids)

    def rollback():
        calls.append("rollback")
        real_rollback()

    monkeypatch.setattr(service.repo, "get_orders", flaky_get_orders)
    monkeypatch.setattr(service.repo, "rollback", rollback)

    buckets = service.list_orders("device-1")

    assert calls == ["read", "rollback", "read"]
    assert [s.order_id for s in buckets["pending"]] == [order.id]
