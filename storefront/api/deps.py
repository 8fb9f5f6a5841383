# storefront/api/deps.py
from fastapi import Depends, Query, Request
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.repos.cart_repo import CartRepository, cart_repository_for
from storefront.services.cache import InvalidationBus, QueryCache
from storefront.services.device_storage import DeviceStorage
from storefront.services.relay_client import RelayClient


def get_device_storage(request: Request) -> DeviceStorage:
    return request.app.state.device_storage


def get_bus(request: Request) -> InvalidationBus:
    return request.app.state.invalidation_bus


def get_orders_cache(request: Request) -> QueryCache:
    return request.app.state.orders_cache


def get_relay_client(request: Request) -> RelayClient:
    return request.app.state.relay_client


def get_cart_repo(
    device_id: str = Query(..., min_length=1),
    user_id: str | None = Query(None),
    db: Session = Depends(get_db),
    storage: DeviceStorage = Depends(get_device_storage),
) -> CartRepository:
    return cart_repository_for(db, storage, device_id, user_id)
