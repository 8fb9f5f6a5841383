# storefront/api/routers/orders.py
from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from storefront.api.deps import get_bus, get_orders_cache
from storefront.data.database import get_db
from storefront.domain.schemas import OrderOut, OrderStatusIn
from storefront.services.cache import InvalidationBus, QueryCache
from storefront.services.order_service import OrderService
from storefront.utils.settings import ADMIN_TOKEN

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(
    db: Session = Depends(get_db),
    bus: InvalidationBus = Depends(get_bus),
    cache: QueryCache = Depends(get_orders_cache),
) -> OrderService:
    return OrderService(db, bus, cache)


def require_admin(x_admin_token: str | None = Header(None)):
    if x_admin_token != ADMIN_TOKEN:
        raise HTTPException(status_code=403, detail="Admin access required")


@router.get("/{order_id}", response_model=OrderOut)
def track_order(order_id: int, svc: OrderService = Depends(get_service)):
    """Publiczne sledzenie zamowienia po ID."""
    try:
        return svc.get_order(order_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/{order_id}/status", response_model=OrderOut, dependencies=[Depends(require_admin)])
def update_status(order_id: int, payload: OrderStatusIn, svc: OrderService = Depends(get_service)):
    try:
        return svc.update_status(order_id, payload.status)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
