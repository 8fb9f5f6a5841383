# storefront/api/routers/guest_orders.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_device_storage
from storefront.data.database import get_db
from storefront.domain.schemas import GuestOrdersOut
from storefront.services.device_storage import DeviceStorage
from storefront.services.guest_order_service import GuestOrderService

router = APIRouter(prefix="/guest-orders", tags=["guest-orders"])


def get_service(
    db: Session = Depends(get_db),
    storage: DeviceStorage = Depends(get_device_storage),
) -> GuestOrderService:
    return GuestOrderService(db, storage)


@router.get("/", response_model=GuestOrdersOut)
def list_guest_orders(
    device_id: str = Query(..., min_length=1),
    svc: GuestOrderService = Depends(get_service),
):
    return svc.list_orders(device_id)


@router.delete("/{order_id}", status_code=204)
def forget_guest_order(
    order_id: int,
    device_id: str = Query(..., min_length=1),
    svc: GuestOrderService = Depends(get_service),
):
    svc.forget(device_id, order_id)


@router.delete("/", status_code=204)
def forget_all_guest_orders(
    device_id: str = Query(..., min_length=1),
    svc: GuestOrderService = Depends(get_service),
):
    svc.forget_all(device_id)
