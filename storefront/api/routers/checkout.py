# storefront/api/routers/checkout.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_bus, get_cart_repo, get_device_storage, get_relay_client
from storefront.data.database import get_db
from storefront.domain.order_status import CheckoutState
from storefront.domain.schemas import CheckoutIn, CheckoutOut, FinalizeOut
from storefront.repos.cart_repo import CartRepository
from storefront.services.cache import InvalidationBus
from storefront.services.checkout_service import CheckoutError, CheckoutService
from storefront.services.device_storage import DeviceStorage
from storefront.services.order_finalizer import OrderFinalizer
from storefront.services.relay_client import RelayClient

router = APIRouter(prefix="/checkout", tags=["checkout"])


def get_finalizer(
    db: Session = Depends(get_db),
    storage: DeviceStorage = Depends(get_device_storage),
    bus: InvalidationBus = Depends(get_bus),
) -> OrderFinalizer:
    return OrderFinalizer(db=db, storage=storage, bus=bus)


@router.post("/", response_model=CheckoutOut)
def place_order(
    payload: CheckoutIn,
    device_id: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    storage: DeviceStorage = Depends(get_device_storage),
    cart_repo: CartRepository = Depends(get_cart_repo),
    relay: RelayClient = Depends(get_relay_client),
):
    svc = CheckoutService(db=db, storage=storage, cart_repo=cart_repo, relay=relay)
    try:
        return svc.place_order(device_id, payload.contact, payload.shipping_address)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CheckoutError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/state")
def checkout_state(
    device_id: str = Query(..., min_length=1),
    finalizer: OrderFinalizer = Depends(get_finalizer),
) -> dict:
    state: CheckoutState = finalizer.state(device_id)
    return {"state": state.value}


@router.post("/finalize", response_model=FinalizeOut)
def finalize(
    device_id: str = Query(..., min_length=1),
    status: str | None = Query(None),
    message: str | None = Query(None),
    finalizer: OrderFinalizer = Depends(get_finalizer),
):
    """Wywolywane po powrocie z bramki (?status=success / ?message=...)."""
    return finalizer.finalize(device_id, status, message)
