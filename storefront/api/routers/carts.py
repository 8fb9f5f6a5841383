# storefront/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_cart_repo, get_device_storage
from storefront.data.database import get_db
from storefront.domain.schemas import AddItemIn, CartOut, SetQuantityIn
from storefront.repos.cart_repo import CartRepository, LocalDeviceCartRepository, RemoteUserCartRepository
from storefront.repos.product_repo import ProductRepo
from storefront.services.cart_service import CartService, cart_total, transfer_on_login
from storefront.services.device_storage import DeviceStorage

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(
    repo: CartRepository = Depends(get_cart_repo),
    db: Session = Depends(get_db),
) -> CartService:
    return CartService(repo=repo, products=ProductRepo(db))


@router.get("/", response_model=CartOut)
def get_cart(svc: CartService = Depends(get_service)):
    return svc.get_cart()


@router.post("/items", response_model=CartOut)
def add_item(payload: AddItemIn, svc: CartService = Depends(get_service)):
    try:
        return svc.add(payload.product_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/items/{product_id}", response_model=CartOut)
def set_quantity(product_id: int, payload: SetQuantityIn, svc: CartService = Depends(get_service)):
    try:
        return svc.set_quantity(product_id, payload.quantity)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/items/{product_id}", response_model=CartOut)
def remove_item(product_id: int, svc: CartService = Depends(get_service)):
    return svc.remove(product_id)


@router.delete("/", response_model=CartOut)
def clear_cart(svc: CartService = Depends(get_service)):
    return svc.clear()


@router.post("/transfer", response_model=CartOut)
def transfer_cart(
    device_id: str = Query(..., min_length=1),
    user_id: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    storage: DeviceStorage = Depends(get_device_storage),
):
    """Po zalogowaniu: koszyk goscia z urzadzenia przechodzi na konto."""
    lines = transfer_on_login(
        LocalDeviceCartRepository(storage, device_id),
        RemoteUserCartRepository(db, user_id),
    )
    return {"owner_ref": user_id, "items": lines, "total": cart_total(lines)}
