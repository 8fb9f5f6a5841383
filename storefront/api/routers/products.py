from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.schemas import CategoryOut, ProductOut
from storefront.repos.product_repo import ProductRepo
from storefront.services.catalog_service import CatalogService

router = APIRouter(prefix="/products", tags=["products"])


def get_service(db: Session = Depends(get_db)) -> CatalogService:
    return CatalogService(ProductRepo(db))


@router.get("/", response_model=List[ProductOut])
def list_products(
    category_id: int | None = Query(None),
    search: str | None = Query(None),
    sort: str = Query("name", description="name | price-asc | price-desc"),
    svc: CatalogService = Depends(get_service),
):
    try:
        return svc.list_products(category_id=category_id, search=search, sort=sort)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/categories", response_model=List[CategoryOut])
def list_categories(svc: CatalogService = Depends(get_service)):
    return svc.list_categories()


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, svc: CatalogService = Depends(get_service)):
    try:
        return svc.get_product(product_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
