# storefront/services/catalog_service.py
from typing import List

from storefront.data.models.category import CategoryModel
from storefront.data.models.product import ProductModel
from storefront.repos.product_repo import SORTS, ProductRepo


class CatalogService:
    """Przegladanie katalogu - tylko odczyt."""

    def __init__(self, products: ProductRepo):
        self.products = products

    def list_products(self, category_id: int | None = None, search: str | None = None, sort: str = "name") -> List[ProductModel]:
        if sort not in SORTS:
            raise ValueError(f"Unknown sort: {sort}")
        search = (search or "").strip() or None
        return self.products.list_products(category_id=category_id, search=search, sort=sort)

    def list_categories(self) -> List[CategoryModel]:
        return self.products.list_categories()

    def get_product(self, product_id: int) -> ProductModel:
        product = self.products.get_product(product_id)
        if not product:
            raise LookupError(f"Product {product_id} not found")
        return product
