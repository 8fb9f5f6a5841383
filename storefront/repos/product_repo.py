from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from storefront.data.models.category import CategoryModel
from storefront.data.models.product import ProductModel

SORTS = {
    "name": (ProductModel.name.asc(),),
    "price-asc": (ProductModel.price.asc(), ProductModel.name.asc()),
    "price-desc": (ProductModel.price.desc(), ProductModel.name.asc()),
}


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def list_products(
        self,
        category_id: int | None = None,
        search: str | None = None,
        sort: str = "name",
    ) -> list[ProductModel]:
        stmt = select(ProductModel)
        if category_id is not None:
            stmt = stmt.where(ProductModel.category_id == category_id)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(or_(ProductModel.name.ilike(pattern), ProductModel.description.ilike(pattern)))
        stmt = stmt.order_by(*SORTS[sort])
        return list(self.db.execute(stmt).scalars().all())

    def list_categories(self) -> list[CategoryModel]:
        return list(self.db.execute(select(CategoryModel).order_by(CategoryModel.name)).scalars().all())
