# storefront/data/seed.py
from decimal import Decimal

from sqlalchemy.orm import Session

from storefront.data.models.category import CategoryModel
from storefront.data.models.product import ProductModel

CATEGORIES = [
    {"id": 1, "name": "Fresh"},
    {"id": 2, "name": "Dried"},
]

CATALOG = [
    {
        "id": 1,
        "name": "Organic Shiitake",
        "description": "Smoky, meaty caps grown on oak logs.",
        "price": Decimal("12.99"),
        "image": "/img/shiitake.jpg",
        "category_id": 1,
    },
    {
        "id": 2,
        "name": "Oyster Mushrooms",
        "description": "Delicate clusters with a mild, sweet flavour.",
        "price": Decimal("9.50"),
        "image": "/img/oyster.jpg",
        "category_id": 1,
    },
    {
        "id": 3,
        "name": "Lion's Mane",
        "description": "Shaggy white heads with a seafood-like texture.",
        "price": Decimal("18.00"),
        "image": "/img/lions-mane.jpg",
        "category_id": 1,
    },
    {
        "id": 4,
        "name": "Dried Porcini",
        "description": "Sun-dried slices for stocks and risotto.",
        "price": Decimal("5.00"),
        "image": "/img/porcini.jpg",
        "category_id": 2,
    },
]


def seed(db: Session) -> int:
    # tylko jesli katalog jest pusty
    if db.query(ProductModel).first():
        return 0

    db.add_all(CategoryModel(**row) for row in CATEGORIES)
    db.add_all(ProductModel(**row) for row in CATALOG)
    db.commit()
    return len(CATALOG)
