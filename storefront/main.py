# storefront/main.py
from fastapi import FastAPI
import uvicorn

from storefront.api.routers import carts, checkout, guest_orders, health, orders, products
from storefront.data.database import Base, SessionLocal, engine
from storefront.data.seed import seed
from storefront.services.cache import InvalidationBus, QueryCache, ORDERS
from storefront.services.device_storage import build_device_storage
from storefront.services.relay_client import RelayClient
from storefront.utils.settings import SEED_CATALOG
from storefront.utils.logging import get_logger

# import wszystkich modeli przed create_all
import storefront.data.models  # noqa: F401

logger = get_logger(__name__)


def init_db():
    logger.info(f"Initializing database, tables: {list(Base.metadata.tables.keys())}")
    Base.metadata.create_all(bind=engine)

    if SEED_CATALOG:
        db = SessionLocal()
        try:
            created = seed(db)
            logger.info(f"Seeded {created} catalog products")
        finally:
            db.close()


def create_app() -> FastAPI:
    init_db()

    app = FastAPI(
        title="Mushroom Storefront",
        version="1.0.0",
    )

    # jedna szyna uniewaznien na aplikacje, przekazywana do serwisow
    bus = InvalidationBus()
    app.state.invalidation_bus = bus
    app.state.orders_cache = QueryCache(bus, ORDERS)
    app.state.device_storage = build_device_storage()
    app.state.relay_client = RelayClient()

    app.include_router(health.router)
    app.include_router(products.router)
    app.include_router(carts.router)
    app.include_router(checkout.router)
    app.include_router(orders.router)
    app.include_router(guest_orders.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
