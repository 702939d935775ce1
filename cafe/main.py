# cafe/main.py
from fastapi import FastAPI
import uvicorn

from cafe.data.database import Base, engine
from cafe.api.routers import admin, carts, catalog, checkout, health, orders, otp, store, users
from cafe.utils.logging import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)

# IMPORT WSZYSTKICH MODELI NA POCZATKU (PRZED JAKIMKOLWIEK CREATE_ALL)
import cafe.data.models  # noqa: E402,F401

logger.info(f"Models registered in Base.metadata: {list(Base.metadata.tables.keys())}")

try:
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")
except Exception as e:
    logger.error(f"Failed to create tables: {e}")
    raise


def create_app() -> FastAPI:
    app = FastAPI(
        title="Cafe Ordering Service",
        version="1.0.0",
    )

    # Include routers
    app.include_router(health.router)
    app.include_router(store.router)
    app.include_router(catalog.router)
    app.include_router(carts.router)
    app.include_router(checkout.router)
    app.include_router(otp.router)
    app.include_router(orders.router)
    app.include_router(users.router)
    app.include_router(admin.auth_router)
    app.include_router(admin.router)
    app.include_router(catalog.admin_router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
