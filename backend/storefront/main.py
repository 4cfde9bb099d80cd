import logging
from contextlib import asynccontextmanager

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.adapters.mock_catalogue import MockCatalogueAdapter
from storefront.api.health import router as health_router
from storefront.api.routes_admin import router as admin_router
from storefront.api.routes_catalogue import router as catalogue_router
from storefront.api.routes_view import router as view_router
from storefront.config import settings
from storefront.db import SessionLocal, init_db
from storefront.logging_config import configure_logging
from storefront.services.product_store import ProductStore
from storefront.services.product_view import ProductView

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    configure_logging(settings.LOG_LEVEL)
    init_db()

    catalogue = MockCatalogueAdapter(
        SessionLocal,
        delay_ms=settings.CATALOGUE_MOCK_DELAY_MS,
        failure_rate=settings.CATALOGUE_FAILURE_RATE,
    )
    store = ProductStore(catalogue)
    view = ProductView(store)
    app.state.catalogue = catalogue
    app.state.store = store
    app.state.view = view

    # first load; a failure leaves an empty list and the error flag set
    store.refresh()

    # periodic refresh runs whether or not the previous one succeeded
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        store.refresh,
        "interval",
        seconds=settings.REFRESH_INTERVAL_SECONDS,
        id="refresh_products",
    )
    scheduler.start()
    logger.info("Product refresh scheduled every %ss", settings.REFRESH_INTERVAL_SECONDS)

    try:
        yield
    finally:
        scheduler.shutdown(wait=False)
        view.close()


app = FastAPI(title="SkinSeoul Storefront - Backend", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router, prefix="/api", tags=["health"])

app.include_router(catalogue_router, prefix="/api/products", tags=["catalogue"])

app.include_router(view_router, tags=["view"])

app.include_router(admin_router, tags=["admin"])
