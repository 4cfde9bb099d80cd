import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from storefront.adapters.mock_catalogue import MockCatalogueAdapter
from storefront.api.deps import get_catalogue, get_store
from storefront.db import engine
from storefront.services.product_store import ProductStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", tags=["health"])
def health(
    catalogue: MockCatalogueAdapter = Depends(get_catalogue),
    store: ProductStore = Depends(get_store),
):
    db_ok = False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            db_ok = True
    except SQLAlchemyError:
        logger.exception("Database health check failed")

    catalogue_ok = catalogue.health_check()
    state = store.state()
    store_ok = state.error is None and state.last_refresh is not None

    return {
        "status": "ok" if db_ok and catalogue_ok and store_ok else "degraded",
        "db": db_ok,
        "catalogue_adapter": catalogue_ok,
        "store": {
            "ok": store_ok,
            "products": len(state.products),
            "version": state.version,
            "error": state.error,
        },
    }
