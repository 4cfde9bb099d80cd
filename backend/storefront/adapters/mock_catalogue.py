import logging
import random
import time
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from storefront.repositories.pin_event_repo import PinEventRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.product_schema import Product

logger = logging.getLogger(__name__)


class CatalogueError(Exception):
    """Base class for failures of the upstream catalogue."""


class CatalogueUnavailable(CatalogueError):
    """The catalogue could not be reached (simulated outage or database error)."""


class CatalogueCorrupt(CatalogueError):
    """The catalogue answered, but with data that does not form a valid snapshot."""


class ProductNotFound(CatalogueError):
    pass


class MockCatalogueAdapter:
    """
    Stand-in for the upstream product provider.

    Products live in the `catalogue_products` table; every call opens its own
    session from `session_factory`, so the adapter can be shared between
    request threads and the scheduler thread.
    """

    def __init__(self, session_factory, delay_ms: int = 200, failure_rate: float = 0.0):
        self.session_factory = session_factory
        self.delay_seconds = delay_ms / 1000.0
        self.failure_rate = failure_rate
        # tests flip this to make every call fail deterministically
        self.force_failure = False

    def _simulate_gateway(self, operation: str):
        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        if self.force_failure:
            raise CatalogueUnavailable(f"Simulated forced failure during {operation}")
        if self.failure_rate and random.random() < self.failure_rate:
            logger.warning("Simulated transient catalogue failure during %s", operation)
            raise CatalogueUnavailable(f"Simulated transient failure during {operation}")

    def fetch_products(self) -> List[Product]:
        """
        Return the full catalogue in upstream rank order.

        Raises:
            CatalogueUnavailable: simulated outage or database error.
            CatalogueCorrupt: a row fails validation or an id repeats.
        """
        self._simulate_gateway("fetch")
        db = self.session_factory()
        try:
            rows = ProductRepository(db).list_ranked()
            products = [Product.model_validate(r) for r in rows]
        except ValidationError as e:
            raise CatalogueCorrupt(f"Malformed catalogue row: {e}") from e
        except SQLAlchemyError as e:
            raise CatalogueUnavailable(f"Catalogue query failed: {e}") from e
        finally:
            db.close()

        seen = set()
        for p in products:
            if p.id in seen:
                raise CatalogueCorrupt(f"Duplicate product id in snapshot: {p.id}")
            seen.add(p.id)
        return products

    def _set_pinned(self, product_id: str, pinned: bool, actor: Optional[str]):
        self._simulate_gateway("pin" if pinned else "unpin")
        db = self.session_factory()
        try:
            with db.begin():
                p = ProductRepository(db).set_pinned(product_id, pinned)
                if p is None:
                    raise ProductNotFound(f"Product not found: {product_id}")
                PinEventRepository(db).record(
                    product_id,
                    "pinned" if pinned else "unpinned",
                    actor=actor,
                    product_name=p.name,
                )
        except SQLAlchemyError as e:
            raise CatalogueUnavailable(f"Catalogue update failed: {e}") from e
        finally:
            db.close()

    def pin_product(self, product_id: str, actor: Optional[str] = None) -> None:
        self._set_pinned(product_id, True, actor)

    def unpin_product(self, product_id: str, actor: Optional[str] = None) -> None:
        self._set_pinned(product_id, False, actor)

    def health_check(self) -> bool:
        if self.force_failure:
            return False
        db = self.session_factory()
        try:
            db.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            logger.exception("Catalogue health check failed")
            return False
        finally:
            db.close()
