import logging
import threading
from datetime import datetime, timezone
from typing import Callable, List, Optional

from pydantic import BaseModel, ConfigDict

from storefront.adapters.mock_catalogue import CatalogueError, ProductNotFound
from storefront.schemas.product_schema import Product

logger = logging.getLogger(__name__)

FETCH_ERROR_MESSAGE = "Failed to fetch products. Please try again later."
UPDATE_ERROR_MESSAGE = "Failed to update product pin status"

Subscriber = Callable[[List[Product]], None]


class StoreError(Exception):
    pass


class FetchError(StoreError):
    """The catalogue could not deliver a usable snapshot."""


class UpdateError(StoreError):
    """A pin/unpin request was rejected or could not be delivered."""

    def __init__(self, message: str, not_found: bool = False):
        super().__init__(message)
        self.not_found = not_found


class StoreState(BaseModel):
    model_config = ConfigDict(frozen=True)
    products: List[Product]
    is_loading: bool
    error: Optional[str] = None
    last_refresh: Optional[datetime] = None
    version: int = 0


class ProductStore:
    """
    Session-wide holder of the catalogue snapshot.

    The list is replaced wholesale by each successful `refresh`; the only
    local edit is the optimistic pin flag set between a pin call and the
    refresh that follows it.
    Failures are recorded in `error` and never raised to the caller; the
    previous snapshot stays in place. Overlapping refreshes are not merged
    or de-duplicated: whichever completes last wins.
    """

    def __init__(self, catalogue):
        self.catalogue = catalogue
        self._lock = threading.RLock()
        self._products: List[Product] = []
        self._subscribers: List[Subscriber] = []
        self.is_loading = False
        self.error: Optional[str] = None
        self.last_failure: Optional[StoreError] = None
        self.last_refresh: Optional[datetime] = None
        # number of snapshots applied so far
        self.version = 0

    # ----- reads -------------------------------------------------------------

    @property
    def products(self) -> List[Product]:
        with self._lock:
            return list(self._products)

    def get(self, product_id: str) -> Optional[Product]:
        with self._lock:
            return next((p for p in self._products if p.id == product_id), None)

    @property
    def pinned_count(self) -> int:
        with self._lock:
            return sum(1 for p in self._products if p.is_pinned)

    def state(self) -> StoreState:
        with self._lock:
            return StoreState(
                products=list(self._products),
                is_loading=self.is_loading,
                error=self.error,
                last_refresh=self.last_refresh,
                version=self.version,
            )

    # ----- subscribers -------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register `callback` for every applied snapshot; returns an unsubscribe function."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, products: List[Product]):
        with self._lock:
            subscribers = list(self._subscribers)
        for cb in subscribers:
            try:
                cb(list(products))
            except Exception:
                logger.exception("Product store subscriber %r failed", cb)

    def _record_failure(self, exc: StoreError, message: str):
        with self._lock:
            self.error = message
            self.last_failure = exc

    # ----- refresh -----------------------------------------------------------

    def _fetch(self) -> List[Product]:
        try:
            products = self.catalogue.fetch_products()
        except CatalogueError as e:
            raise FetchError(str(e)) from e
        if products is None:
            raise FetchError("Catalogue returned no product list")
        seen = set()
        for p in products:
            if p.id in seen:
                raise FetchError(f"Duplicate product id in snapshot: {p.id}")
            seen.add(p.id)
        return list(products)

    def refresh(self) -> bool:
        """
        Replace the snapshot with a fresh fetch.

        Returns True when a new snapshot was applied and subscribers were
        notified, False when the fetch failed (see `error`).
        """
        with self._lock:
            self.is_loading = True
            self.error = None
            self.last_failure = None
        try:
            # fetched outside the lock so a slow catalogue does not block readers
            products = self._fetch()
        except FetchError as e:
            logger.warning("Product refresh failed: %s", e)
            self._record_failure(e, FETCH_ERROR_MESSAGE)
            with self._lock:
                self.is_loading = False
            return False

        with self._lock:
            self._products = products
            self.last_refresh = datetime.now(timezone.utc)
            self.version += 1
            self.is_loading = False
            # an overlapping refresh may have failed while this one was in flight
            self.error = None
            self.last_failure = None
            version = self.version
        logger.info("Applied catalogue snapshot v%d (%d products)", version, len(products))
        self._notify(products)
        return True

    # ----- pin / unpin -------------------------------------------------------

    def _mark_local(self, product_id: str, pinned: bool):
        # optimistic until the next snapshot arrives; subscribers are not notified
        with self._lock:
            self._products = [
                p.model_copy(update={"is_pinned": pinned}) if p.id == product_id else p
                for p in self._products
            ]

    def _send_pin(self, product_id: str, pinned: bool, actor: Optional[str]):
        try:
            if pinned:
                self.catalogue.pin_product(product_id, actor=actor)
            else:
                self.catalogue.unpin_product(product_id, actor=actor)
        except ProductNotFound as e:
            raise UpdateError(f"Unknown product {product_id}", not_found=True) from e
        except CatalogueError as e:
            raise UpdateError(f"Pin change for {product_id} rejected: {e}") from e

    def _set_pinned(self, product_id: str, pinned: bool, actor: Optional[str]) -> bool:
        try:
            self._send_pin(product_id, pinned, actor)
        except UpdateError as e:
            logger.warning("Product pin update failed: %s", e)
            self._record_failure(e, UPDATE_ERROR_MESSAGE)
            return False

        logger.info(
            "Product %s %s by %s", product_id, "pinned" if pinned else "unpinned", actor or "unknown"
        )
        self._mark_local(product_id, pinned)
        self.refresh()
        return True

    def pin(self, product_id: str, actor: Optional[str] = None) -> bool:
        return self._set_pinned(product_id, True, actor)

    def unpin(self, product_id: str, actor: Optional[str] = None) -> bool:
        return self._set_pinned(product_id, False, actor)

    def toggle_pin(self, product_id: str, actor: Optional[str] = None) -> bool:
        """Pin an unpinned product or unpin a pinned one, judged by the held snapshot."""
        current = self.get(product_id)
        if current is None:
            logger.warning("Toggle requested for unknown product %s", product_id)
            self._record_failure(
                UpdateError(f"Unknown product {product_id}", not_found=True),
                UPDATE_ERROR_MESSAGE,
            )
            return False
        return self._set_pinned(product_id, not current.is_pinned, actor)
