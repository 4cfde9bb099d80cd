import threading
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from storefront.schemas.product_schema import FilterSpec, Product, SortOption
from storefront.services.product_store import ProductStore
from storefront.services.projection import project


class ViewState(BaseModel):
    model_config = ConfigDict(frozen=True)
    products: List[Product]
    filters: FilterSpec
    sort_option: SortOption
    active_filter_count: int
    total: int
    is_loading: bool
    error: Optional[str] = None


class ProductView:
    """
    The storefront grid: current filters and sort option over a ProductStore.

    The displayed list is recomputed on every setter call and on every
    snapshot the store publishes.
    """

    def __init__(
        self,
        store: ProductStore,
        filters: Optional[FilterSpec] = None,
        sort_option: SortOption = SortOption.POPULARITY,
    ):
        self.store = store
        self._lock = threading.RLock()
        self._filters = filters or FilterSpec()
        self._sort_option = sort_option
        self._source: List[Product] = []
        self._products: List[Product] = []
        # subscribe before seeding so a snapshot applied in between is not lost
        self._unsubscribe = store.subscribe(self._on_snapshot)
        with self._lock:
            self._source = store.products
            self._recompute()

    def _recompute(self):
        with self._lock:
            self._products = project(self._source, self._filters, self._sort_option)

    def _on_snapshot(self, products: List[Product]):
        with self._lock:
            self._source = products
            self._recompute()

    @property
    def products(self) -> List[Product]:
        with self._lock:
            return list(self._products)

    @property
    def filters(self) -> FilterSpec:
        return self._filters

    @property
    def sort_option(self) -> SortOption:
        return self._sort_option

    def set_filters(self, filters: FilterSpec) -> List[Product]:
        with self._lock:
            self._filters = filters
            self._recompute()
            return list(self._products)

    def set_sort_option(self, sort_option: SortOption) -> List[Product]:
        with self._lock:
            self._sort_option = sort_option
            self._recompute()
            return list(self._products)

    def clear_filters(self) -> List[Product]:
        """Back to the default filter spec; the sort option is kept."""
        return self.set_filters(FilterSpec())

    def state(self) -> ViewState:
        with self._lock:
            return ViewState(
                products=list(self._products),
                filters=self._filters,
                sort_option=self._sort_option,
                active_filter_count=self._filters.active_count,
                total=len(self._products),
                is_loading=self.store.is_loading,
                error=self.store.error,
            )

    def close(self):
        self._unsubscribe()
