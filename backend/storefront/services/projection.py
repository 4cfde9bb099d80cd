"""
Derivation of the displayed product list.

`project` filters by brand, category and price (in that order) and then
sorts with Python's stable sort, so products that compare equal keep the
upstream ranking order. Pinned products get no special placement here.
"""
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from storefront.schemas.product_schema import FilterSpec, Product, SortOption

# (key, descending) per sort option; None means keep input order
SORT_KEYS: Dict[SortOption, Optional[Tuple[Callable[[Product], object], bool]]] = {
    SortOption.POPULARITY: None,
    SortOption.PRICE_ASC: (lambda p: p.price, False),
    SortOption.PRICE_DESC: (lambda p: p.price, True),
    SortOption.NEWEST: (lambda p: p.created_at, True),
    SortOption.MOST_VIEWED: (lambda p: p.stats.views_last_month if p.stats else 0, True),
    SortOption.BEST_SELLING: (lambda p: p.stats.volume_sold_last_month if p.stats else 0, True),
}


def apply_filters(products: Iterable[Product], filters: FilterSpec) -> List[Product]:
    result = list(products)
    if filters.brands:
        result = [p for p in result if p.brand in filters.brands]
    if filters.categories:
        result = [p for p in result if p.category in filters.categories]
    low, high = filters.price_range
    return [p for p in result if low <= p.price <= high]


def apply_sort(products: Iterable[Product], sort_option: SortOption) -> List[Product]:
    spec = SORT_KEYS[sort_option]
    if spec is None:
        return list(products)
    key, descending = spec
    # reverse=True keeps equal elements in their original order
    return sorted(products, key=key, reverse=descending)


def project(
    products: Sequence[Product], filters: FilterSpec, sort_option: SortOption
) -> List[Product]:
    """Filtered, sorted copy of `products`. The input sequence is not modified."""
    return apply_sort(apply_filters(products, filters), sort_option)


def search(products: Iterable[Product], term: Optional[str]) -> List[Product]:
    """Case-insensitive substring match on name or brand; a blank term matches everything."""
    needle = (term or "").strip().lower()
    if not needle:
        return list(products)
    return [
        p for p in products if needle in p.name.lower() or needle in p.brand.lower()
    ]


def paginate(products: Sequence[Product], page: int = 1, size: int = 20) -> Tuple[List[Product], int]:
    if page < 1 or size < 1:
        raise ValueError("page and size must be positive")
    start = (page - 1) * size
    return list(products[start:start + size]), len(products)


def facets(products: Iterable[Product]) -> Dict[str, List[str]]:
    brands, categories = set(), set()
    for p in products:
        brands.add(p.brand)
        categories.add(p.category)
    return {"brands": sorted(brands), "categories": sorted(categories)}
