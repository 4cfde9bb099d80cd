from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError

from storefront.api.deps import get_store
from storefront.config import settings
from storefront.schemas.product_schema import FilterSpec, ProductOut, SortOption
from storefront.services.product_store import ProductStore
from storefront.services.projection import facets, paginate, project

router = APIRouter(tags=["catalogue"])


def product_to_dict(p) -> dict:
    return ProductOut.model_validate(p).model_dump(mode="json")


@router.get("", summary="List products")
def list_products(
    brand: List[str] = Query([], description="repeat to allow several brands"),
    category: List[str] = Query([], description="repeat to allow several categories"),
    price_min: float = Query(settings.DEFAULT_PRICE_MIN),
    price_max: float = Query(settings.DEFAULT_PRICE_MAX),
    sort: str = Query(SortOption.POPULARITY.value, description="wire value or display label"),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=200),
    store: ProductStore = Depends(get_store),
):
    try:
        filters = FilterSpec(
            brands=frozenset(brand),
            categories=frozenset(category),
            price_range=(price_min, price_max),
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=[err["msg"] for err in e.errors()])
    try:
        sort_option = SortOption.parse(sort)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    state = store.state()
    items, total = paginate(project(state.products, filters, sort_option), page=page, size=size)
    return {
        "items": [product_to_dict(p) for p in items],
        "total": total,
        "page": page,
        "size": size,
        "sort": sort_option.value,
        "sort_label": sort_option.label,
        "is_loading": state.is_loading,
        "error": state.error,
        "last_refresh": state.last_refresh.isoformat() if state.last_refresh else None,
    }


@router.get("/facets", summary="Brands and categories present in the catalogue")
def list_facets(store: ProductStore = Depends(get_store)):
    return facets(store.products)


@router.get("/{product_id}", summary="Get product by id")
def get_product(product_id: str, store: ProductStore = Depends(get_store)):
    p = store.get(product_id)
    if not p:
        raise HTTPException(status_code=404, detail="Product not found")
    return product_to_dict(p)
