from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator

from storefront.api.deps import get_view
from storefront.api.routes_catalogue import product_to_dict
from storefront.schemas.product_schema import FilterSpec, SortOption
from storefront.services.product_view import ProductView

router = APIRouter(prefix="/api/view", tags=["view"])


class SortIn(BaseModel):
    sort_option: SortOption

    @field_validator("sort_option", mode="before")
    @classmethod
    def _accept_label(cls, v):
        # the storefront dropdown sends its display label
        return SortOption.parse(v) if isinstance(v, str) else v


def _view_to_dict(view: ProductView) -> dict:
    state = view.state()
    return {
        "items": [product_to_dict(p) for p in state.products],
        "total": state.total,
        "filters": state.filters.model_dump(mode="json"),
        "sort": state.sort_option.value,
        "sort_label": state.sort_option.label,
        "active_filter_count": state.active_filter_count,
        "is_loading": state.is_loading,
        "error": state.error,
    }


@router.get("", summary="Current storefront view")
def get_view_state(view: ProductView = Depends(get_view)):
    return _view_to_dict(view)


@router.put("/filters", summary="Replace the active filters")
def set_filters(payload: FilterSpec, view: ProductView = Depends(get_view)):
    view.set_filters(payload)
    return _view_to_dict(view)


@router.delete("/filters", summary="Clear all filters")
def clear_filters(view: ProductView = Depends(get_view)):
    view.clear_filters()
    return _view_to_dict(view)


@router.put("/sort", summary="Change the sort option")
def set_sort(payload: SortIn, view: ProductView = Depends(get_view)):
    view.set_sort_option(payload.sort_option)
    return _view_to_dict(view)
