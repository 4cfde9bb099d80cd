from typing import Optional

from fastapi import Cookie, HTTPException, Request

from storefront.adapters.mock_catalogue import MockCatalogueAdapter
from storefront.services.product_store import ProductStore
from storefront.services.product_view import ProductView

ADMIN_COOKIE = "is_admin"
ADMIN_USER_COOKIE = "admin_user"


def get_store(request: Request) -> ProductStore:
    return request.app.state.store


def get_view(request: Request) -> ProductView:
    return request.app.state.view


def get_catalogue(request: Request) -> MockCatalogueAdapter:
    return request.app.state.catalogue


def require_admin(
    is_admin: Optional[str] = Cookie(None),
    admin_user: Optional[str] = Cookie(None),
) -> str:
    """Gate for admin routes; returns the acting admin for the override history."""
    if is_admin != "1":
        raise HTTPException(status_code=401, detail="Admin session required")
    return admin_user or "admin"
