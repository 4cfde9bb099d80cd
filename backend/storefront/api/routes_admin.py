import hmac
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from storefront.api.deps import (
    ADMIN_COOKIE,
    ADMIN_USER_COOKIE,
    get_store,
    require_admin,
)
from storefront.api.routes_catalogue import product_to_dict
from storefront.config import settings
from storefront.db import get_db
from storefront.repositories.pin_event_repo import PinEventRepository
from storefront.services.product_store import ProductStore, UpdateError
from storefront.services.projection import search

router = APIRouter(prefix="/api/admin", tags=["admin"])


class AdminLoginIn(BaseModel):
    password: str
    email: Optional[str] = None


@router.post("/session", summary="Set the admin flag")
def login(payload: AdminLoginIn, response: Response):
    if not hmac.compare_digest(payload.password, settings.ADMIN_PASSWORD):
        raise HTTPException(status_code=401, detail="Invalid admin password")
    user = payload.email or settings.ADMIN_USER
    response.set_cookie(ADMIN_COOKIE, "1", httponly=True, samesite="Lax")
    response.set_cookie(ADMIN_USER_COOKIE, user, httponly=True, samesite="Lax")
    return {"ok": True, "user": user}


@router.delete("/session", summary="Clear the admin flag")
def logout(response: Response):
    response.delete_cookie(ADMIN_COOKIE)
    response.delete_cookie(ADMIN_USER_COOKIE)
    return {"ok": True}


@router.get("/products", summary="Ranked product list for merchandising")
def list_admin_products(
    q: Optional[str] = None,
    store: ProductStore = Depends(get_store),
    admin: str = Depends(require_admin),
):
    state = store.state()
    ranks = {p.id: i for i, p in enumerate(state.products, start=1)}
    items = []
    for p in search(state.products, q):
        row = product_to_dict(p)
        row["rank"] = ranks[p.id]
        items.append(row)
    return {"items": items, "total": len(items), "is_loading": state.is_loading, "error": state.error}


def _pin_failure(store: ProductStore):
    failure = store.last_failure
    if isinstance(failure, UpdateError) and failure.not_found:
        return HTTPException(status_code=404, detail="Product not found")
    return HTTPException(status_code=502, detail=store.error or "Failed to update product pin status")


def _pin_result(store: ProductStore, product_id: str, pinned: bool) -> dict:
    p = store.get(product_id)
    name = p.name if p else product_id
    verb = "pinned to" if pinned else "unpinned from"
    return {
        "id": product_id,
        "is_pinned": p.is_pinned if p else pinned,
        "message": f"{name} has been {verb} the rankings",
        "error": store.error,
    }


@router.post("/products/{product_id}/pin", summary="Pin a product")
def pin_product(
    product_id: str,
    store: ProductStore = Depends(get_store),
    admin: str = Depends(require_admin),
):
    if not store.pin(product_id, actor=admin):
        raise _pin_failure(store)
    return _pin_result(store, product_id, True)


@router.post("/products/{product_id}/unpin", summary="Unpin a product")
def unpin_product(
    product_id: str,
    store: ProductStore = Depends(get_store),
    admin: str = Depends(require_admin),
):
    if not store.unpin(product_id, actor=admin):
        raise _pin_failure(store)
    return _pin_result(store, product_id, False)


@router.post("/products/{product_id}/toggle-pin", summary="Flip a product's pin")
def toggle_pin(
    product_id: str,
    store: ProductStore = Depends(get_store),
    admin: str = Depends(require_admin),
):
    before = store.get(product_id)
    if not store.toggle_pin(product_id, actor=admin):
        raise _pin_failure(store)
    return _pin_result(store, product_id, not before.is_pinned)


@router.post("/refresh", summary="Fetch the latest product rankings")
def refresh(store: ProductStore = Depends(get_store), admin: str = Depends(require_admin)):
    if not store.refresh():
        raise HTTPException(status_code=502, detail=store.error)
    state = store.state()
    return {"total": len(state.products), "version": state.version, "last_refresh": state.last_refresh.isoformat()}


@router.get("/summary", summary="Dashboard counters")
def summary(store: ProductStore = Depends(get_store), admin: str = Depends(require_admin)):
    state = store.state()
    return {
        "last_refresh": state.last_refresh.isoformat() if state.last_refresh else None,
        "total_products": len(state.products),
        "pinned_products": store.pinned_count,
        "error": state.error,
    }


@router.get("/history", summary="Override history")
def history(
    limit: int = 50,
    db: Session = Depends(get_db),
    admin: str = Depends(require_admin),
):
    events = PinEventRepository(db).list_recent(limit=limit)
    return [
        {
            "id": ev.id,
            "product_id": ev.product_id,
            "product_name": ev.product_name,
            "action": ev.action,
            "user": ev.actor,
            "created_at": ev.created_at.isoformat(),
        }
        for ev in events
    ]
