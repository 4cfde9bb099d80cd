"""
Loading of catalogue seed files.

Seed files follow the storefront's JSON shape (camelCase keys such as
``brandTier``, ``inventoryStatus``, ``createdAt`` and a nested ``stats``
object). Entries are normalized to the column names of ``CatalogueProduct``.
"""
import json
import os
from datetime import datetime
from typing import Dict, List, Optional

DEFAULT_SOURCE = os.path.join(os.path.dirname(__file__), "data", "catalogue.json")

_STATS_KEYS = {
    "viewsLastMonth": "views_last_month",
    "volumeSoldLastMonth": "volume_sold_last_month",
    "unitsInStock": "units_in_stock",
    "daysOfInventory": "days_of_inventory",
    "cogs": "cogs",
}


def _pick(entry: Dict, *keys, default=None):
    for k in keys:
        if entry.get(k) is not None:
            return entry[k]
    return default


def _parse_price(raw) -> float:
    try:
        price = float(raw)
    except (TypeError, ValueError):
        return 0.0
    return max(price, 0.0)


def _parse_created_at(raw) -> Optional[datetime]:
    if not raw:
        return None
    if isinstance(raw, datetime):
        return raw
    # fromisoformat only accepts a trailing Z from Python 3.11
    return datetime.fromisoformat(str(raw).replace("Z", "+00:00"))


def _normalize_stats(raw) -> Optional[Dict]:
    if not isinstance(raw, dict):
        return None
    stats = {}
    for src, dst in _STATS_KEYS.items():
        value = raw.get(src, raw.get(dst))
        if value is not None:
            stats[dst] = value
    return stats or None


def normalize_entry(entry: Dict) -> Dict:
    """Return a dict keyed by CatalogueProduct column names."""
    pid = _pick(entry, "id", "sku", "productId")
    if not pid:
        raise ValueError(f"Catalogue entry without id: {entry!r}")
    return {
        "id": str(pid),
        "name": _pick(entry, "name", "title", default=""),
        "description": _pick(entry, "description", default=""),
        "brand": _pick(entry, "brand", default=""),
        "brand_tier": str(_pick(entry, "brandTier", "brand_tier", default="C")).upper(),
        "category": _pick(entry, "category", default=""),
        "price": _parse_price(_pick(entry, "price", "amount", default=0)),
        "image": _pick(entry, "image", "image_url"),
        "inventory_status": _pick(entry, "inventoryStatus", "inventory_status", default="In Stock"),
        "is_pinned": bool(_pick(entry, "isPinned", "is_pinned", default=False)),
        "created_at": _parse_created_at(_pick(entry, "createdAt", "created_at")),
        "benefits": list(_pick(entry, "benefits", default=[])),
        "how_to_use": _pick(entry, "howToUse", "how_to_use"),
        "stats": _normalize_stats(entry.get("stats")),
    }


def load_catalogue(path: Optional[str] = None) -> List[Dict]:
    """Read a seed file (a list, or an object with ``products``/``items``) in upstream rank order."""
    path = path or DEFAULT_SOURCE
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    if isinstance(data, dict):
        data = data.get("products") or data.get("items") or []
    return [normalize_entry(e) for e in data]
