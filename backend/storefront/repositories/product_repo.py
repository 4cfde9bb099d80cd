from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from storefront.models.product import CatalogueProduct


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def count(self) -> int:
        return self.db.query(func.count(CatalogueProduct.id)).scalar() or 0

    def get_by_id(self, product_id: str) -> Optional[CatalogueProduct]:
        return (
            self.db.query(CatalogueProduct)
            .filter(CatalogueProduct.id == product_id)
            .first()
        )

    def list_ranked(self) -> List[CatalogueProduct]:
        """All catalogue rows in upstream popularity order (rank, then id for equal ranks)."""
        return (
            self.db.query(CatalogueProduct)
            .order_by(CatalogueProduct.rank, CatalogueProduct.id)
            .all()
        )

    def set_pinned(self, product_id: str, pinned: bool) -> Optional[CatalogueProduct]:
        p = self.get_by_id(product_id)
        if not p:
            return None
        p.is_pinned = pinned
        self.db.flush()
        return p

    def create_or_update(self, id: str, rank: int = 0, **fields) -> CatalogueProduct:
        # created_at falls back to the column default when the seed omits it
        if fields.get("created_at") is None:
            fields.pop("created_at", None)
        p = self.get_by_id(id)
        if p:
            p.rank = rank
            for key, value in fields.items():
                setattr(p, key, value)
        else:
            p = CatalogueProduct(id=id, rank=rank, **fields)
            self.db.add(p)
        self.db.flush()
        return p
