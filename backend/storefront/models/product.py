from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, String, Text

from storefront.db import Base


class CatalogueProduct(Base):
    __tablename__ = "catalogue_products"

    id = Column(String(64), primary_key=True)
    rank = Column(Integer, nullable=False, default=0, index=True)
    name = Column(String(256), nullable=False)
    description = Column(Text, nullable=False, default="")
    brand = Column(String(128), nullable=False, index=True)
    brand_tier = Column(String(1), nullable=False, default="C")
    category = Column(String(128), nullable=False, index=True)
    price = Column(Float, nullable=False, default=0.0)
    image = Column(String(512), nullable=True)
    inventory_status = Column(String(32), nullable=False, default="In Stock")
    is_pinned = Column(Boolean, default=False, nullable=False)
    created_at = Column(
        DateTime, default=lambda: datetime.now(timezone.utc), nullable=False
    )
    benefits = Column(JSON, nullable=True)
    how_to_use = Column(Text, nullable=True)
    stats = Column(JSON, nullable=True)

    def __repr__(self):
        return f"<CatalogueProduct id={self.id} name={self.name} pinned={self.is_pinned}>"
