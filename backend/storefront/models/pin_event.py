from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from storefront.db import Base


class PinEvent(Base):
    __tablename__ = "pin_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(String(64), nullable=False, index=True)
    product_name = Column(String(256), nullable=True)
    action = Column(String(16), nullable=False)  # pinned, unpinned
    actor = Column(String(256), nullable=True)
    created_at = Column(
        DateTime, default=lambda: datetime.now(timezone.utc), nullable=False
    )
