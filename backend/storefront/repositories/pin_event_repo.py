from typing import List, Optional

from sqlalchemy.orm import Session

from storefront.models.pin_event import PinEvent


class PinEventRepository:
    """Override history of admin pin/unpin actions."""

    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        product_id: str,
        action: str,
        actor: Optional[str] = None,
        product_name: Optional[str] = None,
    ) -> PinEvent:
        ev = PinEvent(
            product_id=product_id,
            product_name=product_name,
            action=action,
            actor=actor,
        )
        self.db.add(ev)
        self.db.flush()
        return ev

    def list_recent(self, limit: int = 50) -> List[PinEvent]:
        return (
            self.db.query(PinEvent)
            .order_by(PinEvent.created_at.desc(), PinEvent.id.desc())
            .limit(limit)
            .all()
        )
