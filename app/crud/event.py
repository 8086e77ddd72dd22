from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase
from app.models.event import Event
from app.schemas.event import EventCreate, EventUpdate

class CRUDEvent(CRUDBase[Event, EventCreate, EventUpdate]):
    def get_by_slug(self, db: Session, slug: str) -> Optional[Event]:
        return db.execute(select(Event).where(Event.slug == slug)).scalar_one_or_none()

    def list(self, db: Session, *, active: Optional[bool] = None, artist_user_id: Optional[int] = None) -> List[Event]:
        stmt = select(Event)
        if active is not None:
            stmt = stmt.where(Event.is_active == active)
        if artist_user_id is not None:
            stmt = stmt.where(Event.artist_user_id == artist_user_id)
        stmt = stmt.order_by(Event.event_date.desc(), Event.id.desc())
        return list(db.scalars(stmt).all())

event_crud = CRUDEvent(Event)
