# app/api/v1/events.py
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.api.v1.requests import staff_out
from app.core.rbac import require_staff
from app.schemas.coa_request import CoaRequestStaffOut
from app.schemas.event import Event, EventActiveIn, EventArtistIn, EventCreate, EventFilter, EventUpdate
from app.services import events as event_service

router = APIRouter()

@router.get("/", response_model=List[Event])
def list_events(
    filter: EventFilter = Query("all"),
    db: Session = Depends(get_db),
    _=Depends(require_staff),
):
    return event_service.list_events(db, filter)

@router.post("/", response_model=Event, status_code=status.HTTP_201_CREATED)
def create_event(body: EventCreate, db: Session = Depends(get_db), staff=Depends(require_staff)):
    return event_service.create_event(db, staff, body)

@router.get("/{slug}", response_model=Event)
def get_event(slug: str, db: Session = Depends(get_db), _=Depends(require_staff)):
    return event_service.get_event_by_slug(db, slug)

@router.patch("/{event_id}", response_model=Event)
def update_event(event_id: int, body: EventUpdate, db: Session = Depends(get_db), staff=Depends(require_staff)):
    ev = event_service.get_event(db, event_id)
    return event_service.update_event(db, staff, ev, body)

@router.put("/{event_id}/active", response_model=Event)
def set_active(event_id: int, body: EventActiveIn, db: Session = Depends(get_db), staff=Depends(require_staff)):
    ev = event_service.get_event(db, event_id)
    return event_service.set_event_active(db, staff, ev, body.is_active)

@router.put("/{event_id}/artist", response_model=Event)
def reassign_artist(event_id: int, body: EventArtistIn, db: Session = Depends(get_db), staff=Depends(require_staff)):
    ev = event_service.get_event(db, event_id)
    return event_service.reassign_artist(db, staff, ev, body)

@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(event_id: int, db: Session = Depends(get_db), staff=Depends(require_staff)):
    ev = event_service.get_event(db, event_id)
    event_service.delete_event(db, staff, ev)
    return None  # 204

# somente leitura
@router.get("/{event_id}/requests", response_model=List[CoaRequestStaffOut])
def list_event_requests(event_id: int, db: Session = Depends(get_db), staff=Depends(require_staff)):
    ev = event_service.get_event(db, event_id)
    return [staff_out(db, r) for r in event_service.list_event_requests(db, staff, ev)]
