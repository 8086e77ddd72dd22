# app/api/v1/artist.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.rbac import require_artist
from app.schemas.coa_request import CoaRequestOut
from app.schemas.event import ArtistEventCreate, Event, EventUpdate
from app.services import events as event_service

router = APIRouter()

@router.get("/events", response_model=List[Event])
def my_events(db: Session = Depends(get_db), artist=Depends(require_artist)):
    return event_service.list_artist_events(db, artist)

@router.post("/events", response_model=Event, status_code=status.HTTP_201_CREATED)
def create_my_event(body: ArtistEventCreate, db: Session = Depends(get_db), artist=Depends(require_artist)):
    return event_service.create_artist_event(db, artist, body)

@router.get("/events/{event_id}", response_model=Event)
def get_my_event(event_id: int, db: Session = Depends(get_db), artist=Depends(require_artist)):
    return event_service.get_artist_event(db, artist, event_id)

@router.patch("/events/{event_id}", response_model=Event)
def update_my_event(event_id: int, body: EventUpdate, db: Session = Depends(get_db), artist=Depends(require_artist)):
    ev = event_service.get_artist_event(db, artist, event_id)
    return event_service.update_event(db, artist, ev, body)

# pedidos do próprio evento, somente leitura
@router.get("/events/{event_id}/requests", response_model=List[CoaRequestOut])
def my_event_requests(event_id: int, db: Session = Depends(get_db), artist=Depends(require_artist)):
    ev = event_service.get_artist_event(db, artist, event_id)
    return event_service.list_event_requests(db, artist, ev)
