# app/services/events.py
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import Forbidden, NotFound, ValidationError
from app.core.rbac import can_manage_event, ensure_staff, is_artist
from app.core.slugs import build_event_slug
from app.crud.event import event_crud
from app.models.coa_request import CoaRequest
from app.models.event import Event
from app.models.profile import Profile
from app.schemas.event import ArtistEventCreate, EventArtistIn, EventCreate, EventFilter, EventUpdate

logger = logging.getLogger(__name__)

_SLUG_ATTEMPTS = 5
_EDITABLE = ("event_name", "event_location", "event_date", "event_end_date", "is_active")


def _required(value: Optional[str], field: str, label: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{label} is required.", field=field)
    return value


def _unique_slug(db: Session, artist_name: str, event_name: str, start) -> str:
    for _ in range(_SLUG_ATTEMPTS):
        slug = build_event_slug(artist_name, event_name, start)
        if event_crud.get_by_slug(db, slug) is None:
            return slug
    raise ValidationError("Could not allocate a unique event slug", field="slug")


def _resolve_artist(db: Session, artist_user_id: Optional[int], artist_name: Optional[str]) -> tuple[Optional[int], str]:
    """Artista escolhido por profile (nome vem do profile) ou digitado."""
    if artist_user_id is not None:
        artist = db.get(Profile, artist_user_id)
        if not artist:
            raise NotFound("Artist profile not found")
        if not is_artist(artist.role):
            raise ValidationError("Selected profile is not an artist", field="artist_user_id")
        name = (artist_name or "").strip() or artist.display_name
        return artist.id, name
    return None, _required(artist_name, "artist_name", "Artist name")


def list_events(db: Session, flt: EventFilter = "all") -> List[Event]:
    active = {"active": True, "inactive": False}.get(flt)
    return event_crud.list(db, active=active)


def get_event_by_slug(db: Session, slug: str) -> Event:
    ev = event_crud.get_by_slug(db, slug)
    if not ev:
        raise NotFound("Event not found")
    return ev


def get_event(db: Session, event_id: int) -> Event:
    ev = event_crud.get(db, event_id)
    if not ev:
        raise NotFound("Event not found")
    return ev


def create_event(db: Session, staff: Profile, body: EventCreate) -> Event:
    ensure_staff(staff)
    event_name = _required(body.event_name, "event_name", "Event name")
    artist_user_id, artist_name = _resolve_artist(db, body.artist_user_id, body.artist_name)

    ev = Event(
        slug=_unique_slug(db, artist_name, event_name, body.event_date),
        artist_user_id=artist_user_id,
        artist_name=artist_name,
        event_name=event_name,
        event_location=(body.event_location or "").strip() or None,
        event_date=body.event_date,
        event_end_date=body.event_end_date or body.event_date,
        is_active=body.is_active,
    )
    db.add(ev)
    db.commit()
    db.refresh(ev)
    logger.info("event %s (%s) created by %s", ev.id, ev.slug, staff.id)
    return ev


def create_artist_event(db: Session, artist: Profile, body: ArtistEventCreate) -> Event:
    if artist is None or not is_artist(artist.role):
        raise Forbidden("Artist role required")
    event_name = _required(body.event_name, "event_name", "Event name")
    artist_name = _required(artist.full_name or artist.email, "artist_name", "Artist name")

    ev = Event(
        slug=_unique_slug(db, artist_name, event_name, body.event_date),
        artist_user_id=artist.id,
        artist_name=artist_name,
        event_name=event_name,
        event_location=(body.event_location or "").strip() or None,
        event_date=body.event_date,
        event_end_date=body.event_end_date or body.event_date,
        is_active=True,
    )
    db.add(ev)
    db.commit()
    db.refresh(ev)
    logger.info("event %s (%s) created by artist %s", ev.id, ev.slug, artist.id)
    return ev


def update_event(db: Session, profile: Profile, ev: Event, body: EventUpdate) -> Event:
    if not can_manage_event(profile, ev):
        raise Forbidden("You cannot edit this event")
    data = body.model_dump(exclude_unset=True)
    if "event_name" in data:
        data["event_name"] = _required(data["event_name"], "event_name", "Event name")
    if "event_location" in data:
        data["event_location"] = (data["event_location"] or "").strip() or None
    if data.get("event_date", ev.event_date) is None:
        raise ValidationError("Event date is required.", field="event_date")

    start = data.get("event_date", ev.event_date)
    end = data.get("event_end_date", ev.event_end_date) or start
    if end < start:
        raise ValidationError("event_end_date cannot be before event_date", field="event_end_date")
    data["event_end_date"] = end

    for k, v in data.items():
        if k in _EDITABLE:
            setattr(ev, k, v)
    db.add(ev)
    db.commit()
    db.refresh(ev)
    logger.info("event %s updated by %s", ev.id, profile.id)
    return ev


def set_event_active(db: Session, staff: Profile, ev: Event, is_active: bool) -> Event:
    ensure_staff(staff)
    ev.is_active = is_active
    db.add(ev)
    db.commit()
    db.refresh(ev)
    logger.info("event %s is_active=%s by %s", ev.id, is_active, staff.id)
    return ev


def reassign_artist(db: Session, staff: Profile, ev: Event, body: EventArtistIn) -> Event:
    ensure_staff(staff)
    ev.artist_user_id, ev.artist_name = _resolve_artist(db, body.artist_user_id, body.artist_name)
    db.add(ev)
    db.commit()
    db.refresh(ev)
    logger.info("event %s reassigned to artist %s by %s", ev.id, ev.artist_user_id, staff.id)
    return ev


def delete_event(db: Session, staff: Profile, ev: Event) -> None:
    # pedidos ficam com event_id NULL (trilha de auditoria)
    ensure_staff(staff)
    event_id = ev.id
    db.delete(ev)
    db.commit()
    logger.info("event %s deleted by %s", event_id, staff.id)


def list_artist_events(db: Session, artist: Profile) -> List[Event]:
    return event_crud.list(db, artist_user_id=artist.id)


def get_artist_event(db: Session, artist: Profile, event_id: int) -> Event:
    ev = get_event(db, event_id)
    if ev.artist_user_id != artist.id:
        # não vaza existência de eventos de outros artistas
        raise NotFound("Event not found")
    return ev


def list_event_requests(db: Session, profile: Profile, ev: Event) -> List[CoaRequest]:
    """Leitura apenas; artista só vê pedidos dos próprios eventos."""
    if not can_manage_event(profile, ev):
        raise Forbidden("You cannot view requests for this event")
    stmt = (
        select(CoaRequest)
        .where(CoaRequest.event_id == ev.id)
        .order_by(CoaRequest.created_at.desc(), CoaRequest.id.desc())
    )
    return list(db.scalars(stmt).all())
