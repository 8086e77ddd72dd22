from pydantic import BaseModel, Field, model_validator
from typing import Literal, Optional
from datetime import date, datetime

EventFilter = Literal["active", "inactive", "all"]

# ---------------------------
# Event Schemas
# ---------------------------

class EventBase(BaseModel):
    event_name: str = Field(min_length=1, max_length=200)
    event_location: Optional[str] = None
    event_date: date
    event_end_date: Optional[date] = None

    @model_validator(mode="after")
    def _check_date_order(self):
        if self.event_end_date and self.event_end_date < self.event_date:
            raise ValueError("event_end_date cannot be before event_date")
        return self

class EventCreate(EventBase):
    # staff escolhe o artista por profile ou digita o nome
    artist_user_id: Optional[int] = None
    artist_name: Optional[str] = None
    is_active: bool = True

class ArtistEventCreate(EventBase):
    pass

class EventUpdate(BaseModel):
    event_name: Optional[str] = None
    event_location: Optional[str] = None
    event_date: Optional[date] = None
    event_end_date: Optional[date] = None
    is_active: Optional[bool] = None

class EventActiveIn(BaseModel):
    is_active: bool

class EventArtistIn(BaseModel):
    artist_user_id: Optional[int] = None
    artist_name: Optional[str] = None

class Event(BaseModel):
    id: int
    slug: str
    artist_user_id: Optional[int] = None
    artist_name: str
    event_name: str
    event_location: Optional[str] = None
    event_date: date
    event_end_date: Optional[date] = None
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class EventPublic(BaseModel):
    slug: str
    artist_name: str
    event_name: str
    event_location: Optional[str] = None
    event_date: date
    event_end_date: Optional[date] = None
    is_active: bool
    landing_url: str
