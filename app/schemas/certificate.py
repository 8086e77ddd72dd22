from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Literal, Optional

class CertificateCreate(BaseModel):
    comic_title: str = Field(min_length=1)
    issue_number: str = Field(min_length=1)
    signed_by: str = Field(min_length=1)
    signed_date: Optional[date] = None
    signed_location: Optional[str] = None
    witnessed_by: Optional[str] = None
    image_url: Optional[str] = None
    serial_number: Optional[str] = None

class CertificateUpdate(BaseModel):
    comic_title: Optional[str] = None
    issue_number: Optional[str] = None
    signed_by: Optional[str] = None
    signed_date: Optional[date] = None
    signed_location: Optional[str] = None
    witnessed_by: Optional[str] = None
    image_url: Optional[str] = None
    serial_number: Optional[str] = None

class Certificate(BaseModel):
    id: int
    qr_id: str
    serial_number: Optional[str] = None
    comic_title: str
    issue_number: str
    signed_by: str
    signed_date: Optional[date] = None
    signed_location: Optional[str] = None
    witnessed_by: Optional[str] = None
    image_url: Optional[str] = None
    status: Literal["active", "revoked"]
    request_id: Optional[int] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

# resposta pública: sem id interno
class CertificatePublic(BaseModel):
    qr_id: str
    comic_title: str
    issue_number: str
    signed_by: str
    signed_date: Optional[date] = None
    signed_location: Optional[str] = None
    witnessed_by: Optional[str] = None
    image_url: Optional[str] = None
    status: Literal["active", "revoked"]
    event_name: Optional[str] = None
    verify_url: str
