# app/schemas/coa_request.py
from __future__ import annotations
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel

RequestStatusName = Literal["pending", "approved", "rejected"]

class CoaRequestPayload(BaseModel):
    """Campos de texto do formulário; as imagens chegam como UploadFile."""
    comic_title: str
    issue_number: str
    attested: bool = False
    witness_name: Optional[str] = None

class CoaRequestOut(BaseModel):
    id: int
    status: RequestStatusName
    comic_title: str
    issue_number: str
    collector_user_id: Optional[int] = None
    event_id: Optional[int] = None
    attested: bool
    witness_name: Optional[str] = None
    book_image_url: Optional[str] = None
    rejection_reason: Optional[str] = None
    issued_coa_id: Optional[int] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class CoaRequestStaffOut(CoaRequestOut):
    proof_image_path: Optional[str] = None
    event_name: Optional[str] = None
    artist_name: Optional[str] = None
    collector_name: Optional[str] = None
    issued_qr_id: Optional[str] = None

class RejectIn(BaseModel):
    reason: Optional[str] = None

class SignedUrlOut(BaseModel):
    url: str
    expires_in: int

class CollectorDashboard(BaseModel):
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    active_coas: int = 0
