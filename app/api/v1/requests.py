# app/api/v1/requests.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_current_profile, get_db, get_storage
from app.core.config import settings
from app.core.rbac import require_staff
from app.models.certificate import Certificate
from app.models.coa_request import CoaRequest
from app.schemas.certificate import Certificate as CertificateOut
from app.schemas.coa_request import CoaRequestOut, CoaRequestPayload, CoaRequestStaffOut, RejectIn, SignedUrlOut
from app.services import workflow
from app.services.storage import BUCKET_PROOFS, LocalStorage, ObjectNotFound

router = APIRouter()          # /requests (staff)
submit_router = APIRouter()   # /events/{event_id}/requests (colecionador)

def staff_out(db: Session, r: CoaRequest) -> CoaRequestStaffOut:
    out = CoaRequestStaffOut.model_validate(r)
    if r.event is not None:
        out.event_name = r.event.event_name
        out.artist_name = r.event.artist_name
    if r.collector is not None:
        out.collector_name = r.collector.display_name
    if r.issued_coa_id:
        out.issued_qr_id = db.scalar(select(Certificate.qr_id).where(Certificate.id == r.issued_coa_id))
    return out

async def _read_upload(f: Optional[UploadFile]) -> Optional[workflow.UploadedImage]:
    if f is None or not f.filename:
        return None
    data = await f.read()
    if not data:
        return None
    return workflow.UploadedImage(filename=f.filename, data=data)

# ----------------------- colecionador -----------------------

@submit_router.post("/{event_id}/requests", response_model=CoaRequestOut, status_code=status.HTTP_201_CREATED)
async def submit_request(
    event_id: int,
    comic_title: str = Form(...),
    issue_number: str = Form(...),
    attested: bool = Form(False),
    witness_name: Optional[str] = Form(None),
    proof_image: Optional[UploadFile] = File(None),
    book_image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: LocalStorage = Depends(get_storage),
    profile=Depends(get_current_profile),
):
    payload = CoaRequestPayload(
        comic_title=comic_title,
        issue_number=issue_number,
        attested=attested,
        witness_name=witness_name,
    )
    return workflow.submit_request(
        db, profile, event_id, payload,
        storage=storage,
        proof=await _read_upload(proof_image),
        book=await _read_upload(book_image),
    )

# ----------------------- staff -----------------------

@router.get("/", response_model=List[CoaRequestStaffOut])
def list_requests(
    status_: Optional[str] = Query(None, alias="status", pattern="^(pending|approved|rejected)$"),
    event_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    _=Depends(require_staff),
):
    stmt = select(CoaRequest)
    if status_:
        stmt = stmt.where(CoaRequest.status == status_)
    if event_id is not None:
        stmt = stmt.where(CoaRequest.event_id == event_id)
    stmt = stmt.order_by(CoaRequest.created_at.desc(), CoaRequest.id.desc())
    return [staff_out(db, r) for r in db.scalars(stmt).all()]

@router.get("/{request_id}", response_model=CoaRequestStaffOut)
def get_request(request_id: int, db: Session = Depends(get_db), _=Depends(require_staff)):
    r = db.get(CoaRequest, request_id)
    if not r:
        raise HTTPException(status_code=404, detail="Request not found")
    return staff_out(db, r)

@router.post("/{request_id}/approve", response_model=CertificateOut)
def approve(request_id: int, db: Session = Depends(get_db), staff=Depends(require_staff)):
    return workflow.approve_request(db, staff, request_id)

@router.post("/{request_id}/reject", response_model=CoaRequestStaffOut)
def reject(request_id: int, body: RejectIn | None = None, db: Session = Depends(get_db), staff=Depends(require_staff)):
    r = workflow.reject_request(db, staff, request_id, body.reason if body else None)
    return staff_out(db, r)

@router.get("/{request_id}/proof-url", response_model=SignedUrlOut)
def proof_url(
    request_id: int,
    db: Session = Depends(get_db),
    storage: LocalStorage = Depends(get_storage),
    _=Depends(require_staff),
):
    r = db.get(CoaRequest, request_id)
    if not r:
        raise HTTPException(status_code=404, detail="Request not found")
    if not r.proof_image_path:
        raise HTTPException(status_code=404, detail="Request has no proof image")
    ttl = settings.SIGNED_URL_TTL_SECONDS
    try:
        url = storage.create_signed_url(BUCKET_PROOFS, r.proof_image_path, ttl)
    except ObjectNotFound:
        raise HTTPException(status_code=404, detail="Proof image not found in storage")
    return SignedUrlOut(url=url, expires_in=ttl)
