# app/api/v1/certificates.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_storage
from app.core.errors import ValidationError
from app.core.rbac import require_staff
from app.schemas.certificate import Certificate as CertificateOut
from app.schemas.certificate import CertificateCreate, CertificateUpdate
from app.services import certificates as cert_service
from app.services import workflow
from app.services.storage import LocalStorage

router = APIRouter()

@router.get("/", response_model=List[CertificateOut])
def list_certificates(
    q: Optional[str] = Query(None),
    status_: Optional[str] = Query(None, alias="status", pattern="^(active|revoked)$"),
    db: Session = Depends(get_db),
    staff=Depends(require_staff),
):
    return cert_service.search(db, staff, q, status_)

@router.post("/", response_model=CertificateOut, status_code=status.HTTP_201_CREATED)
def create_certificate(body: CertificateCreate, db: Session = Depends(get_db), staff=Depends(require_staff)):
    return cert_service.create_manual(db, staff, body)

# varredura: certificado emitido sem back-fill no pedido
@router.post("/reconcile")
def reconcile(db: Session = Depends(get_db), staff=Depends(require_staff)):
    return {"repaired_request_ids": workflow.reconcile_certificates(db, staff)}

@router.get("/{qr_id}", response_model=CertificateOut)
def get_certificate(qr_id: str, db: Session = Depends(get_db), _=Depends(require_staff)):
    return cert_service.get_by_qr_id(db, qr_id)

@router.patch("/{qr_id}", response_model=CertificateOut)
def update_certificate(qr_id: str, body: CertificateUpdate, db: Session = Depends(get_db), staff=Depends(require_staff)):
    cert = cert_service.get_by_qr_id(db, qr_id)
    return cert_service.update_certificate(db, staff, cert, body)

@router.post("/{qr_id}/image", response_model=CertificateOut)
async def replace_image(
    qr_id: str,
    image: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: LocalStorage = Depends(get_storage),
    staff=Depends(require_staff),
):
    cert = cert_service.get_by_qr_id(db, qr_id)
    data = await image.read()
    if not data:
        raise ValidationError("Image file is empty.", field="image")
    upload = workflow.UploadedImage(filename=image.filename or "image.jpg", data=data)
    return cert_service.replace_image(db, staff, cert, upload, storage=storage)

@router.post("/{qr_id}/revoke", response_model=CertificateOut)
def revoke(qr_id: str, db: Session = Depends(get_db), staff=Depends(require_staff)):
    cert = cert_service.get_by_qr_id(db, qr_id)
    return cert_service.revoke_certificate(db, staff, cert)
