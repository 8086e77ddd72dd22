# app/services/certificates.py
from __future__ import annotations

import datetime as dt
import logging
import secrets
from typing import Dict, List, Optional

from jinja2 import BaseLoader, Environment, select_autoescape
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import DependencyFailure, NotFound, ValidationError
from app.core.rbac import ensure_staff
from app.crud.certificate import certificate_crud
from app.models.certificate import Certificate, CertificateStatus
from app.models.coa_request import CoaRequest
from app.models.event import Event
from app.models.profile import Profile
from app.schemas.certificate import CertificateCreate, CertificatePublic, CertificateUpdate
from app.services.qr import certificate_url, qr_data_uri
from app.services.storage import BUCKET_COA_IMAGES, LocalStorage, StorageError
from app.services.workflow import UploadedImage, new_unique_qr_id

logger = logging.getLogger(__name__)

_REQUIRED = {
    "comic_title": "Comic title",
    "issue_number": "Issue number",
    "signed_by": "Signed by",
}

# -------------------------- Utils --------------------------

def _clean_fields(data: Dict) -> Dict:
    out = {}
    for k, v in data.items():
        out[k] = (v.strip() or None) if isinstance(v, str) else v
    return out

def _check_required(data: Dict, *, partial: bool) -> None:
    for field, label in _REQUIRED.items():
        if partial and field not in data:
            continue
        if not data.get(field):
            raise ValidationError(f"{label} is required.", field=field)

def _render_html(template: str, ctx: Dict) -> str:
    env = Environment(
        loader=BaseLoader(),
        autoescape=select_autoescape(["html", "xml"]),
        enable_async=False,
    )
    tpl = env.from_string(template)
    return tpl.render(**ctx)

# -------------------- Staff --------------------

def get_by_qr_id(db: Session, qr_id: str) -> Certificate:
    cert = certificate_crud.get_by_qr_id(db, qr_id)
    if not cert:
        raise NotFound("Certificate not found")
    return cert

def search(db: Session, staff: Profile, q: Optional[str] = None, status: Optional[str] = None) -> List[Certificate]:
    ensure_staff(staff)
    return certificate_crud.search(db, q, status=status)

def create_manual(db: Session, staff: Profile, body: CertificateCreate) -> Certificate:
    """Emissão direta pelo staff, sem pedido de colecionador."""
    ensure_staff(staff)
    data = _clean_fields(body.model_dump())
    _check_required(data, partial=False)

    cert = Certificate(
        qr_id=new_unique_qr_id(db),
        status=CertificateStatus.active.value,
        created_by=staff.id,
        **data,
    )
    db.add(cert)
    db.commit()
    db.refresh(cert)
    logger.info("certificate %s created manually by %s", cert.qr_id, staff.id)
    return cert

def update_certificate(db: Session, staff: Profile, cert: Certificate, body: CertificateUpdate) -> Certificate:
    ensure_staff(staff)
    data = _clean_fields(body.model_dump(exclude_unset=True))
    _check_required(data, partial=True)
    cert = certificate_crud.update(db, cert, data)
    logger.info("certificate %s updated by %s", cert.qr_id, staff.id)
    return cert

def revoke_certificate(db: Session, staff: Profile, cert: Certificate) -> Certificate:
    ensure_staff(staff)
    if cert.status == CertificateStatus.revoked.value:
        return cert
    cert.status = CertificateStatus.revoked.value
    db.add(cert)
    db.commit()
    db.refresh(cert)
    logger.info("certificate %s revoked by %s", cert.qr_id, staff.id)
    return cert

def replace_image(
    db: Session,
    staff: Profile,
    cert: Certificate,
    image: UploadedImage,
    *,
    storage: LocalStorage,
) -> Certificate:
    ensure_staff(staff)
    if not image.data:
        raise ValidationError("Image file is empty.", field="image")
    ext = image.filename.rsplit(".", 1)[-1].lower() if "." in (image.filename or "") else "jpg"
    path = f"{cert.qr_id}/{int(dt.datetime.now().timestamp())}-{secrets.token_hex(4)}.{ext}"
    try:
        storage.upload(BUCKET_COA_IMAGES, path, image.data, upsert=True)
    except (StorageError, OSError) as exc:
        raise DependencyFailure(f"Upload failed: {exc}", step="upload") from exc

    cert.image_url = storage.get_public_url(BUCKET_COA_IMAGES, path)
    db.add(cert)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("image uploaded to %s but certificate %s was not updated", path, cert.qr_id)
        raise DependencyFailure(
            "Image was uploaded but the certificate could not be updated",
            step="update_certificate",
            partial=True,
            orphaned_objects=[f"{BUCKET_COA_IMAGES}/{path}"],
        ) from exc
    db.refresh(cert)
    logger.info("certificate %s image replaced by %s", cert.qr_id, staff.id)
    return cert

# -------------------- Público --------------------

def _event_name_for(db: Session, cert: Certificate) -> Optional[str]:
    if not cert.request_id:
        return None
    return db.scalar(
        select(Event.event_name)
        .join(CoaRequest, CoaRequest.event_id == Event.id)
        .where(CoaRequest.id == cert.request_id)
    )

def public_view(db: Session, qr_id: str) -> CertificatePublic:
    # revogado também sai (status="revoked"), para o scanner saber que é nulo
    cert = get_by_qr_id(db, qr_id)
    return CertificatePublic(
        qr_id=cert.qr_id,
        comic_title=cert.comic_title,
        issue_number=cert.issue_number,
        signed_by=cert.signed_by,
        signed_date=cert.signed_date,
        signed_location=cert.signed_location,
        witnessed_by=cert.witnessed_by,
        image_url=cert.image_url,
        status=cert.status,
        event_name=_event_name_for(db, cert),
        verify_url=certificate_url(cert.qr_id),
    )

CERTIFICATE_TEMPLATE = """
<!doctype html>
<html>
  <head><meta charset="utf-8"><title>COA {{ cert.qr_id }}</title></head>
  <body style="font-family: Georgia, serif; padding: 36px;">
    <div style="text-align:center; border: 4px double #222; padding: 32px;">
      <h1>Certificate of Authenticity</h1>
      {% if cert.status == "revoked" %}
        <h2 style="color:#b00">REVOKED</h2>
      {% endif %}
      <p style="font-size: 20px;"><b>{{ cert.comic_title }}</b> #{{ cert.issue_number }}</p>
      <p>Signed by <b>{{ cert.signed_by }}</b>
        {% if cert.signed_date %} on {{ cert.signed_date }}{% endif %}
        {% if cert.signed_location %} at {{ cert.signed_location }}{% endif %}
      </p>
      {% if cert.event_name %}<p>Event: {{ cert.event_name }}</p>{% endif %}
      {% if cert.witnessed_by %}<p>Witnessed by {{ cert.witnessed_by }}</p>{% endif %}
      {% if cert.image_url %}<img src="{{ cert.image_url }}" style="max-height:240px"><br>{% endif %}
      <img src="{{ qr_data_uri }}" style="height:140px">
      <div style="font-size: 12px; margin-top:8px">
        Certificate ID <b>{{ cert.qr_id }}</b><br>
        Verify at {{ cert.verify_url }}
      </div>
    </div>
  </body>
</html>
""".strip()

def render_printable(db: Session, qr_id: str) -> str:
    view = public_view(db, qr_id)
    return _render_html(
        CERTIFICATE_TEMPLATE,
        {"cert": view, "qr_data_uri": qr_data_uri(view.verify_url)},
    )
