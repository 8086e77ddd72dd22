# app/api/v1/public.py
# rotas sem autenticação: landing de evento, verificação de COA, QR
from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, Response
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.schemas.certificate import CertificatePublic
from app.schemas.event import EventPublic
from app.services import certificates as cert_service
from app.services import events as event_service
from app.services.qr import certificate_url, event_landing_url, qr_png_bytes

router = APIRouter()

@router.get("/events/{slug}", response_model=EventPublic)
def public_event(slug: str, db: Session = Depends(get_db)):
    ev = event_service.get_event_by_slug(db, slug)
    return EventPublic(
        slug=ev.slug,
        artist_name=ev.artist_name,
        event_name=ev.event_name,
        event_location=ev.event_location,
        event_date=ev.event_date,
        event_end_date=ev.event_end_date,
        is_active=ev.is_active,
        landing_url=event_landing_url(ev.slug),
    )

@router.get("/events/{slug}/qr.png")
def public_event_qr(slug: str, db: Session = Depends(get_db)):
    ev = event_service.get_event_by_slug(db, slug)
    return Response(content=qr_png_bytes(event_landing_url(ev.slug)), media_type="image/png")

@router.get("/certificates/{qr_id}", response_model=CertificatePublic)
def verify_certificate(qr_id: str, db: Session = Depends(get_db)):
    return cert_service.public_view(db, qr_id)

@router.get("/certificates/{qr_id}/print", response_class=HTMLResponse)
def print_certificate(qr_id: str, db: Session = Depends(get_db)):
    return HTMLResponse(cert_service.render_printable(db, qr_id))

@router.get("/certificates/{qr_id}/qr.png")
def certificate_qr(qr_id: str, db: Session = Depends(get_db)):
    cert = cert_service.get_by_qr_id(db, qr_id)
    return Response(content=qr_png_bytes(certificate_url(cert.qr_id)), media_type="image/png")
