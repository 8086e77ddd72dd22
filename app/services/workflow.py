# app/services/workflow.py
"""
Ciclo de vida dos pedidos de COA e do onboarding de artistas.

    pending ──approve──▶ approved   (emite Certificate, terminal)
        └────reject───▶ rejected   (grava motivo, terminal)

Toda transição sai de `pending` com UPDATE condicional
(`... WHERE id=? AND status='pending'`); zero linhas afetadas significa que
outro revisor chegou antes e vira InvalidState. Emissão do certificado e
back-fill do pedido acontecem na mesma transação: qualquer falha no meio faz
rollback e sobe DependencyFailure com o passo que falhou.
"""
from __future__ import annotations

import datetime as dt
import logging
import secrets
import uuid
from dataclasses import dataclass
from typing import List, Optional

import sqlalchemy as sa
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import DependencyFailure, Inactive, InvalidState, NotFound, ValidationError
from app.core.rbac import ROLE_ARTIST, ensure_staff
from app.core.slugs import new_qr_id
from app.crud.certificate import certificate_crud
from app.models.artist_request import ArtistRequest
from app.models.certificate import Certificate, CertificateStatus
from app.models.coa_request import CoaRequest, RequestStatus
from app.models.event import Event
from app.models.profile import Profile
from app.schemas.coa_request import CoaRequestPayload
from app.services.storage import BUCKET_BOOKS, BUCKET_PROOFS, LocalStorage, StorageError

logger = logging.getLogger(__name__)

PENDING = RequestStatus.pending.value
APPROVED = RequestStatus.approved.value
REJECTED = RequestStatus.rejected.value

_QR_ID_ATTEMPTS = 8


@dataclass
class UploadedImage:
    filename: str
    data: bytes


def _now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _clean(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


def _ext(filename: str) -> str:
    ext = (filename or "").rsplit(".", 1)[-1].lower() if "." in (filename or "") else ""
    return ext if ext.isalnum() and len(ext) <= 5 else "jpg"


def new_unique_qr_id(db: Session) -> str:
    for _ in range(_QR_ID_ATTEMPTS):
        code = new_qr_id()
        if not certificate_crud.qr_id_taken(db, code):
            return code
    raise DependencyFailure("Could not allocate a unique qr_id", step="qr_id")


# ------------------------------------------------------------------ submit

def submit_request(
    db: Session,
    collector: Profile,
    event_id: int,
    payload: CoaRequestPayload,
    *,
    storage: LocalStorage,
    proof: Optional[UploadedImage] = None,
    book: Optional[UploadedImage] = None,
) -> CoaRequest:
    if collector is None:
        raise ValidationError("Authentication required")

    event = db.get(Event, event_id)
    if not event:
        raise NotFound("Event not found")
    if not event.is_active:
        raise Inactive("This event is inactive and is not accepting new requests.")
    if settings.ENFORCE_EVENT_WINDOW:
        today = dt.date.today()
        if not (event.event_date <= today <= event.end_date):
            raise Inactive("This event is not currently accepting submissions (outside event dates).")

    title = _clean(payload.comic_title)
    issue = _clean(payload.issue_number)
    if not title:
        raise ValidationError("Comic title is required.", field="comic_title")
    if not issue:
        raise ValidationError("Issue number is required.", field="issue_number")
    witness = _clean(payload.witness_name)
    if proof is None or not proof.data:
        raise ValidationError("Proof is required.", field="proof_image")
    if book is None or not book.data:
        raise ValidationError("A book photo is required.", field="book_image")

    # uploads primeiro; se o insert falhar, remove o que subiu
    request_key = uuid.uuid4().hex
    unique = f"{int(_now().timestamp())}-{secrets.token_hex(4)}"
    uploaded: List[tuple[str, str]] = []
    try:
        proof_path = f"{collector.id}/{request_key}/proof-{unique}.{_ext(proof.filename)}"
        storage.upload(BUCKET_PROOFS, proof_path, proof.data)
        uploaded.append((BUCKET_PROOFS, proof_path))
        book_path = f"{collector.id}/{request_key}/book-{unique}.{_ext(book.filename)}"
        storage.upload(BUCKET_BOOKS, book_path, book.data)
        uploaded.append((BUCKET_BOOKS, book_path))
        book_url = storage.get_public_url(BUCKET_BOOKS, book_path)
    except (StorageError, OSError) as exc:
        _discard_uploads(storage, uploaded)
        raise DependencyFailure(f"Upload failed: {exc}", step="upload") from exc

    req = CoaRequest(
        status=PENDING,
        comic_title=title,
        issue_number=issue,
        collector_user_id=collector.id,
        event_id=event.id,
        attested=bool(payload.attested),
        witness_name=witness,
        proof_image_path=proof_path,
        book_image_path=book_path,
        book_image_url=book_url,
    )
    # garante nome no profile p/ revisão do staff
    if not collector.full_name and witness:
        collector.full_name = witness
        db.add(collector)

    db.add(req)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        leftovers = _discard_uploads(storage, uploaded)
        logger.error("request insert failed for event %s: %s", event.id, exc)
        raise DependencyFailure(
            "Request could not be saved",
            step="insert_request",
            partial=bool(leftovers),
            orphaned_objects=leftovers,
        ) from exc
    db.refresh(req)
    logger.info("coa_request %s submitted by profile %s for event %s", req.id, collector.id, event.id)
    return req


def _discard_uploads(storage: LocalStorage, uploaded: List[tuple[str, str]]) -> List[str]:
    """Remove uploads; devolve o que não conseguiu remover."""
    leftovers: List[str] = []
    for bucket, path in uploaded:
        try:
            storage.remove(bucket, path)
        except (StorageError, OSError):
            logger.exception("could not remove orphaned upload %s/%s", bucket, path)
            leftovers.append(f"{bucket}/{path}")
    return leftovers


# ------------------------------------------------------------------ review

def _load_pending(db: Session, request_id: int) -> CoaRequest:
    req = db.get(CoaRequest, request_id)
    if not req:
        raise NotFound("Request not found")
    if req.status != PENDING:
        raise InvalidState(f"Request is already {req.status}")
    return req


def _claim(db: Session, request_id: int, values: dict) -> None:
    """UPDATE condicional: só transiciona se ainda estiver pending."""
    res = db.execute(
        sa.update(CoaRequest)
        .where(CoaRequest.id == request_id, CoaRequest.status == PENDING)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        db.rollback()
        raise InvalidState("Request is no longer pending")


def witness_for(req: CoaRequest, collector: Optional[Profile]) -> Optional[str]:
    if req.attested:
        # nome completo do colecionador, nunca o e-mail
        return (collector.full_name if collector else None) or req.witness_name
    return req.witness_name


def approve_request(db: Session, staff: Profile, request_id: int) -> Certificate:
    ensure_staff(staff)
    req = _load_pending(db, request_id)
    event = db.get(Event, req.event_id) if req.event_id else None
    if not event:
        raise NotFound("Event for this request not found")
    collector = db.get(Profile, req.collector_user_id) if req.collector_user_id else None

    now = _now()
    step = "claim_request"
    try:
        _claim(db, req.id, {"status": APPROVED, "reviewed_by": staff.id, "reviewed_at": now})

        step = "create_certificate"
        cert = Certificate(
            qr_id=new_unique_qr_id(db),
            comic_title=req.comic_title,
            issue_number=req.issue_number,
            signed_by=event.artist_name or "Unknown",
            signed_date=event.event_date,
            signed_location=event.event_location,
            witnessed_by=witness_for(req, collector),
            image_url=req.book_image_url,
            status=CertificateStatus.active.value,
            request_id=req.id,
            created_by=staff.id,
        )
        db.add(cert)
        db.flush()

        step = "link_request"
        res = db.execute(
            sa.update(CoaRequest)
            .where(
                CoaRequest.id == req.id,
                CoaRequest.status == APPROVED,
                CoaRequest.issued_coa_id.is_(None),
            )
            .values(issued_coa_id=cert.id)
            .execution_options(synchronize_session=False)
        )
        if res.rowcount != 1:
            raise DependencyFailure("Certificate created but request could not be linked", step=step)

        db.commit()
    except InvalidState:
        raise
    except DependencyFailure as exc:
        db.rollback()
        logger.error("approve request %s failed at %s; rolled back", request_id, exc.step)
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("approve request %s failed at %s: %s", request_id, step, exc)
        raise DependencyFailure(f"Approval failed at {step}; nothing was issued", step=step) from exc

    db.refresh(req)
    db.refresh(cert)
    logger.info("coa_request %s approved by %s -> certificate %s", req.id, staff.id, cert.qr_id)
    return cert


def reject_request(db: Session, staff: Profile, request_id: int, reason: Optional[str] = None) -> CoaRequest:
    ensure_staff(staff)
    req = _load_pending(db, request_id)
    reason = _clean(reason) or settings.DEFAULT_REJECTION_REASON

    _claim(db, req.id, {
        "status": REJECTED,
        "rejection_reason": reason,
        "reviewed_by": staff.id,
        "reviewed_at": _now(),
    })
    db.commit()
    db.refresh(req)
    logger.info("coa_request %s rejected by %s", req.id, staff.id)
    return req


# ------------------------------------------------------------------ artistas

def create_artist_request(
    db: Session,
    user: Profile,
    *,
    full_name: Optional[str],
    portfolio_url: Optional[str] = None,
    message: Optional[str] = None,
    commit: bool = True,
) -> ArtistRequest:
    ar = ArtistRequest(
        user_id=user.id,
        full_name=_clean(full_name) or user.full_name,
        portfolio_url=_clean(portfolio_url),
        message=_clean(message),
        status=PENDING,
    )
    db.add(ar)
    if commit:
        db.commit()
        db.refresh(ar)
    else:
        db.flush()
    return ar


def review_artist_onboarding(db: Session, staff: Profile, artist_request_id: int, decision: str) -> ArtistRequest:
    ensure_staff(staff)
    if decision not in (APPROVED, REJECTED):
        raise ValidationError("decision must be 'approved' or 'rejected'", field="decision")

    ar = db.get(ArtistRequest, artist_request_id)
    if not ar:
        raise NotFound("Artist request not found")
    if ar.status != PENDING:
        raise InvalidState(f"Artist request is already {ar.status}")

    step = "update_artist_request"
    try:
        res = db.execute(
            sa.update(ArtistRequest)
            .where(ArtistRequest.id == ar.id, ArtistRequest.status == PENDING)
            .values(status=decision, reviewed_by=staff.id, reviewed_at=_now())
            .execution_options(synchronize_session=False)
        )
        if res.rowcount != 1:
            db.rollback()
            raise InvalidState("Artist request is no longer pending")

        if decision == APPROVED:
            step = "promote_profile"
            res = db.execute(
                sa.update(Profile)
                .where(Profile.id == ar.user_id)
                .values(role=ROLE_ARTIST)
                .execution_options(synchronize_session=False)
            )
            if res.rowcount != 1:
                raise DependencyFailure(
                    "Artist request approved but the requester's profile could not be promoted",
                    step=step,
                )
        db.commit()
    except InvalidState:
        raise
    except DependencyFailure as exc:
        db.rollback()
        logger.error("artist onboarding %s failed at %s; rolled back", ar.id, exc.step)
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("artist onboarding %s failed at %s: %s", ar.id, step, exc)
        raise DependencyFailure(f"Artist review failed at {step}; nothing was changed", step=step) from exc

    db.refresh(ar)
    if decision == APPROVED:
        promoted = db.get(Profile, ar.user_id)
        if promoted is not None:
            db.refresh(promoted)
    logger.info("artist_request %s %s by %s", ar.id, decision, staff.id)
    return ar


# ------------------------------------------------------------------ reconciliação

def reconcile_certificates(db: Session, staff: Profile) -> List[int]:
    """
    Varredura: certificado com request_id cujo pedido não aponta de volta.
    Completa o pedido (approved + issued_coa_id) e devolve os ids corrigidos.
    Pedido rejected é terminal e fica como está.
    """
    ensure_staff(staff)
    rows = db.execute(
        select(Certificate, CoaRequest)
        .join(CoaRequest, CoaRequest.id == Certificate.request_id)
        .where(CoaRequest.issued_coa_id.is_(None), CoaRequest.status != REJECTED)
    ).all()

    repaired: List[int] = []
    for cert, req in rows:
        req.status = APPROVED
        req.issued_coa_id = cert.id
        if req.reviewed_at is None:
            req.reviewed_at = _now()
            req.reviewed_by = cert.created_by
        repaired.append(req.id)
    if repaired:
        db.commit()
        logger.warning("reconciled %d orphaned certificate(s): requests %s", len(repaired), repaired)
    return repaired
