# app/services/profiles.py
"""
Contas: cadastro, tokens (rotação de refresh), gestão de profiles pelo staff
e a visão do colecionador (/me).
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.errors import Forbidden, NotFound, ValidationError
from app.core.rbac import ensure_staff
from app.core.security_password import hash_password, password_policy_ok, verify_and_maybe_upgrade
from app.core.tokens import create_access_token, create_refresh_token, decode_refresh
from app.crud.profile import profile_crud
from app.models.artist_request import ArtistRequest
from app.models.certificate import Certificate, CertificateStatus
from app.models.coa_request import CoaRequest, RequestStatus
from app.models.profile import Profile
from app.models.tokens import RefreshToken
from app.schemas.coa_request import CollectorDashboard
from app.schemas.profile import DeleteUserOut, ProfileUpdate, SignupIn
from app.services.storage import BUCKET_BOOKS, BUCKET_PROOFS, LocalStorage, StorageError
from app.services.workflow import create_artist_request

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()

# ---------- cadastro / login ----------

def signup(db: Session, body: SignupIn) -> Profile:
    email = normalize_email(body.email)
    if not password_policy_ok(body.password):
        raise ValidationError("Password must have 8 to 128 characters.", field="password")
    if profile_crud.get_by_email(db, email):
        raise ValidationError("Email already registered.", field="email")

    profile = Profile(
        email=email,
        full_name=body.full_name.strip() or None,
        role=None,
        hashed_password=hash_password(body.password),
    )
    db.add(profile)
    db.flush()
    if body.request_artist:
        create_artist_request(
            db, profile,
            full_name=body.full_name,
            portfolio_url=body.portfolio_url,
            message=body.message,
            commit=False,
        )
    db.commit()
    db.refresh(profile)
    logger.info("profile %s signed up (artist request: %s)", profile.id, body.request_artist)
    return profile


def authenticate(db: Session, email: str, password: str) -> Optional[Profile]:
    profile = profile_crud.get_by_email(db, normalize_email(email))
    if not profile:
        return None
    ok, new_hash = verify_and_maybe_upgrade(password, profile.hashed_password)
    if not ok:
        return None
    if new_hash:
        profile.hashed_password = new_hash
        db.add(profile)
        db.commit()
    return profile


def issue_tokens(db: Session, profile: Profile) -> Dict[str, str]:
    access = create_access_token(sub=profile.id, role=profile.role)
    refresh = create_refresh_token(sub=profile.id)
    payload = decode_refresh(refresh)
    db.add(RefreshToken(
        jti=payload["jti"],
        profile_id=profile.id,
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    ))
    db.commit()
    return {"access_token": access, "refresh_token": refresh, "token_type": "bearer"}


def _live_refresh_row(db: Session, payload: Dict) -> Optional[RefreshToken]:
    rt = db.execute(select(RefreshToken).where(RefreshToken.jti == payload["jti"])).scalar_one_or_none()
    if not rt or rt.revoked_at is not None:
        return None
    return rt


def rotate_refresh(db: Session, token: str) -> Optional[tuple[Profile, Dict[str, str]]]:
    """Refresh válido -> revoga o jti antigo e emite um par novo."""
    payload = decode_refresh(token)
    if not payload:
        return None
    rt = _live_refresh_row(db, payload)
    if not rt:
        return None
    profile = db.get(Profile, rt.profile_id)
    if not profile:
        return None
    rt.revoked_at = datetime.now(timezone.utc)
    db.add(rt)
    return profile, issue_tokens(db, profile)


def revoke_refresh(db: Session, token: str) -> bool:
    payload = decode_refresh(token)
    if not payload:
        return False
    rt = _live_refresh_row(db, payload)
    if not rt:
        return False
    rt.revoked_at = datetime.now(timezone.utc)
    db.add(rt)
    db.commit()
    return True

# ---------- staff ----------

def list_profiles(db: Session, staff: Profile, *, role: Optional[str] = None, q: Optional[str] = None) -> List[Profile]:
    ensure_staff(staff)
    if role == "collector":
        return profile_crud.list(db, collectors_only=True, q=q)
    return profile_crud.list(db, role=role, q=q)


def update_profile(db: Session, staff: Profile, profile_id: int, body: ProfileUpdate) -> Profile:
    ensure_staff(staff)
    profile = profile_crud.get(db, profile_id)
    if not profile:
        raise NotFound("Profile not found")
    data = body.model_dump(exclude_unset=True)
    if "full_name" in data:
        data["full_name"] = (data["full_name"] or "").strip() or None
    profile = profile_crud.update(db, profile, data)
    logger.info("profile %s updated by %s: %s", profile.id, staff.id, sorted(data))
    return profile


def _kept_objects(db: Session, profile_id: int, storage: LocalStorage) -> Set[Tuple[str, str]]:
    """Objetos do usuário ainda referenciados por pedidos (auditoria) ou certificados públicos."""
    kept: Set[Tuple[str, str]] = set()
    rows = db.execute(
        select(CoaRequest.proof_image_path, CoaRequest.book_image_path)
        .where(CoaRequest.collector_user_id == profile_id)
    ).all()
    for proof_path, book_path in rows:
        if proof_path:
            kept.add((BUCKET_PROOFS, proof_path))
        if book_path:
            kept.add((BUCKET_BOOKS, book_path))
    image_urls = set(db.scalars(select(Certificate.image_url).where(Certificate.image_url.is_not(None))).all())
    for path in storage.list_prefix(BUCKET_BOOKS, str(profile_id)):
        if storage.get_public_url(BUCKET_BOOKS, path) in image_urls:
            kept.add((BUCKET_BOOKS, path))
    return kept


def delete_user(db: Session, staff: Profile, profile_id: int, *, storage: LocalStorage) -> DeleteUserOut:
    """
    Apaga o profile e depois limpa <bucket>/<user_id>/ no storage, preservando
    imagens de pedidos (que sobrevivem com collector_user_id NULL) e de certificados.
    Se a limpeza falhar a conta já foi removida: devolve ok com warning.
    """
    ensure_staff(staff)
    if staff.id == profile_id:
        raise Forbidden("You cannot delete your own account")
    profile = db.get(Profile, profile_id)
    if not profile:
        raise NotFound("Profile not found")

    kept = _kept_objects(db, profile_id, storage)
    db.delete(profile)
    db.commit()
    logger.info("profile %s deleted by %s", profile_id, staff.id)

    failed: List[str] = []
    for bucket in (BUCKET_PROOFS, BUCKET_BOOKS):
        try:
            for path in storage.list_prefix(bucket, str(profile_id)):
                if (bucket, path) not in kept:
                    storage.remove(bucket, path)
        except (StorageError, OSError) as exc:
            logger.error("storage cleanup failed for %s/%s: %s", bucket, profile_id, exc)
            failed.append(bucket)
    if failed:
        return DeleteUserOut(
            ok=True,
            warning=f"User deleted, but files could not be removed from: {', '.join(failed)}",
        )
    return DeleteUserOut(ok=True)


def list_artist_requests(db: Session, staff: Profile, status: Optional[str] = None) -> List[ArtistRequest]:
    ensure_staff(staff)
    stmt = select(ArtistRequest)
    if status:
        stmt = stmt.where(ArtistRequest.status == status)
    stmt = stmt.order_by(ArtistRequest.created_at.desc(), ArtistRequest.id.desc())
    return list(db.scalars(stmt).all())

# ---------- colecionador (/me) ----------

def my_requests(db: Session, profile: Profile) -> List[CoaRequest]:
    stmt = (
        select(CoaRequest)
        .where(CoaRequest.collector_user_id == profile.id)
        .order_by(CoaRequest.created_at.desc(), CoaRequest.id.desc())
    )
    return list(db.scalars(stmt).all())


def my_certificates(db: Session, profile: Profile) -> List[Certificate]:
    stmt = (
        select(Certificate)
        .join(CoaRequest, CoaRequest.id == Certificate.request_id)
        .where(CoaRequest.collector_user_id == profile.id)
        .order_by(Certificate.created_at.desc(), Certificate.id.desc())
    )
    return list(db.scalars(stmt).all())


def dashboard(db: Session, profile: Profile) -> CollectorDashboard:
    rows = db.execute(
        select(CoaRequest.status, func.count(CoaRequest.id))
        .where(CoaRequest.collector_user_id == profile.id)
        .group_by(CoaRequest.status)
    ).all()
    counts = {status: n for status, n in rows}
    active = db.scalar(
        select(func.count(Certificate.id))
        .join(CoaRequest, CoaRequest.id == Certificate.request_id)
        .where(
            CoaRequest.collector_user_id == profile.id,
            Certificate.status == CertificateStatus.active.value,
        )
    ) or 0
    return CollectorDashboard(
        pending=counts.get(RequestStatus.pending.value, 0),
        approved=counts.get(RequestStatus.approved.value, 0),
        rejected=counts.get(RequestStatus.rejected.value, 0),
        active_coas=active,
    )
