# app/db/init_db.py
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.rbac import ROLE_OWNER
from app.core.security_password import hash_password
from app.models.profile import Profile

logger = logging.getLogger(__name__)

def init_db(db: Session) -> None:
    # owner inicial vem do ambiente; nada de senha fixa no código
    email = (settings.OWNER_EMAIL or "").strip().lower()
    if not email or not settings.OWNER_PASSWORD:
        logger.info("OWNER_EMAIL/OWNER_PASSWORD not set; skipping owner seed")
        return

    owner = db.scalar(select(Profile).where(Profile.email == email))
    if not owner:
        owner = Profile(
            email=email,
            full_name="Owner",
            role=ROLE_OWNER,
            hashed_password=hash_password(settings.OWNER_PASSWORD),
        )
        db.add(owner)
        logger.info("seeded owner profile %s", email)
    elif owner.role != ROLE_OWNER:
        owner.role = ROLE_OWNER
        logger.info("promoted %s to owner", email)

    db.commit()
