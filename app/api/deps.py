from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.tokens import decode_access
from app.db.session import get_db
from app.models.profile import Profile
from app.services.storage import LocalStorage

# ----------------------------------------------------------------------
# Lê o Bearer do header Authorization (sem usar OAuth2PasswordBearer)
# ----------------------------------------------------------------------
def get_bearer_token(authorization: str = Header(None, alias="Authorization")) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing Authorization header")
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="Invalid Authorization header")
    return parts[1]

def _profile_from_token(db: Session, token: str) -> Profile:
    payload = decode_access(token)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid token")
    try:
        profile_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token")

    profile = db.get(Profile, profile_id)
    if not profile:
        raise HTTPException(status_code=401, detail="User not found")
    return profile

# ----------------------------------------------------------------------
# Profile atual (o papel é sempre relido do banco, nunca do token)
# ----------------------------------------------------------------------
def get_current_profile(
    token: str = Depends(get_bearer_token),
    db: Session = Depends(get_db),
) -> Profile:
    return _profile_from_token(db, token)

# ----------------------------------------------------------------------
# Object storage (sobrescrito nos testes)
# ----------------------------------------------------------------------
def get_storage() -> LocalStorage:
    return LocalStorage(
        root=settings.STORAGE_DIR,
        base_url="/api/v1/files",
        secret=settings.SECRET_KEY,
    )
