# app/core/rbac.py
from enum import Enum
from typing import Optional

from fastapi import Depends, HTTPException, status

from app.api.deps import get_current_profile
from app.core.errors import Forbidden


class Role(str, Enum):
    owner = "owner"
    admin = "admin"
    reviewer = "reviewer"
    artist = "artist"


ROLE_OWNER = Role.owner.value
ROLE_ADMIN = Role.admin.value
ROLE_REVIEWER = Role.reviewer.value
ROLE_ARTIST = Role.artist.value

STAFF_ROLES = frozenset({ROLE_OWNER, ROLE_ADMIN, ROLE_REVIEWER})


def _role_value(role) -> Optional[str]:
    if isinstance(role, Role):
        return role.value
    return role if isinstance(role, str) else None


def is_staff(role) -> bool:
    return _role_value(role) in STAFF_ROLES


def is_artist(role) -> bool:
    return _role_value(role) == ROLE_ARTIST


# ---- checagens usadas dentro dos services (fronteira de autorização real) ----

def ensure_staff(profile) -> None:
    if profile is None or not is_staff(profile.role):
        raise Forbidden("Staff role required")


def can_manage_event(profile, event) -> bool:
    if profile is None:
        return False
    if is_staff(profile.role):
        return True
    return is_artist(profile.role) and event.artist_user_id == profile.id


# ---- dependências FastAPI ----

def require_staff(profile=Depends(get_current_profile)):
    if not is_staff(profile.role):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
    return profile


def require_artist(profile=Depends(get_current_profile)):
    if not is_artist(profile.role):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Artist role required")
    return profile
