# app/api/v1/profiles.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_storage
from app.core.rbac import require_staff
from app.schemas.profile import DeleteUserOut, ProfileOut, ProfileUpdate
from app.services import profiles as profile_service
from app.services.storage import LocalStorage

router = APIRouter()

@router.get("/", response_model=List[ProfileOut])
def list_profiles(
    role: Optional[str] = Query(None, pattern="^(owner|admin|reviewer|artist|collector)$"),
    q: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    staff=Depends(require_staff),
):
    return profile_service.list_profiles(db, staff, role=role, q=q)

@router.patch("/{profile_id}", response_model=ProfileOut)
def update_profile(profile_id: int, body: ProfileUpdate, db: Session = Depends(get_db), staff=Depends(require_staff)):
    return profile_service.update_profile(db, staff, profile_id, body)

@router.delete("/{profile_id}", response_model=DeleteUserOut)
def delete_profile(
    profile_id: int,
    db: Session = Depends(get_db),
    storage: LocalStorage = Depends(get_storage),
    staff=Depends(require_staff),
):
    return profile_service.delete_user(db, staff, profile_id, storage=storage)
