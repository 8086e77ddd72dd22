from typing import List, Optional
from sqlalchemy import select, or_
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase
from app.models.profile import Profile
from app.schemas.profile import ProfileUpdate, SignupIn

class CRUDProfile(CRUDBase[Profile, SignupIn, ProfileUpdate]):
    def get_by_email(self, db: Session, email: str) -> Optional[Profile]:
        return db.execute(select(Profile).where(Profile.email == (email or "").strip().lower())).scalar_one_or_none()

    def list(self, db: Session, *, role: Optional[str] = None, collectors_only: bool = False, q: Optional[str] = None) -> List[Profile]:
        stmt = select(Profile)
        if collectors_only:
            stmt = stmt.where(Profile.role.is_(None))
        elif role:
            stmt = stmt.where(Profile.role == role)
        if q:
            like = f"%{q.lower()}%"
            stmt = stmt.where(or_(Profile.full_name.ilike(like), Profile.email.ilike(like)))
        return list(db.scalars(stmt.order_by(Profile.created_at.desc(), Profile.id.desc())).all())

profile_crud = CRUDProfile(Profile)
