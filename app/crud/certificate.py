from typing import List, Optional
from sqlalchemy import select, or_
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase
from app.models.certificate import Certificate
from app.schemas.certificate import CertificateCreate, CertificateUpdate

_SEARCH_COLUMNS = (
    Certificate.qr_id,
    Certificate.serial_number,
    Certificate.comic_title,
    Certificate.issue_number,
    Certificate.signed_by,
    Certificate.signed_location,
    Certificate.witnessed_by,
)

class CRUDCertificate(CRUDBase[Certificate, CertificateCreate, CertificateUpdate]):
    def get_by_qr_id(self, db: Session, qr_id: str) -> Optional[Certificate]:
        return db.execute(select(Certificate).where(Certificate.qr_id == qr_id)).scalar_one_or_none()

    def qr_id_taken(self, db: Session, qr_id: str) -> bool:
        return db.scalar(select(Certificate.id).where(Certificate.qr_id == qr_id)) is not None

    def search(self, db: Session, q: Optional[str] = None, *, status: Optional[str] = None) -> List[Certificate]:
        stmt = select(Certificate)
        if q:
            like = f"%{q.strip().lower()}%"
            stmt = stmt.where(or_(*[col.ilike(like) for col in _SEARCH_COLUMNS]))
        if status:
            stmt = stmt.where(Certificate.status == status)
        stmt = stmt.order_by(Certificate.created_at.desc(), Certificate.id.desc())
        return list(db.scalars(stmt).all())

certificate_crud = CRUDCertificate(Certificate)
