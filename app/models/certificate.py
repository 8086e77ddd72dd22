from enum import Enum
from datetime import date, datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import ForeignKey, String, Date, DateTime, func
from app.db.base import Base

class CertificateStatus(str, Enum):
    active = "active"
    revoked = "revoked"

class Certificate(Base):
    __tablename__ = "certificates"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    qr_id: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    serial_number: Mapped[Optional[str]] = mapped_column(String(64), unique=True, nullable=True)
    comic_title: Mapped[str] = mapped_column(String(200))
    issue_number: Mapped[str] = mapped_column(String(40))
    signed_by: Mapped[str] = mapped_column(String(160))
    signed_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    signed_location: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    witnessed_by: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=CertificateStatus.active.value)

    # no máximo um certificado por pedido (unique)
    request_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("coa_requests.id", ondelete="SET NULL"), unique=True, nullable=True
    )
    created_by: Mapped[Optional[int]] = mapped_column(ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
