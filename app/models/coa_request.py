from enum import Enum
from typing import Optional
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import ForeignKey, String, Text, Boolean, DateTime, func
from app.db.base import Base

class RequestStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"

class CoaRequest(Base):
    __tablename__ = "coa_requests"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    status: Mapped[str] = mapped_column(String(20), default=RequestStatus.pending.value, index=True)
    comic_title: Mapped[str] = mapped_column(String(200))
    issue_number: Mapped[str] = mapped_column(String(40))
    # SET NULL: o pedido sobrevive à exclusão da conta (trilha de auditoria)
    collector_user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True
    )
    event_id: Mapped[Optional[int]] = mapped_column(ForeignKey("events.id", ondelete="SET NULL"), nullable=True, index=True)

    attested: Mapped[bool] = mapped_column(Boolean, default=False)
    witness_name: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    proof_image_path: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    book_image_path: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    book_image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # revisão (preenchidos só pelo staff)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    issued_coa_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("certificates.id", ondelete="SET NULL", use_alter=True), nullable=True
    )
    reviewed_by: Mapped[Optional[int]] = mapped_column(ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    event = relationship("Event")
    collector = relationship("Profile", foreign_keys=[collector_user_id])
