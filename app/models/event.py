from typing import Optional
from datetime import date, datetime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, ForeignKey, Date, DateTime, Boolean, CheckConstraint, func
from app.db.base import Base

class Event(Base):
    __tablename__ = "events"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    slug: Mapped[str] = mapped_column(String(200), unique=True, index=True)
    artist_user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True
    )
    artist_name: Mapped[str] = mapped_column(String(160))
    event_name: Mapped[str] = mapped_column(String(200))
    event_location: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    event_date: Mapped[date] = mapped_column(Date)
    event_end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    artist = relationship("Profile", foreign_keys=[artist_user_id])

    __table_args__ = (
        CheckConstraint("event_end_date IS NULL OR event_end_date >= event_date", name="event_dates_order"),
    )

    @property
    def end_date(self) -> date:
        return self.event_end_date or self.event_date
