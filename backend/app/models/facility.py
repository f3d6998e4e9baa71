import uuid
from datetime import date

from sqlalchemy import Date, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from app.models.base import Base, TimestampMixin, generate_uuid


class Facility(TimestampMixin, Base):
    __tablename__ = "facilities"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    state: Mapped[str | None] = mapped_column(String(2), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    proxy: Mapped[str | None] = mapped_column(String(255), nullable=True)


class FacilityPrelive(TimestampMixin, Base):
    """Pre-go-live readiness snapshot for one facility."""

    __tablename__ = "facility_prelive_info"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    facility_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("facilities.id"), nullable=True, index=True
    )
    priority: Mapped[str | None] = mapped_column(String(50), nullable=True)
    go_live_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    credentialing_due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    board_meeting_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    temps_possible: Mapped[bool | None] = mapped_column(nullable=True)
    payor_enrollment_required: Mapped[bool | None] = mapped_column(nullable=True)
    roles_needed: Mapped[list | None] = mapped_column(JSON, nullable=True)
