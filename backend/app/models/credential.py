import uuid
from datetime import date

from sqlalchemy import Date, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin, generate_uuid


class ProviderFacilityCredential(TimestampMixin, Base):
    """One provider's credentialing relationship with one facility."""

    __tablename__ = "provider_facility_credentials"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    provider_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("providers.id"), nullable=True, index=True
    )
    facility_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("facilities.id"), nullable=True, index=True
    )
    priority: Mapped[str | None] = mapped_column(String(50), nullable=True)
    privileges: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str | None] = mapped_column(String(100), nullable=True)
    decision: Mapped[str | None] = mapped_column(String(100), nullable=True)
    facility_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    application_required: Mapped[bool | None] = mapped_column(nullable=True)
    requested_at: Mapped[date | None] = mapped_column(Date, nullable=True)


class StateLicense(TimestampMixin, Base):
    __tablename__ = "state_licenses"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    provider_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("providers.id"), nullable=True, index=True
    )
    state: Mapped[str | None] = mapped_column(String(2), nullable=True)
    priority: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[str | None] = mapped_column(String(100), nullable=True)
    path: Mapped[str | None] = mapped_column(String(100), nullable=True)
    initial_or_renewal: Mapped[str | None] = mapped_column(String(50), nullable=True)
    starts_at: Mapped[date | None] = mapped_column(Date, nullable=True)
    issued_at: Mapped[date | None] = mapped_column(Date, nullable=True)
    expires_at: Mapped[date | None] = mapped_column(Date, nullable=True)
