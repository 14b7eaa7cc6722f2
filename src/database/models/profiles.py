"""Staff profile model and the staff role enum."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class StaffRole(str, Enum):
    PHARMACIST = "pharmacist"
    PHARMACY_TECH = "pharmacy_tech"
    MANAGER = "manager"
    ADMINISTRATOR = "administrator"

    @property
    def label(self) -> str:
        return ROLE_LABELS[self]


ROLE_LABELS = {
    StaffRole.PHARMACIST: "Pharmacist",
    StaffRole.PHARMACY_TECH: "Pharmacy Technician",
    StaffRole.MANAGER: "Manager",
    StaffRole.ADMINISTRATOR: "Administrator",
}

# Administrator is granted out of band, never through a role change request
REQUESTABLE_ROLES = frozenset(
    {StaffRole.PHARMACIST, StaffRole.PHARMACY_TECH, StaffRole.MANAGER}
)


class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, unique=True, nullable=False, comment="Hosted auth user ID"
    )
    organization_id: Mapped[UUID] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    full_name: Mapped[str] = mapped_column(String, nullable=False, default="")
    email: Mapped[str] = mapped_column(String, nullable=False, default="")
    # Single source of truth for authorization checks
    role: Mapped[str] = mapped_column(
        String, nullable=False, default=StaffRole.PHARMACY_TECH.value
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    organization = relationship("Organization", back_populates="profiles")
