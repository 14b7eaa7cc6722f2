"""Role change request model and status enum."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class RoleChangeStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RoleChangeDecision(str, Enum):
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def status(self) -> RoleChangeStatus:
        return RoleChangeStatus(self.value)


class RoleChangeRequest(Base):
    __tablename__ = "role_change_requests"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    organization_id: Mapped[UUID] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    from_role: Mapped[str] = mapped_column(String, nullable=False)
    to_role: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=RoleChangeStatus.PENDING.value
    )
    # Snapshot of the requester at submission time
    requested_by_name: Mapped[str] = mapped_column(String, nullable=False, default="")
    requested_by_email: Mapped[str] = mapped_column(
        String, nullable=False, default=""
    )
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    admin_response: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    # Both null while pending, both set once resolved
    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    processed_by: Mapped[UUID | None] = mapped_column(Uuid, nullable=True)

    @property
    def is_pending(self) -> bool:
        return self.status == RoleChangeStatus.PENDING
