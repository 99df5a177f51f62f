"""Payment ORM — append-only contribution claims of a tontine.

Invariants:
    - Always belongs to a Tontine (tontine_id FK)
    - status in {pending, confirmed, rejected}; pending -> terminal exactly once
    - validator_id / validated_at set only together with the terminal status
    - Never deleted

Design Decisions:
    - participant_id is the member's user id (not the roster row id): matches the roster key
    - Composite index (tontine_id, submitted_at): listing is always newest-first per tontine
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from tontinepro.db.base import Base


class Payment(Base):
    """Contribution claim awaiting or carrying an initiator decision."""
    __tablename__ = "payments"
    __table_args__ = (
        Index("ix_payments_tontine_submitted", "tontine_id", "submitted_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tontine_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("tontines.id", ondelete="CASCADE"),
        nullable=False,
    )
    participant_id: Mapped[str] = mapped_column(String(128), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    period: Mapped[str] = mapped_column(String(50), nullable=False)
    proof_ref: Mapped[str | None] = mapped_column(String(500), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending",
    )
    validator_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    validated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    tontine: Mapped["Tontine"] = relationship(
        "Tontine", back_populates="payments",
    )
