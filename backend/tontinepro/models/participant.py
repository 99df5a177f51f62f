"""Participant ORM — a user's membership record within one tontine.

Invariants:
    - Always belongs to a Tontine (tontine_id FK)
    - (tontine_id, user_id) is unique: a user joins a roster at most once
    - payment_status in {unpaid, pending, confirmed}, written only by payment validation
    - rotation_position is a join-time cache; the tontine's rotation_order wins on read

Design Decisions:
    - Surrogate UUID key plus unique constraint: keeps FK-free rows simple to address
    - Contact fields copied at join time (no global user table in this service)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from tontinepro.db.base import Base


class Participant(Base):
    """Roster entry — scoped to a single tontine."""
    __tablename__ = "participants"
    __table_args__ = (
        UniqueConstraint("tontine_id", "user_id", name="uq_participants_tontine_user"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tontine_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("tontines.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    payment_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="unpaid",
    )
    last_payment_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    rotation_position: Mapped[int | None] = mapped_column(Integer, nullable=True)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    tontine: Mapped["Tontine"] = relationship(
        "Tontine", back_populates="participants",
    )
