"""Tontine ORM — persists the aggregate root of a savings circle.

Invariants:
    - id is UUID primary key
    - invitation_code is unique across all tontines (collision source of truth)
    - rotation_order is a JSON array of participant user ids (authoritative order)
    - version increments on every update (optimistic concurrency guard)
    - status transitions: pending -> active <-> suspended -> completed

Design Decisions:
    - JSON column for rotation_order: whole-array replacement, no join table needed
    - Enum values stored as plain strings (String columns), converted at the repository edge
    - cascade delete-orphan never exercised: tontines are never physically deleted
    - Relationships are lazy="raise": repositories query children explicitly by tontine_id
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import String, Text, Integer, Date, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from tontinepro.db.base import Base


class Tontine(Base):
    """Tontine aggregate root — owns participants and payments."""
    __tablename__ = "tontines"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    initiator_id: Mapped[str] = mapped_column(
        String(128), nullable=False, index=True,
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    contribution_kind: Mapped[str] = mapped_column(String(20), nullable=False)
    contribution_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    cadence: Mapped[str] = mapped_column(String(20), nullable=False)
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    collection_day: Mapped[str] = mapped_column(String(10), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    collection_window_start: Mapped[date | None] = mapped_column(
        Date, nullable=True,
    )
    collection_window_end: Mapped[date | None] = mapped_column(
        Date, nullable=True,
    )
    rotation_order: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending", index=True,
    )
    invitation_code: Mapped[str] = mapped_column(
        String(6), nullable=False, unique=True,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    participants: Mapped[list["Participant"]] = relationship(
        "Participant", back_populates="tontine",
        cascade="all, delete-orphan", lazy="raise",
    )
    payments: Mapped[list["Payment"]] = relationship(
        "Payment", back_populates="tontine",
        cascade="all, delete-orphan", lazy="raise",
    )
