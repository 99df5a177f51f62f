"""Participant Roster — capacity and join-eligibility rules.

Invariants:
    - A user id appears at most once per roster
    - Fixed capacity: roster size never exceeds it; unlimited (None) never blocks
    - Joining is legal while pending, active or suspended; never once completed

Design Decisions:
    - with_derived_positions returns copies: callers never see the stored cache
"""

from dataclasses import replace

from tontinepro.core.collection_order import position_index
from tontinepro.core.enforce_lifecycle import check_not_completed
from tontinepro.core.errors import (
    CapacityExceededError,
    ErrorContext,
    ForbiddenError,
    TontineError,
)
from tontinepro.core.records import ParticipantProfile, ParticipantRecord, TontineRecord


def check_can_view(
    tontine: TontineRecord, user_id: str, is_member: bool,
) -> TontineError | None:
    """Tontine details and roster are visible to the initiator and roster members."""
    if tontine.initiator_id == user_id or is_member:
        return None
    return ForbiddenError(
        "Only the initiator and members can view this tontine",
        ErrorContext(tontine_id=str(tontine.id), actor_id=user_id),
    )


def check_capacity(tontine: TontineRecord, roster_size: int) -> TontineError | None:
    if tontine.capacity is not None and roster_size >= tontine.capacity:
        return CapacityExceededError(
            tontine.capacity, ErrorContext(tontine_id=str(tontine.id)),
        )
    return None


def validate_join(tontine: TontineRecord, roster_size: int) -> TontineError | None:
    """Chain join prerequisites for a NEW member. Returns first error or None."""
    return check_not_completed(tontine) or check_capacity(tontine, roster_size)


def new_participant(
    tontine: TontineRecord, user_id: str, profile: ParticipantProfile, roster_size: int,
) -> ParticipantRecord:
    """Roster entry for a fresh join: unpaid, next available slot."""
    return ParticipantRecord(
        tontine_id=tontine.id,
        user_id=user_id,
        display_name=profile.display_name,
        email=profile.email,
        phone=profile.phone,
        address=profile.address,
        rotation_position=roster_size,
    )


def with_derived_positions(
    participants: list[ParticipantRecord], order: list[str],
) -> list[ParticipantRecord]:
    """Copies with rotation_position recomputed from the order, sorted by position.

    Members absent from the order (should not happen) sort last with position None.
    """
    index = position_index(order)
    derived = [replace(p, rotation_position=index.get(p.user_id)) for p in participants]
    return sorted(
        derived,
        key=lambda p: (p.rotation_position is None, p.rotation_position or 0, p.joined_at),
    )
