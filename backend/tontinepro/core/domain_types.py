"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - TontineId and PaymentId wrap UUIDs assigned by the store
    - UserId wraps the opaque string issued by the identity provider
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders, stored as-is in String columns
"""

import string
from dataclasses import dataclass
from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

TontineId = NewType("TontineId", UUID)
PaymentId = NewType("PaymentId", UUID)
UserId = NewType("UserId", str)


# ─── Constants ───────────────────────────────────────────────────

INVITATION_CODE_LENGTH: int = 6
INVITATION_CODE_ALPHABET: str = string.ascii_uppercase + string.digits


# ─── Enums ───────────────────────────────────────────────────────

class Role(str, Enum):
    """Role claim issued by the identity provider."""
    INITIATRICE = "initiatrice"
    PARTICIPANT = "participant"


class TontineStatus(str, Enum):
    """Tontine lifecycle states — maps to DB `status` column."""
    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    COMPLETED = "completed"


class ContributionKind(str, Enum):
    MONEY = "money"
    GOODS_PACK = "goods_pack"
    SAVINGS = "savings"


class Cadence(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


class Weekday(str, Enum):
    """Collection day. Declaration order matches date.weekday() (Monday == 0)."""
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def index(self) -> int:
        return list(Weekday).index(self)


class ParticipantPaymentStatus(str, Enum):
    """Roster-side view of the current cycle's contribution."""
    UNPAID = "unpaid"
    PENDING = "pending"
    CONFIRMED = "confirmed"


class PaymentStatus(str, Enum):
    """Ledger-side state of a single claim. PENDING is the only non-terminal state."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"


class ValidationDecision(str, Enum):
    CONFIRM = "confirm"
    REJECT = "reject"


class TontineEventType(str, Enum):
    """Change notifications published after successful mutations."""
    TONTINE_UPDATED = "tontine.updated"
    STATUS_CHANGED = "tontine.status_changed"
    PARTICIPANT_JOINED = "participant.joined"
    ORDER_UPDATED = "order.updated"
    PAYMENT_SUBMITTED = "payment.submitted"
    PAYMENT_VALIDATED = "payment.validated"


# ─── Principal ───────────────────────────────────────────────────

@dataclass(frozen=True)
class Principal:
    """Authenticated actor as asserted by the identity provider."""
    user_id: UserId
    role: Role
