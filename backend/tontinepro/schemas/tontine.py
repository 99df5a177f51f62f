"""Tontine Schemas — Pydantic models for tontine creation, edits and responses.

Invariants:
    - TontineCreate.name: 1-120 chars, stripped, non-empty
    - contribution_amount > 0; capacity >= 1 or null (unlimited)
    - end_date, when present, is not before start_date
    - Collection window: both bounds or neither, ordered, savings kind only

Design Decisions:
    - Domain enums used directly as field types: Pydantic validates values natively
    - to_draft() hands the service a frozen core record, never the request model
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from tontinepro.core.domain_types import (
    Cadence,
    ContributionKind,
    TontineStatus,
    Weekday,
)
from tontinepro.core.invitation_code import build_invitation_link
from tontinepro.core.records import TontineDraft, TontineRecord


def _strip_name(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("name cannot be empty or whitespace")
    return v


class TontineCreate(BaseModel):
    """Tontine creation — attributes chosen by the initiatrice."""
    name: str = Field(min_length=1, max_length=120)
    description: str | None = Field(None, max_length=2000)
    contribution_kind: ContributionKind = ContributionKind.MONEY
    contribution_amount: int = Field(gt=0)
    cadence: Cadence
    capacity: int | None = Field(None, ge=1)
    collection_day: Weekday
    start_date: date
    end_date: date | None = None
    collection_window_start: date | None = None
    collection_window_end: date | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return _strip_name(v)

    @model_validator(mode="after")
    def check_dates(self) -> "TontineCreate":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date cannot precede start_date")
        window = (self.collection_window_start, self.collection_window_end)
        if any(bound is not None for bound in window):
            if self.contribution_kind != ContributionKind.SAVINGS:
                raise ValueError("collection window is only accepted for savings tontines")
            if None in window:
                raise ValueError("collection window needs both start and end")
            if self.collection_window_end < self.collection_window_start:
                raise ValueError("collection window end precedes its start")
        return self

    def to_draft(self) -> TontineDraft:
        return TontineDraft(**self.model_dump())


class TontineUpdate(BaseModel):
    """Partial edit — omitted fields keep their value."""
    name: str | None = Field(None, min_length=1, max_length=120)
    description: str | None = Field(None, max_length=2000)
    contribution_amount: int | None = Field(None, gt=0)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        return _strip_name(v)


class TontineResponse(BaseModel):
    """Tontine response — public-facing tontine data plus its shareable link."""
    id: UUID
    initiator_id: str
    name: str
    description: str | None
    contribution_kind: ContributionKind
    contribution_amount: int
    cadence: Cadence
    capacity: int | None
    collection_day: Weekday
    start_date: date
    end_date: date | None
    collection_window_start: date | None
    collection_window_end: date | None
    status: TontineStatus
    invitation_code: str
    invitation_link: str
    rotation_order: list[str]
    version: int
    created_at: datetime

    @classmethod
    def from_record(cls, tontine: TontineRecord, base_url: str) -> "TontineResponse":
        return cls(
            id=tontine.id,
            initiator_id=tontine.initiator_id,
            name=tontine.name,
            description=tontine.description,
            contribution_kind=tontine.contribution_kind,
            contribution_amount=tontine.contribution_amount,
            cadence=tontine.cadence,
            capacity=tontine.capacity,
            collection_day=tontine.collection_day,
            start_date=tontine.start_date,
            end_date=tontine.end_date,
            collection_window_start=tontine.collection_window_start,
            collection_window_end=tontine.collection_window_end,
            status=tontine.status,
            invitation_code=tontine.invitation_code,
            invitation_link=build_invitation_link(base_url, tontine.invitation_code),
            rotation_order=list(tontine.rotation_order),
            version=tontine.version,
            created_at=tontine.created_at,
        )


class InvitationResponse(BaseModel):
    """What a candidate sees before joining: no roster, no order."""
    tontine_id: UUID
    name: str
    description: str | None
    contribution_kind: ContributionKind
    contribution_amount: int
    cadence: Cadence
    capacity: int | None
    status: TontineStatus
    invitation_code: str

    @classmethod
    def from_record(cls, tontine: TontineRecord) -> "InvitationResponse":
        return cls(
            tontine_id=tontine.id,
            name=tontine.name,
            description=tontine.description,
            contribution_kind=tontine.contribution_kind,
            contribution_amount=tontine.contribution_amount,
            cadence=tontine.cadence,
            capacity=tontine.capacity,
            status=tontine.status,
            invitation_code=tontine.invitation_code,
        )
