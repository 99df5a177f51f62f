"""Collection Schedule — pairs each rotation slot with its collection date.

Invariants:
    - First date is the first collection_day on or after start_date
    - Weekly/biweekly step by 7/14 days; monthly re-anchors on the same day-of-month
      (clamped to month end) then moves forward to the collection_day
    - Dates after end_date are dropped; one entry per rotation slot at most

Design Decisions:
    - Pure projection: computed on read, never stored (order can change at any time)
"""

import calendar
from dataclasses import dataclass
from datetime import date, timedelta

from tontinepro.core.domain_types import Cadence, Weekday
from tontinepro.core.records import TontineRecord


_STEP_DAYS: dict[Cadence, int] = {Cadence.WEEKLY: 7, Cadence.BIWEEKLY: 14}


@dataclass(frozen=True)
class CollectionSlot:
    cycle: int
    collection_date: date
    beneficiary_id: str


def next_weekday_on_or_after(start: date, weekday: Weekday) -> date:
    return start + timedelta(days=(weekday.index - start.weekday()) % 7)


def _add_months(anchor: date, months: int) -> date:
    month_index = anchor.month - 1 + months
    year = anchor.year + month_index // 12
    month = month_index % 12 + 1
    day = min(anchor.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def cycle_date(first: date, cadence: Cadence, weekday: Weekday, cycle: int) -> date:
    if cadence in _STEP_DAYS:
        return first + timedelta(days=_STEP_DAYS[cadence] * cycle)
    return next_weekday_on_or_after(_add_months(first, cycle), weekday)


def build_schedule(tontine: TontineRecord) -> list[CollectionSlot]:
    """One full rotation: slot i goes to rotation_order[i]."""
    first = next_weekday_on_or_after(tontine.start_date, tontine.collection_day)
    slots = []
    for cycle, beneficiary in enumerate(tontine.rotation_order):
        when = cycle_date(first, tontine.cadence, tontine.collection_day, cycle)
        if tontine.end_date is not None and when > tontine.end_date:
            break
        slots.append(CollectionSlot(cycle, when, beneficiary))
    return slots
