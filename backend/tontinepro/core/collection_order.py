"""Collection Order — pure operations on the rotation order array.

Invariants:
    - The order is duplicate-free and equal in membership to the roster
    - Positions are 0-based indexes into the order; never read from a stored cache
    - Reorder is whole-array replacement; no partial primitive exists

Design Decisions:
    - position_index builds an id -> index map once per read (arena/index pattern)
    - check_reorder reports missing, unexpected and duplicated ids separately
"""

from collections import Counter

from tontinepro.core.errors import ErrorContext, InvalidOrderError, TontineError


def position_index(order: list[str]) -> dict[str, int]:
    """Map each user id to its rotation position."""
    return {user_id: i for i, user_id in enumerate(order)}


def position_of(order: list[str], user_id: str) -> int | None:
    return position_index(order).get(user_id)


def append_to_order(order: list[str], user_id: str) -> list[str]:
    """Return a new order with user_id at the end. Already present → unchanged copy."""
    if user_id in order:
        return list(order)
    return [*order, user_id]


def is_permutation(current: list[str], proposed: list[str]) -> bool:
    return Counter(current) == Counter(proposed)


def check_reorder(
    current: list[str],
    proposed: list[str],
    context: ErrorContext | None = None,
) -> TontineError | None:
    """A reorder payload must contain exactly the current ids, each once."""
    if is_permutation(current, proposed):
        return None
    counts = Counter(proposed)
    current_ids = set(current)
    missing = [uid for uid in current if uid not in counts]
    unexpected = sorted({uid for uid in proposed if uid not in current_ids})
    duplicates = sorted(uid for uid, n in counts.items() if n > 1)
    return InvalidOrderError(missing, unexpected, duplicates, context)


def order_matches_roster(order: list[str], member_ids: list[str]) -> bool:
    """Invariant check: order is a duplicate-free permutation of the roster."""
    return len(order) == len(set(order)) and set(order) == set(member_ids)
