"""Lifecycle Enforcement — tests for pure ownership and status-transition rules.

Tests cover:
    - check_can_create only admits the initiatrice role
    - check_initiator / check_not_completed
    - ALLOWED_TRANSITIONS: every listed edge accepted, everything else refused
    - activation roster minimum applies to pending → active only
    - toggle_target flips active ⇄ suspended, None otherwise
    - validate_transition chains ownership before state
"""

import pytest

from tontinepro.core.domain_types import Role, TontineStatus
from tontinepro.core.enforce_lifecycle import (
    ALLOWED_TRANSITIONS,
    check_accepting_payments,
    check_can_create,
    check_initiator,
    check_not_completed,
    check_transition,
    toggle_target,
    validate_initiator_mutation,
    validate_transition,
)
from tontinepro.core.errors import ForbiddenError, InvalidStateError

from tests.builders import INITIATOR, make_tontine


# ─── check_can_create ────────────────────────────────────────────

def test_initiatrice_can_create():
    assert check_can_create(Role.INITIATRICE) is None


def test_participant_cannot_create():
    error = check_can_create(Role.PARTICIPANT)
    assert isinstance(error, ForbiddenError)
    assert error.http_status == 403


# ─── ownership & terminal state ──────────────────────────────────

def test_check_initiator_accepts_owner():
    assert check_initiator(make_tontine(), INITIATOR.user_id) is None


def test_check_initiator_rejects_stranger():
    error = check_initiator(make_tontine(), "someone-else")
    assert isinstance(error, ForbiddenError)
    assert error.context.actor_id == "someone-else"


def test_check_not_completed():
    assert check_not_completed(make_tontine(status=TontineStatus.ACTIVE)) is None
    error = check_not_completed(make_tontine(status=TontineStatus.COMPLETED))
    assert isinstance(error, InvalidStateError)
    assert error.current_state == "completed"


def test_validate_initiator_mutation_checks_owner_first():
    tontine = make_tontine(status=TontineStatus.COMPLETED)
    assert isinstance(validate_initiator_mutation(tontine, "x"), ForbiddenError)
    assert isinstance(
        validate_initiator_mutation(tontine, INITIATOR.user_id), InvalidStateError,
    )


# ─── state machine ───────────────────────────────────────────────

@pytest.mark.parametrize("source", list(TontineStatus))
@pytest.mark.parametrize("target", list(TontineStatus))
def test_check_transition_matches_table(source, target):
    error = check_transition(make_tontine(status=source), target)
    if target in ALLOWED_TRANSITIONS[source]:
        assert error is None
    else:
        assert isinstance(error, InvalidStateError)


def test_completed_is_terminal():
    assert ALLOWED_TRANSITIONS[TontineStatus.COMPLETED] == frozenset()


def test_pending_cannot_be_suspended():
    error = check_transition(make_tontine(), TontineStatus.SUSPENDED)
    assert "pending" in error.message
    assert "suspended" in error.message


# ─── validate_transition ─────────────────────────────────────────

def test_validate_transition_forbidden_for_non_initiator():
    error = validate_transition(make_tontine(), "intruder", TontineStatus.ACTIVE)
    assert isinstance(error, ForbiddenError)


def test_activation_respects_minimum_roster():
    tontine = make_tontine()
    error = validate_transition(
        tontine, INITIATOR.user_id, TontineStatus.ACTIVE, roster_size=1, min_participants=2,
    )
    assert isinstance(error, InvalidStateError)
    assert validate_transition(
        tontine, INITIATOR.user_id, TontineStatus.ACTIVE, roster_size=2, min_participants=2,
    ) is None


def test_activation_with_empty_roster_allowed_by_default():
    assert validate_transition(
        make_tontine(), INITIATOR.user_id, TontineStatus.ACTIVE,
    ) is None


def test_roster_minimum_ignored_for_resume():
    tontine = make_tontine(status=TontineStatus.SUSPENDED)
    assert validate_transition(
        tontine, INITIATOR.user_id, TontineStatus.ACTIVE, roster_size=0, min_participants=5,
    ) is None


# ─── toggle & payments gate ──────────────────────────────────────

def test_toggle_target():
    assert toggle_target(make_tontine(status=TontineStatus.ACTIVE)) == TontineStatus.SUSPENDED
    assert toggle_target(make_tontine(status=TontineStatus.SUSPENDED)) == TontineStatus.ACTIVE
    assert toggle_target(make_tontine(status=TontineStatus.PENDING)) is None
    assert toggle_target(make_tontine(status=TontineStatus.COMPLETED)) is None


@pytest.mark.parametrize(
    "status", [TontineStatus.PENDING, TontineStatus.SUSPENDED, TontineStatus.COMPLETED],
)
def test_payments_refused_unless_active(status):
    assert isinstance(
        check_accepting_payments(make_tontine(status=status)), InvalidStateError,
    )


def test_payments_accepted_when_active():
    assert check_accepting_payments(make_tontine(status=TontineStatus.ACTIVE)) is None
