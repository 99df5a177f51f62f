"""Tontine Service — creation, visibility, detail edits and lifecycle transitions.

Invariants:
    - Only an initiatrice creates; the result is pending with an empty order
    - Invitation code collisions are retried, then reported as Conflict
    - Every transition is initiator-only and follows the state machine
    - Nothing is written when a precondition fails
"""

import uuid

import pytest

from tontinepro.core.domain_types import TontineStatus
from tontinepro.core.errors import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    ResourceNotFoundError,
)
from tontinepro.services.tontine_service import TontineService

from tests.builders import INITIATOR, make_draft, member, profile
from tests.fakes import ScriptedRandom


async def _create(service, **overrides):
    return await service.create(INITIATOR, make_draft(**overrides))


# ─── create ──────────────────────────────────────────────────────

async def test_create_starts_pending_with_empty_order(tontine_service, uow):
    tontine = await _create(tontine_service)
    assert tontine.status == TontineStatus.PENDING
    assert tontine.rotation_order == []
    assert tontine.initiator_id == INITIATOR.user_id
    assert len(tontine.invitation_code) == 6
    assert uow.commits == 1
    stored = await uow.tontines.get(tontine.id)
    assert stored.invitation_code == tontine.invitation_code


async def test_participant_role_cannot_create(tontine_service, uow):
    with pytest.raises(ForbiddenError):
        await tontine_service.create(member("p-1"), make_draft())
    assert uow.tables.tontines == {}


async def test_code_collision_is_regenerated(uow, settings, locks):
    first = TontineService(uow, settings, locks, rng=ScriptedRandom("AAAAAA"))
    await _create(first)
    second = TontineService(
        uow, settings, locks, rng=ScriptedRandom("AAAAAA", "BBBBBB"),
    )
    tontine = await _create(second)
    assert tontine.invitation_code == "BBBBBB"
    assert len(uow.tables.tontines) == 2


async def test_code_collisions_exhausted_raise_conflict(uow, settings, locks):
    await _create(TontineService(uow, settings, locks, rng=ScriptedRandom("AAAAAA")))
    settings.invitation_code_max_attempts = 2
    service = TontineService(
        uow, settings, locks, rng=ScriptedRandom("AAAAAA", "AAAAAA"),
    )
    with pytest.raises(ConflictError):
        await _create(service)
    assert len(uow.tables.tontines) == 1


# ─── queries ─────────────────────────────────────────────────────

async def test_get_visible_to_initiator_and_members(tontine_service, roster_service):
    tontine = await _create(tontine_service)
    await roster_service.join(tontine.id, member("p-1"), profile())
    assert (await tontine_service.get(tontine.id, INITIATOR)).id == tontine.id
    assert (await tontine_service.get(tontine.id, member("p-1"))).id == tontine.id


async def test_get_forbidden_for_strangers(tontine_service):
    tontine = await _create(tontine_service)
    with pytest.raises(ForbiddenError):
        await tontine_service.get(tontine.id, member("stranger"))


async def test_get_unknown_tontine_not_found(tontine_service):
    with pytest.raises(ResourceNotFoundError):
        await tontine_service.get(uuid.uuid4(), INITIATOR)


async def test_list_owned_and_joined(tontine_service, roster_service):
    first = await _create(tontine_service, name="First")
    second = await _create(tontine_service, name="Second")
    await roster_service.join(first.id, member("p-1"), profile())

    owned = await tontine_service.list_owned(INITIATOR)
    assert {t.id for t in owned} == {first.id, second.id}
    assert owned[0].created_at >= owned[1].created_at

    joined = await tontine_service.list_joined(member("p-1"))
    assert [t.id for t in joined] == [first.id]
    assert await tontine_service.list_joined(member("nobody")) == []


# ─── update_details ──────────────────────────────────────────────

async def test_update_details(tontine_service, uow):
    tontine = await _create(tontine_service)
    updated = await tontine_service.update_details(
        tontine.id, INITIATOR, name="Renamed", contribution_amount=15_000, description=None,
    )
    assert updated.name == "Renamed"
    assert updated.contribution_amount == 15_000
    assert updated.version == tontine.version + 1
    stored = await uow.tontines.get(tontine.id)
    assert stored.name == "Renamed"


async def test_update_details_forbidden_for_non_initiator(tontine_service, uow):
    tontine = await _create(tontine_service)
    with pytest.raises(ForbiddenError):
        await tontine_service.update_details(tontine.id, member("p-1"), name="Hijack")
    assert (await uow.tontines.get(tontine.id)).name == tontine.name


async def test_update_details_refused_once_completed(tontine_service):
    tontine = await _create(tontine_service)
    await tontine_service.complete(tontine.id, INITIATOR)
    with pytest.raises(InvalidStateError):
        await tontine_service.update_details(tontine.id, INITIATOR, name="Late")


# ─── transitions ─────────────────────────────────────────────────

async def test_full_lifecycle(tontine_service, uow):
    tontine = await _create(tontine_service)
    assert (await tontine_service.activate(tontine.id, INITIATOR)).status == TontineStatus.ACTIVE
    assert (await tontine_service.suspend(tontine.id, INITIATOR)).status == TontineStatus.SUSPENDED
    assert (await tontine_service.resume(tontine.id, INITIATOR)).status == TontineStatus.ACTIVE
    assert (await tontine_service.complete(tontine.id, INITIATOR)).status == TontineStatus.COMPLETED
    assert (await uow.tontines.get(tontine.id)).status == TontineStatus.COMPLETED


async def test_toggle_flips_active_and_suspended(tontine_service):
    tontine = await _create(tontine_service)
    await tontine_service.activate(tontine.id, INITIATOR)
    assert (await tontine_service.toggle(tontine.id, INITIATOR)).status == TontineStatus.SUSPENDED
    assert (await tontine_service.toggle(tontine.id, INITIATOR)).status == TontineStatus.ACTIVE


async def test_toggle_refused_while_pending(tontine_service):
    tontine = await _create(tontine_service)
    with pytest.raises(InvalidStateError):
        await tontine_service.toggle(tontine.id, INITIATOR)


async def test_resume_refused_while_pending(tontine_service, uow):
    tontine = await _create(tontine_service)
    with pytest.raises(InvalidStateError):
        await tontine_service.resume(tontine.id, INITIATOR)
    assert (await uow.tontines.get(tontine.id)).status == TontineStatus.PENDING


async def test_activate_refused_when_suspended(tontine_service):
    tontine = await _create(tontine_service)
    await tontine_service.activate(tontine.id, INITIATOR)
    await tontine_service.suspend(tontine.id, INITIATOR)
    with pytest.raises(InvalidStateError):
        await tontine_service.activate(tontine.id, INITIATOR)


async def test_suspend_refused_while_pending(tontine_service):
    tontine = await _create(tontine_service)
    with pytest.raises(InvalidStateError):
        await tontine_service.suspend(tontine.id, INITIATOR)


async def test_completed_is_terminal(tontine_service):
    tontine = await _create(tontine_service)
    await tontine_service.complete(tontine.id, INITIATOR)
    for transition in (
        tontine_service.activate,
        tontine_service.suspend,
        tontine_service.resume,
        tontine_service.toggle,
        tontine_service.complete,
    ):
        with pytest.raises(InvalidStateError):
            await transition(tontine.id, INITIATOR)


async def test_transition_forbidden_for_non_initiator(tontine_service, uow):
    tontine = await _create(tontine_service)
    with pytest.raises(ForbiddenError):
        await tontine_service.activate(tontine.id, member("p-1"))
    with pytest.raises(ForbiddenError):
        await tontine_service.toggle(tontine.id, member("p-1"))
    assert (await uow.tontines.get(tontine.id)).status == TontineStatus.PENDING


async def test_activation_minimum_roster_policy(uow, settings, locks, roster_service):
    settings.min_participants_to_activate = 2
    service = TontineService(uow, settings, locks)
    tontine = await _create(service)
    await roster_service.join(tontine.id, member("p-1"), profile())
    with pytest.raises(InvalidStateError):
        await service.activate(tontine.id, INITIATOR)
    await roster_service.join(tontine.id, member("p-2"), profile("Binta"))
    assert (await service.activate(tontine.id, INITIATOR)).status == TontineStatus.ACTIVE


async def test_stale_version_raises_conflict(tontine_service, uow, monkeypatch):
    tontine = await _create(tontine_service)

    async def lost_race(*args, **kwargs):
        return False

    monkeypatch.setattr(uow.tontines, "update", lost_race)
    with pytest.raises(ConflictError):
        await tontine_service.activate(tontine.id, INITIATOR)
    assert uow.rollbacks == 1
