import asyncio
from datetime import datetime, timezone

import pytest

from notiapp_backend.core.errors import ScheduleNotFoundError, ValidationError
from notiapp_backend.core.models import (
    Category,
    Priority,
    ScheduleDraft,
    ScheduleStatus,
)
from notiapp_backend.core.repository import ScheduleRepository, decode_schedule
from notiapp_backend.stores import InMemoryStore


def test_decode_fills_defaults():
    now = datetime(2025, 1, 1, tzinfo=timezone.utc)
    schedule = decode_schedule(
        {"id": "x", "userId": "u1", "title": "Legacy", "priority": "urgent"}, now
    )
    assert schedule.priority is Priority.MEDIUM
    assert schedule.status is ScheduleStatus.PENDING
    assert schedule.category is Category.GENERAL
    assert schedule.description == ""
    assert schedule.time == ""
    assert schedule.created_at == now
    assert schedule.updated_at is None


def test_decode_parses_iso_timestamps():
    schedule = decode_schedule(
        {"id": "x", "createdAt": "2025-02-03T04:05:06Z", "updatedAt": "2025-02-03T05:00:00"}
    )
    assert schedule.created_at == datetime(2025, 2, 3, 4, 5, 6, tzinfo=timezone.utc)
    assert schedule.updated_at.tzinfo is not None


def test_fetch_by_owner_sorts_newest_first_and_scopes_by_owner():
    store = InMemoryStore()
    store.put_raw("schedules", "old", {"userId": "u1", "title": "Old",
                                       "createdAt": "2025-01-01T00:00:00Z"})
    store.put_raw("schedules", "new", {"userId": "u1", "title": "New",
                                       "createdAt": "2025-03-01T00:00:00Z"})
    store.put_raw("schedules", "mid", {"userId": "u1", "title": "Mid",
                                       "createdAt": "2025-02-01T00:00:00Z"})
    store.put_raw("schedules", "theirs", {"userId": "u2", "title": "Other"})
    repository = ScheduleRepository(store)

    schedules = asyncio.run(repository.fetch_by_owner("u1"))
    assert [s.id for s in schedules] == ["new", "mid", "old"]


def test_create_stamps_owner_and_timestamps():
    store = InMemoryStore()
    repository = ScheduleRepository(store)

    async def scenario():
        schedule_id = await repository.create(
            ScheduleDraft(title="Gym", date="2025-01-01"), "u1"
        )
        return schedule_id, await repository.fetch_by_owner("u1")

    schedule_id, schedules = asyncio.run(scenario())
    assert [s.id for s in schedules] == [schedule_id]
    assert schedules[0].owner_id == "u1"
    assert schedules[0].created_at == schedules[0].updated_at


def test_create_without_owner_is_rejected():
    repository = ScheduleRepository(InMemoryStore())
    with pytest.raises(ValidationError):
        asyncio.run(repository.create(ScheduleDraft(title="Gym", date="2025-01-01"), ""))


def test_update_never_writes_owner_or_created_at():
    store = InMemoryStore()
    repository = ScheduleRepository(store)

    async def scenario():
        schedule_id = await repository.create(
            ScheduleDraft(title="Gym", date="2025-01-01"), "u1"
        )
        before = (await repository.fetch_by_owner("u1"))[0]
        await repository.update_fields(
            schedule_id,
            {"title": "Swim", "userId": "intruder", "createdAt": "1999-01-01",
             "priority": Priority.HIGH},
        )
        after = (await repository.fetch_by_owner("u1"))[0]
        return before, after

    before, after = asyncio.run(scenario())
    assert after.title == "Swim"
    assert after.priority is Priority.HIGH
    assert after.owner_id == "u1"
    assert after.created_at == before.created_at
    assert after.updated_at > before.updated_at


def test_missing_document_is_ignored_by_default():
    repository = ScheduleRepository(InMemoryStore())
    asyncio.run(repository.update_fields("ghost", {"status": "completed"}))
    asyncio.run(repository.delete("ghost"))


def test_missing_document_policy_error():
    repository = ScheduleRepository(InMemoryStore(), missing_document_policy="error")
    with pytest.raises(ScheduleNotFoundError):
        asyncio.run(repository.delete("ghost"))
    with pytest.raises(ScheduleNotFoundError):
        asyncio.run(repository.update_fields("ghost", {"status": "completed"}))


def test_unknown_policy_is_rejected():
    with pytest.raises(ValueError):
        ScheduleRepository(InMemoryStore(), missing_document_policy="retry")
