from datetime import date

from notiapp_backend.core.models import (
    LoadState,
    Priority,
    ScheduleStatus,
    ScheduleView,
)

from conftest import make_schedule

TODAY = date(2025, 6, 15)


def test_overdue_is_strictly_before_today():
    assert make_schedule("a", date="2025-06-14").is_overdue(TODAY)
    assert not make_schedule("a", date="2025-06-15").is_overdue(TODAY)
    assert not make_schedule("a", date="2025-06-16").is_overdue(TODAY)


def test_completed_and_undated_schedules_are_never_overdue():
    completed = make_schedule("a", date="2020-01-01", status=ScheduleStatus.COMPLETED)
    assert not completed.is_overdue(TODAY)
    assert not make_schedule("a", date="").is_overdue(TODAY)

    cancelled = make_schedule("a", date="2020-01-01", status=ScheduleStatus.CANCELLED)
    assert cancelled.is_overdue(TODAY)


def test_labels():
    assert Priority.HIGH.label == "High"
    assert ScheduleStatus.IN_PROGRESS.label == "In Progress"
    assert ScheduleStatus.PENDING.label == "Pending"


def test_schedule_to_dict_is_camel_case_with_derived_flags():
    data = make_schedule("a", date="2025-06-01", time="09:00").to_dict(TODAY)
    assert data["id"] == "a"
    assert data["ownerId"] == "u1"
    assert data["priority"] == "medium"
    assert data["statusLabel"] == "Pending"
    assert data["overdue"] is True
    assert data["canMarkDone"] is True
    assert data["updatedAt"] is None


def test_view_count_label_and_empty_hints():
    view = ScheduleView(load_state=LoadState.LOADED, schedules=[make_schedule("a")])
    assert view.count_label == "1 schedule"
    assert view.empty_hint is None

    empty = ScheduleView(load_state=LoadState.LOADED)
    assert empty.count_label == "0 schedules"
    assert empty.empty_hint == "Tap the button below to create your first schedule"

    filtered = ScheduleView(load_state=LoadState.LOADED, search_text="zzz")
    assert filtered.has_active_filters
    assert filtered.empty_hint == "Try adjusting your search or filters"


def test_view_to_dict():
    view = ScheduleView(
        load_state=LoadState.LOADING,
        schedules=[make_schedule("a"), make_schedule("b")],
        total=3,
        priority_filter="high",
    )
    data = view.to_dict(TODAY)
    assert data["loadState"] == "loading"
    assert data["loading"] is True
    assert data["count"] == 2
    assert data["total"] == 3
    assert data["countLabel"] == "2 schedules"
    assert [s["id"] for s in data["schedules"]] == ["a", "b"]
