import itertools

from notiapp_backend.core.filters import (
    filter_by_priority,
    filter_by_search,
    filter_by_status,
    filter_schedules,
)
from notiapp_backend.core.models import Category, Priority, ScheduleStatus

from conftest import make_schedule


def _schedules():
    return [
        make_schedule(
            "a",
            title="Dentist",
            description="Annual check-up",
            category=Category.HEALTH,
            priority=Priority.HIGH,
        ),
        make_schedule(
            "b",
            title="Team meeting",
            category=Category.WORK,
            status=ScheduleStatus.COMPLETED,
        ),
        make_schedule(
            "c",
            title="Groceries",
            description="Milk and eggs for the MEETING snack",
            category=Category.SHOPPING,
            priority=Priority.LOW,
        ),
        make_schedule("d", title="Flight", category=Category.TRAVEL, priority=Priority.HIGH),
    ]


def _ids(schedules):
    return [s.id for s in schedules]


def test_empty_filters_return_everything_in_order():
    schedules = _schedules()
    assert _ids(filter_schedules(schedules)) == ["a", "b", "c", "d"]


def test_search_is_case_insensitive_over_title_description_category():
    schedules = _schedules()
    assert _ids(filter_by_search(schedules, "meeting")) == ["b", "c"]
    assert _ids(filter_by_search(schedules, "HEALTH")) == ["a"]
    assert _ids(filter_by_search(schedules, "check")) == ["a"]
    assert _ids(filter_by_search(schedules, "nothing like this")) == []


def test_status_and_priority_filters():
    schedules = _schedules()
    assert _ids(filter_by_status(schedules, "completed")) == ["b"]
    assert _ids(filter_by_status(schedules, "pending")) == ["a", "c", "d"]
    assert _ids(filter_by_priority(schedules, "high")) == ["a", "d"]
    assert _ids(filter_by_priority(schedules, "all")) == ["a", "b", "c", "d"]


def test_filters_combine_conjunctively():
    result = filter_schedules(_schedules(), "e", "pending", "high")
    assert _ids(result) == ["a", "d"]


def test_result_is_an_ordered_subset():
    schedules = _schedules()
    for search, status, priority in itertools.product(
        ["", "e", "meeting"], ["all", "pending", "completed"], ["all", "high", "low"]
    ):
        result = filter_schedules(schedules, search, status, priority)
        assert all(s in schedules for s in result)
        positions = [schedules.index(s) for s in result]
        assert positions == sorted(positions)


def test_filtering_is_idempotent_and_order_independent():
    schedules = _schedules()
    once = filter_schedules(schedules, "e", "pending", "high")
    assert filter_schedules(once, "e", "pending", "high") == once

    other_order = filter_by_search(
        filter_by_status(filter_by_priority(schedules, "high"), "pending"), "e"
    )
    assert other_order == once
