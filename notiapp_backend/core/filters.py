"""
Schedule list filtering
Pure functions: search -> status -> priority, each order-preserving and conjunctive
"""

from typing import Iterable, List

from notiapp_backend.core.models import FILTER_ALL, Schedule


def matches_search(schedule: Schedule, search_text: str) -> bool:
    """Case-insensitive substring match over title, description and category"""
    if not search_text:
        return True
    needle = search_text.casefold()
    return any(
        needle in haystack.casefold()
        for haystack in (schedule.title, schedule.description, schedule.category.value)
    )


def matches_status(schedule: Schedule, status_filter: str) -> bool:
    return status_filter == FILTER_ALL or schedule.status.value == status_filter


def matches_priority(schedule: Schedule, priority_filter: str) -> bool:
    return priority_filter == FILTER_ALL or schedule.priority.value == priority_filter


def filter_by_search(schedules: Iterable[Schedule], search_text: str) -> List[Schedule]:
    return [s for s in schedules if matches_search(s, search_text)]


def filter_by_status(schedules: Iterable[Schedule], status_filter: str) -> List[Schedule]:
    return [s for s in schedules if matches_status(s, status_filter)]


def filter_by_priority(
    schedules: Iterable[Schedule], priority_filter: str
) -> List[Schedule]:
    return [s for s in schedules if matches_priority(s, priority_filter)]


def filter_schedules(
    schedules: Iterable[Schedule],
    search_text: str = "",
    status_filter: str = FILTER_ALL,
    priority_filter: str = FILTER_ALL,
) -> List[Schedule]:
    """Apply the three filters in sequence (search, status, priority)"""
    filtered = filter_by_search(schedules, search_text)
    filtered = filter_by_status(filtered, status_filter)
    return filter_by_priority(filtered, priority_filter)
