from datetime import date, datetime, time

import pytest

from notiapp_backend.core.drafts import build_draft, build_update, normalize_time
from notiapp_backend.core.errors import ValidationError
from notiapp_backend.core.models import Category, Priority, ScheduleStatus


def test_draft_defaults():
    draft = build_draft({"title": "  Pay rent  "}, today=date(2025, 3, 1))
    assert draft.title == "Pay rent"
    assert draft.date == "2025-03-01"
    assert draft.time == ""
    assert draft.priority is Priority.MEDIUM
    assert draft.status is ScheduleStatus.PENDING
    assert draft.category is Category.GENERAL


def test_draft_accepts_date_and_time_objects():
    draft = build_draft(
        {"title": "Call", "date": date(2025, 3, 2), "time": time(7, 5), "priority": "high"}
    )
    assert draft.date == "2025-03-02"
    assert draft.time == "07:05"
    assert draft.priority is Priority.HIGH
    assert normalize_time(datetime(2025, 3, 2, 18, 30)) == "18:30"


@pytest.mark.parametrize(
    "fields, field",
    [
        ({"title": ""}, "title"),
        ({"title": "   "}, "title"),
        ({"title": "x" * 101}, "title"),
        ({"title": "ok", "date": "03/02/2025"}, "date"),
        ({"title": "ok", "time": "7pm"}, "time"),
        ({"title": "ok", "priority": "urgent"}, "priority"),
        ({"title": "ok", "category": "sports"}, "category"),
        ({"title": "ok", "description": "d" * 501}, "description"),
    ],
)
def test_draft_rejects_bad_fields(fields, field):
    with pytest.raises(ValidationError) as excinfo:
        build_draft(fields)
    assert excinfo.value.field == field


def test_update_requires_title_and_date():
    with pytest.raises(ValidationError) as excinfo:
        build_update({"title": "Edited"})
    assert excinfo.value.message == "Please enter a date"

    with pytest.raises(ValidationError):
        build_update({"title": "", "date": "2025-01-01"})


def test_update_only_includes_given_fields():
    update = build_update({"title": "Edited", "date": "2025-01-01", "status": "in-progress"})
    assert update == {"title": "Edited", "date": "2025-01-01", "status": "in-progress"}

    update = build_update({"title": "Edited", "date": "2025-01-01", "time": ""})
    assert update["time"] == ""
