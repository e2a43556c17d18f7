"""
Schedule field normalization
Turns loosely-typed form input into validated store fields, raising ValidationError
before anything reaches the repository.
"""

from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from notiapp_backend.core.errors import ValidationError
from notiapp_backend.core.models import (
    DEFAULT_CATEGORY,
    DEFAULT_PRIORITY,
    DEFAULT_STATUS,
    MAX_DESCRIPTION_LENGTH,
    MAX_TITLE_LENGTH,
    Category,
    Priority,
    ScheduleDraft,
    ScheduleStatus,
)
from notiapp_backend.core.validators import is_non_empty, is_valid_date, is_valid_time

E = TypeVar("E", bound=Enum)


def normalize_title(value: Any) -> str:
    if not is_non_empty(value):
        raise ValidationError("Title is required.", field="title")
    title = value.strip()
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(
            f"Title must be at most {MAX_TITLE_LENGTH} characters.", field="title"
        )
    return title


def normalize_description(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError("Description must be text.", field="description")
    description = value.strip()
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters.",
            field="description",
        )
    return description


def normalize_date(value: Any, default: Optional[date] = None) -> str:
    """date/datetime/str -> YYYY-MM-DD; empty input uses `default` when given"""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if value is None or (isinstance(value, str) and not value.strip()):
        if default is not None:
            return default.isoformat()
        raise ValidationError("Please enter a date", field="date")
    if isinstance(value, str) and is_valid_date(value.strip()):
        return value.strip()
    raise ValidationError("Please enter date in YYYY-MM-DD format", field="date")


def normalize_time(value: Any) -> str:
    """time/datetime/str -> HH:MM; empty input stays empty"""
    if isinstance(value, (datetime, time)):
        return value.strftime("%H:%M")
    if value is None:
        return ""
    if isinstance(value, str) and is_valid_time(value.strip()):
        return value.strip()
    raise ValidationError("Please enter time in HH:MM format", field="time")


def normalize_choice(enum_cls: Type[E], value: Any, default: E, field: str) -> E:
    if value is None or value == "":
        return default
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(
            f"Unknown {field} {value!r} (expected one of: {allowed})", field=field
        )


def build_draft(fields: Mapping[str, Any], today: Optional[date] = None) -> ScheduleDraft:
    """Fields of a new schedule; a missing date means today, like the add form's picker"""
    return ScheduleDraft(
        title=normalize_title(fields.get("title")),
        description=normalize_description(fields.get("description")),
        date=normalize_date(fields.get("date"), default=today or date.today()),
        time=normalize_time(fields.get("time")),
        priority=normalize_choice(
            Priority, fields.get("priority"), DEFAULT_PRIORITY, "priority"
        ),
        status=normalize_choice(
            ScheduleStatus, fields.get("status"), DEFAULT_STATUS, "status"
        ),
        category=normalize_choice(
            Category, fields.get("category"), DEFAULT_CATEGORY, "category"
        ),
    )


def build_update(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Fields for an edit: title and date are required, the rest only if present"""
    update: Dict[str, Any] = {
        "title": normalize_title(fields.get("title")),
        "date": normalize_date(fields.get("date")),
    }
    if "time" in fields:
        update["time"] = normalize_time(fields["time"])
    if "description" in fields:
        update["description"] = normalize_description(fields["description"])
    if "priority" in fields:
        update["priority"] = normalize_choice(
            Priority, fields["priority"], DEFAULT_PRIORITY, "priority"
        ).value
    if "status" in fields:
        update["status"] = normalize_choice(
            ScheduleStatus, fields["status"], DEFAULT_STATUS, "status"
        ).value
    if "category" in fields:
        update["category"] = normalize_choice(
            Category, fields["category"], DEFAULT_CATEGORY, "category"
        ).value
    return update
