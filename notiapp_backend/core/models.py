"""
Data model definitions
Contains core data models like Schedule, ScheduleDraft and the session user
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional


class Priority(Enum):
    """Schedule priority enumeration"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class ScheduleStatus(Enum):
    """Schedule status enumeration (any status may follow any other)"""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def label(self) -> str:
        return self.value.replace("-", " ").title()


class Category(Enum):
    """Fixed schedule category labels"""

    GENERAL = "general"
    WORK = "work"
    PERSONAL = "personal"
    HEALTH = "health"
    EDUCATION = "education"
    FAMILY = "family"
    TRAVEL = "travel"
    SHOPPING = "shopping"

    @property
    def label(self) -> str:
        return self.value.capitalize()


DEFAULT_PRIORITY = Priority.MEDIUM
DEFAULT_STATUS = ScheduleStatus.PENDING
DEFAULT_CATEGORY = Category.GENERAL

MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500

# Filter value meaning "no filtering" for the status and priority selectors
FILTER_ALL = "all"


class LoadState(Enum):
    """Schedule list load cycle state"""

    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass
class User:
    """Signed-in identity as reported by the identity provider"""

    id: str
    email: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "email": self.email}


@dataclass
class ScheduleDraft:
    """Editable schedule fields, already normalized (date YYYY-MM-DD, time HH:MM or empty)"""

    title: str
    date: str
    time: str = ""
    description: str = ""
    priority: Priority = DEFAULT_PRIORITY
    status: ScheduleStatus = DEFAULT_STATUS
    category: Category = DEFAULT_CATEGORY

    def to_fields(self) -> Dict[str, Any]:
        """Field mapping in store (wire) form"""
        return {
            "title": self.title,
            "description": self.description,
            "date": self.date,
            "time": self.time,
            "priority": self.priority.value,
            "status": self.status.value,
            "category": self.category.value,
        }


@dataclass
class Schedule:
    """Schedule data model, as decoded from the document store"""

    id: str
    owner_id: str
    title: str
    date: str
    created_at: datetime
    time: str = ""
    description: str = ""
    priority: Priority = DEFAULT_PRIORITY
    status: ScheduleStatus = DEFAULT_STATUS
    category: Category = DEFAULT_CATEGORY
    updated_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status is ScheduleStatus.COMPLETED

    def is_overdue(self, today: Optional[date] = None) -> bool:
        """Date strictly before today and not completed; never stored"""
        if not self.date or self.is_completed:
            return False
        today = today or date.today()
        # Lexicographic order of YYYY-MM-DD equals calendar order
        return self.date < today.isoformat()

    def to_dict(self, today: Optional[date] = None) -> Dict[str, Any]:
        """Convert to dictionary (camelCase, for the presentation layer)"""
        return {
            "id": self.id,
            "ownerId": self.owner_id,
            "title": self.title,
            "description": self.description,
            "date": self.date,
            "time": self.time,
            "priority": self.priority.value,
            "priorityLabel": self.priority.label,
            "status": self.status.value,
            "statusLabel": self.status.label,
            "category": self.category.value,
            "categoryLabel": self.category.label,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
            "overdue": self.is_overdue(today),
            "completed": self.is_completed,
            "canMarkDone": not self.is_completed,
        }


@dataclass
class ScheduleView:
    """Read-only projection of the engine state consumed by the presentation layer"""

    load_state: LoadState
    schedules: list = field(default_factory=list)
    total: int = 0
    search_text: str = ""
    status_filter: str = FILTER_ALL
    priority_filter: str = FILTER_ALL
    error: Optional[str] = None
    last_error: Optional[str] = None

    @property
    def loading(self) -> bool:
        return self.load_state is LoadState.LOADING

    @property
    def count(self) -> int:
        return len(self.schedules)

    @property
    def count_label(self) -> str:
        return f"{self.count} schedule{'' if self.count == 1 else 's'}"

    @property
    def has_active_filters(self) -> bool:
        return bool(
            self.search_text
            or self.status_filter != FILTER_ALL
            or self.priority_filter != FILTER_ALL
        )

    @property
    def empty_hint(self) -> Optional[str]:
        if self.schedules:
            return None
        if self.has_active_filters:
            return "Try adjusting your search or filters"
        return "Tap the button below to create your first schedule"

    def to_dict(self, today: Optional[date] = None) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "loadState": self.load_state.value,
            "loading": self.loading,
            "error": self.error,
            "lastError": self.last_error,
            "searchText": self.search_text,
            "statusFilter": self.status_filter,
            "priorityFilter": self.priority_filter,
            "total": self.total,
            "count": self.count,
            "countLabel": self.count_label,
            "hasActiveFilters": self.has_active_filters,
            "emptyHint": self.empty_hint,
            "schedules": [schedule.to_dict(today) for schedule in self.schedules],
        }
