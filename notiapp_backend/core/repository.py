"""
Schedule repository
The only component that talks to the remote store. Owns no state: every call goes to the
store, and records are decoded with defaults at this boundary so the engine only ever sees
well-formed Schedule objects.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

from notiapp_backend.core.errors import (
    DocumentNotFoundError,
    ScheduleNotFoundError,
    ValidationError,
)
from notiapp_backend.core.logger import get_logger
from notiapp_backend.core.models import (
    DEFAULT_CATEGORY,
    DEFAULT_PRIORITY,
    DEFAULT_STATUS,
    Category,
    Priority,
    Schedule,
    ScheduleDraft,
    ScheduleStatus,
)
from notiapp_backend.core.protocols import RemoteStoreProtocol

logger = get_logger(__name__)

DEFAULT_COLLECTION = "schedules"

# Owner field name as stored by the mobile app
OWNER_FIELD = "userId"

MISSING_POLICY_IGNORE = "ignore"
MISSING_POLICY_ERROR = "error"
_MISSING_POLICIES = {MISSING_POLICY_IGNORE, MISSING_POLICY_ERROR}

E = TypeVar("E", bound=Enum)


def _decode_enum(enum_cls: Type[E], raw: Any, default: E) -> E:
    try:
        return enum_cls(raw)
    except ValueError:
        return default


def _decode_timestamp(raw: Any) -> Optional[datetime]:
    if isinstance(raw, datetime):
        return raw if raw.tzinfo else raw.replace(tzinfo=timezone.utc)
    if isinstance(raw, str) and raw:
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def decode_schedule(record: Dict[str, Any], now: Optional[datetime] = None) -> Schedule:
    """Tolerant decode of a store record

    Missing priority/status/category fall back to their defaults, missing text fields to
    "", and a missing createdAt to `now` (so incomplete records sort as most recent).
    """
    created_at = _decode_timestamp(record.get("createdAt"))
    if created_at is None:
        created_at = now or datetime.now(timezone.utc)

    return Schedule(
        id=str(record["id"]),
        owner_id=str(record.get(OWNER_FIELD) or ""),
        title=str(record.get("title") or ""),
        description=str(record.get("description") or ""),
        date=str(record.get("date") or ""),
        time=str(record.get("time") or ""),
        priority=_decode_enum(Priority, record.get("priority"), DEFAULT_PRIORITY),
        status=_decode_enum(ScheduleStatus, record.get("status"), DEFAULT_STATUS),
        category=_decode_enum(Category, record.get("category"), DEFAULT_CATEGORY),
        created_at=created_at,
        updated_at=_decode_timestamp(record.get("updatedAt")),
    )


def _encode_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: value.value if isinstance(value, Enum) else value
        for key, value in fields.items()
    }


class ScheduleRepository:
    """Translates engine intents into remote store calls"""

    def __init__(
        self,
        store: RemoteStoreProtocol,
        collection: str = DEFAULT_COLLECTION,
        missing_document_policy: str = MISSING_POLICY_IGNORE,
    ):
        if missing_document_policy not in _MISSING_POLICIES:
            raise ValueError(
                f"Unknown missing_document_policy: {missing_document_policy!r}"
            )
        self.store = store
        self.collection = collection
        self.missing_document_policy = missing_document_policy

    async def fetch_by_owner(self, owner_id: str) -> List[Schedule]:
        """All schedules of an owner, most recently created first"""
        records = await self.store.query(self.collection, {OWNER_FIELD: owner_id})
        now = datetime.now(timezone.utc)
        schedules = [decode_schedule(record, now) for record in records]
        schedules.sort(key=lambda s: s.created_at, reverse=True)
        logger.debug(f"Fetched {len(schedules)} schedules for {owner_id}")
        return schedules

    async def create(self, draft: ScheduleDraft, owner_id: str) -> str:
        """Insert a new schedule; returns the id assigned by the store"""
        if not owner_id:
            raise ValidationError("A schedule needs an owner.", field="ownerId")
        record = draft.to_fields()
        record[OWNER_FIELD] = owner_id
        schedule_id = await self.store.insert(self.collection, record)
        logger.info(f"Created schedule {schedule_id}")
        return schedule_id

    async def update_fields(self, schedule_id: str, fields: Dict[str, Any]) -> None:
        """Merge fields into a schedule (the store refreshes updatedAt)"""
        payload = _encode_fields(fields)
        # id, owner and timestamps are never written by the client
        for key in ("id", OWNER_FIELD, "createdAt", "updatedAt"):
            payload.pop(key, None)
        try:
            await self.store.patch(self.collection, schedule_id, payload)
        except DocumentNotFoundError:
            self._on_missing(schedule_id, "update")
            return
        logger.info(f"Updated schedule {schedule_id}: {sorted(payload)}")

    async def delete(self, schedule_id: str) -> None:
        try:
            await self.store.remove(self.collection, schedule_id)
        except DocumentNotFoundError:
            self._on_missing(schedule_id, "delete")
            return
        logger.info(f"Deleted schedule {schedule_id}")

    def _on_missing(self, schedule_id: str, operation: str) -> None:
        if self.missing_document_policy == MISSING_POLICY_ERROR:
            raise ScheduleNotFoundError()
        logger.info(f"Ignoring {operation} of missing schedule {schedule_id}")
