"""
Schedule state engine
Single owner of the signed-in user's schedule list and every piece of view state derived
from it. Mutations are never applied locally: each one is validated, sent to the
repository and, on success, followed by a full re-fetch.

Fetches are tagged with a monotonically increasing sequence number. Only the most recently
initiated fetch may commit its outcome; results of older fetches are dropped when they
arrive (in-flight requests are not cancelled).
"""

import asyncio
from datetime import date
from typing import Any, Callable, List, Mapping, Optional, Set

from notiapp_backend.core.drafts import build_draft, build_update
from notiapp_backend.core.errors import (
    NotAuthenticatedError,
    NotiAppError,
    RemoteError,
    ValidationError,
)
from notiapp_backend.core.filters import filter_schedules
from notiapp_backend.core.logger import get_logger
from notiapp_backend.core.models import (
    FILTER_ALL,
    LoadState,
    Priority,
    Schedule,
    ScheduleStatus,
    ScheduleView,
)
from notiapp_backend.core.repository import ScheduleRepository
from notiapp_backend.core.session import SessionContext
from notiapp_backend.core.validators import is_non_empty

logger = get_logger(__name__)

EngineListener = Callable[["ScheduleEngine"], None]

STATUS_FILTERS = {FILTER_ALL} | {status.value for status in ScheduleStatus}
PRIORITY_FILTERS = {FILTER_ALL} | {priority.value for priority in Priority}


class ScheduleEngine:
    """Schedule list state machine: IDLE -> LOADING -> LOADED | FAILED"""

    def __init__(self, repository: ScheduleRepository, session: SessionContext):
        self.repository = repository
        self.session = session

        self.load_state = LoadState.IDLE
        self.raw_schedules: List[Schedule] = []
        self.filtered_schedules: List[Schedule] = []
        self.search_text = ""
        self.status_filter = FILTER_ALL
        self.priority_filter = FILTER_ALL

        # Load failure (cleared by the next committed fetch)
        self.error: Optional[str] = None
        # Last failed mutation (cleared by the next successful one)
        self.last_error: Optional[str] = None

        self._fetch_seq = 0
        self._owner_id: Optional[str] = None
        self._tasks: Set[asyncio.Task] = set()
        self._listeners: List[EngineListener] = []

    # ------------------------------------------------------------------
    # Session wiring
    # ------------------------------------------------------------------
    def bind(self) -> None:
        """Follow the session: fetch on sign-in, reset on sign-out"""
        self.session.add_listener(self._on_session_change)
        if not self.session.loading:
            self._on_session_change(self.session)

    def unbind(self) -> None:
        self.session.remove_listener(self._on_session_change)

    def _on_session_change(self, session: SessionContext) -> None:
        if session.loading or session.user_id == self._owner_id:
            return

        self._owner_id = session.user_id
        self._reset()
        if self._owner_id is not None:
            self._spawn_refresh()

    def _reset(self) -> None:
        # Invalidate any fetch still in flight for the previous user
        self._fetch_seq += 1
        self.load_state = LoadState.IDLE
        self.raw_schedules = []
        self.error = None
        self.last_error = None
        self._recompute()
        self._notify()

    def _spawn_refresh(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, fetch deferred until refresh()")
            return
        task = loop.create_task(self._refresh_if_signed_in())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _refresh_if_signed_in(self) -> None:
        # The user may have signed out before this task got to run
        if self.session.user_id is None:
            return
        await self.refresh()

    async def drain(self) -> None:
        """Wait for session-triggered fetches still running"""
        pending = [task for task in self._tasks if not task.done()]
        while pending:
            await asyncio.gather(*pending, return_exceptions=True)
            pending = [task for task in self._tasks if not task.done()]

    # ------------------------------------------------------------------
    # Load cycle
    # ------------------------------------------------------------------
    def _require_owner(self) -> str:
        owner_id = self.session.user_id
        if owner_id is None:
            raise NotAuthenticatedError()
        return owner_id

    def _is_latest(self, seq: int, owner_id: str) -> bool:
        return seq == self._fetch_seq and owner_id == self.session.user_id

    async def refresh(self) -> bool:
        """Fetch the owner's schedules; returns True if this fetch committed"""
        owner_id = self._require_owner()
        self._owner_id = owner_id
        self._fetch_seq += 1
        seq = self._fetch_seq

        self.load_state = LoadState.LOADING
        logger.debug(f"Fetch #{seq} started for {owner_id}")
        self._notify()

        try:
            schedules = await self.repository.fetch_by_owner(owner_id)
        except RemoteError as e:
            if not self._is_latest(seq, owner_id):
                logger.info(f"Discarding failure of stale fetch #{seq}: {e.message}")
                return False
            self.load_state = LoadState.FAILED
            self.error = e.message
            logger.error(f"Fetch #{seq} failed: {e.message}")
            self._notify()
            return False

        if not self._is_latest(seq, owner_id):
            logger.info(
                f"Discarding stale fetch #{seq} (latest is #{self._fetch_seq})"
            )
            return False

        self.raw_schedules = schedules
        self.load_state = LoadState.LOADED
        self.error = None
        self._recompute()
        logger.info(f"Fetch #{seq} committed: {len(schedules)} schedules")
        self._notify()
        return True

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    async def add_schedule(
        self, fields: Mapping[str, Any], today: Optional[date] = None
    ) -> str:
        """Create a schedule for the signed-in user; returns its id"""
        draft = build_draft(fields, today=today)
        owner_id = self._require_owner()
        try:
            schedule_id = await self.repository.create(draft, owner_id)
        except NotiAppError as e:
            self._mutation_failed("add", e)
            raise
        await self._mutation_succeeded("add", schedule_id)
        return schedule_id

    async def update_schedule(self, schedule_id: str, fields: Mapping[str, Any]) -> None:
        """Replace the editable fields of a schedule"""
        self._require_id(schedule_id)
        update = build_update(fields)
        self._require_owner()
        try:
            await self.repository.update_fields(schedule_id, update)
        except NotiAppError as e:
            self._mutation_failed("update", e)
            raise
        await self._mutation_succeeded("update", schedule_id)

    async def mark_completed(self, schedule_id: str) -> None:
        """Move a schedule into `completed`, whatever its current status"""
        self._require_id(schedule_id)
        self._require_owner()
        try:
            await self.repository.update_fields(
                schedule_id, {"status": ScheduleStatus.COMPLETED}
            )
        except NotiAppError as e:
            self._mutation_failed("complete", e)
            raise
        await self._mutation_succeeded("complete", schedule_id)

    async def delete_schedule(self, schedule_id: str) -> None:
        self._require_id(schedule_id)
        self._require_owner()
        try:
            await self.repository.delete(schedule_id)
        except NotiAppError as e:
            self._mutation_failed("delete", e)
            raise
        await self._mutation_succeeded("delete", schedule_id)

    def _require_id(self, schedule_id: str) -> None:
        if not is_non_empty(schedule_id):
            raise ValidationError("Missing schedule id.", field="id")

    def _mutation_failed(self, operation: str, error: NotiAppError) -> None:
        self.last_error = error.message
        logger.error(f"Failed to {operation} schedule: {error.message}")
        self._notify()

    async def _mutation_succeeded(self, operation: str, schedule_id: str) -> None:
        self.last_error = None
        if self.session.user_id is None:
            logger.info(
                f"✓ {operation} {schedule_id} confirmed after sign-out, no re-fetch"
            )
            self._notify()
            return
        logger.info(f"✓ {operation} {schedule_id} confirmed, re-fetching")
        await self.refresh()

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------
    def set_search_text(self, text: Optional[str]) -> None:
        self.search_text = text or ""
        self._recompute()
        self._notify()

    def set_status_filter(self, value: str) -> None:
        if value not in STATUS_FILTERS:
            raise ValidationError(f"Unknown status filter: {value!r}", field="status")
        self.status_filter = value
        self._recompute()
        self._notify()

    def set_priority_filter(self, value: str) -> None:
        if value not in PRIORITY_FILTERS:
            raise ValidationError(
                f"Unknown priority filter: {value!r}", field="priority"
            )
        self.priority_filter = value
        self._recompute()
        self._notify()

    def _recompute(self) -> None:
        self.filtered_schedules = filter_schedules(
            self.raw_schedules,
            self.search_text,
            self.status_filter,
            self.priority_filter,
        )

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------
    def view(self) -> ScheduleView:
        return ScheduleView(
            load_state=self.load_state,
            schedules=list(self.filtered_schedules),
            total=len(self.raw_schedules),
            search_text=self.search_text,
            status_filter=self.status_filter,
            priority_filter=self.priority_filter,
            error=self.error,
            last_error=self.last_error,
        )

    def get_schedule(self, schedule_id: str) -> Optional[Schedule]:
        for schedule in self.raw_schedules:
            if schedule.id == schedule_id:
                return schedule
        return None

    def add_listener(self, listener: EngineListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: EngineListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                logger.error(f"Engine listener failed: {e}", exc_info=True)
