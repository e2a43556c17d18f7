"""
In-memory collaborators
Process-local identity provider and document store with the same contracts as the Firebase
ones. Used with `remote.backend = "memory"` and by the test suite.
"""

import asyncio
import copy
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from notiapp_backend.core.errors import (
    DocumentNotFoundError,
    EmailInUseError,
    InvalidEmailError,
    MissingPasswordError,
    UserNotFoundError,
    WeakPasswordError,
    WrongPasswordError,
)
from notiapp_backend.core.logger import get_logger
from notiapp_backend.core.models import User
from notiapp_backend.core.protocols import AuthStateCallback, Unsubscribe
from notiapp_backend.core.validators import is_valid_email, is_valid_password

logger = get_logger(__name__)


class InMemoryAuthProvider:
    """Email/password accounts kept in a dict"""

    def __init__(self):
        self.current_user: Optional[User] = None
        self._accounts: Dict[str, Tuple[str, str]] = {}
        self._subscribers: List[AuthStateCallback] = []

    def subscribe(self, callback: AuthStateCallback) -> Unsubscribe:
        self._subscribers.append(callback)
        callback(self.current_user)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            callback(self.current_user)

    async def sign_up(self, email: str, password: str) -> User:
        await asyncio.sleep(0)
        if not is_valid_email(email):
            raise InvalidEmailError(code="INVALID_EMAIL")
        if email.lower() in self._accounts:
            raise EmailInUseError(code="EMAIL_EXISTS")
        if not is_valid_password(password):
            raise WeakPasswordError(code="WEAK_PASSWORD")

        user_id = uuid.uuid4().hex[:28]
        self._accounts[email.lower()] = (user_id, password)
        self.current_user = User(id=user_id, email=email)
        self._notify()
        return self.current_user

    async def sign_in(self, email: str, password: str) -> User:
        await asyncio.sleep(0)
        if not is_valid_email(email):
            raise InvalidEmailError(code="INVALID_EMAIL")
        if not password:
            raise MissingPasswordError(code="MISSING_PASSWORD")
        account = self._accounts.get(email.lower())
        if account is None:
            raise UserNotFoundError(code="EMAIL_NOT_FOUND")
        user_id, expected = account
        if password != expected:
            raise WrongPasswordError(code="INVALID_PASSWORD")

        self.current_user = User(id=user_id, email=email)
        self._notify()
        return self.current_user

    async def sign_out(self) -> None:
        await asyncio.sleep(0)
        self.current_user = None
        self._notify()


class InMemoryStore:
    """Collections of dict records; assigns ids and timestamps like a server would"""

    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._last_timestamp: Optional[datetime] = None

    def _now(self) -> datetime:
        # Strictly increasing, so every write gets a newer updatedAt
        now = datetime.now(timezone.utc)
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return now

    def _collection(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(name, {})

    def put_raw(self, collection: str, record_id: str, record: Dict[str, Any]) -> None:
        """Store a record exactly as given (no timestamps), e.g. legacy documents"""
        self._collection(collection)[record_id] = copy.deepcopy(record)

    async def query(
        self, collection: str, filters: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        await asyncio.sleep(0)
        results = []
        for record_id, record in self._collection(collection).items():
            if all(record.get(field) == value for field, value in filters.items()):
                results.append({**copy.deepcopy(record), "id": record_id})
        return results

    async def insert(self, collection: str, record: Dict[str, Any]) -> str:
        await asyncio.sleep(0)
        record_id = uuid.uuid4().hex[:20]
        now = self._now()
        stored = copy.deepcopy(record)
        stored.pop("id", None)
        stored["createdAt"] = now
        stored["updatedAt"] = now
        self._collection(collection)[record_id] = stored
        return record_id

    async def patch(
        self, collection: str, record_id: str, fields: Dict[str, Any]
    ) -> None:
        await asyncio.sleep(0)
        records = self._collection(collection)
        if record_id not in records:
            raise DocumentNotFoundError()
        records[record_id].update(copy.deepcopy(fields))
        records[record_id]["updatedAt"] = self._now()

    async def remove(self, collection: str, record_id: str) -> None:
        await asyncio.sleep(0)
        records = self._collection(collection)
        if record_id not in records:
            raise DocumentNotFoundError()
        del records[record_id]
