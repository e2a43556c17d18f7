"""
Type protocols for the external collaborators

This module provides Protocol classes that define the interfaces of the identity provider
and the remote document store. The session, repository and engine depend only on these,
so the Firebase and in-memory implementations are interchangeable.
"""

from typing import Any, Callable, Dict, List, Optional, Protocol

from notiapp_backend.core.models import User

# Called with the current identity, or None when signed out
AuthStateCallback = Callable[[Optional[User]], None]

# Calling it cancels the subscription
Unsubscribe = Callable[[], None]


# ==================== Identity Provider Protocol ====================


class IdentityProviderProtocol(Protocol):
    """Protocol for identity provider operations

    All failures are raised as AuthError (or a subclass of it).
    """

    def subscribe(self, callback: AuthStateCallback) -> Unsubscribe:
        """Register for auth state changes; the current state is delivered first"""
        ...

    async def sign_up(self, email: str, password: str) -> User:
        """Create an account and sign it in"""
        ...

    async def sign_in(self, email: str, password: str) -> User:
        """Sign in with email and password"""
        ...

    async def sign_out(self) -> None:
        """Sign the current user out"""
        ...


# ==================== Remote Store Protocol ====================


class RemoteStoreProtocol(Protocol):
    """Protocol for document store operations

    Records are plain dicts in wire form (camelCase keys, timestamps as datetime).
    All failures are raised as RemoteError; patch/remove of an unknown id raise
    DocumentNotFoundError.
    """

    async def query(
        self, collection: str, filters: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        """Return every record whose fields equal all filter values, each with its "id" """
        ...

    async def insert(self, collection: str, record: Dict[str, Any]) -> str:
        """Insert a record; the store assigns id, createdAt and updatedAt"""
        ...

    async def patch(
        self, collection: str, record_id: str, fields: Dict[str, Any]
    ) -> None:
        """Merge fields into an existing record and refresh updatedAt"""
        ...

    async def remove(self, collection: str, record_id: str) -> None:
        """Delete a record"""
        ...
