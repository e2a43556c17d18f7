"""
Session context
Holds the current identity and the loading flag, and broadcasts changes to listeners.
Owns the subscription to the identity provider for its whole lifetime (start -> stop).
"""

from typing import Callable, List, Optional

from notiapp_backend.core.errors import AuthError, ValidationError
from notiapp_backend.core.logger import get_logger
from notiapp_backend.core.models import User
from notiapp_backend.core.protocols import IdentityProviderProtocol, Unsubscribe
from notiapp_backend.core.validators import (
    is_non_empty,
    is_valid_email,
    is_valid_password,
)

logger = get_logger(__name__)

SessionListener = Callable[["SessionContext"], None]


class SessionContext:
    """Current user + loading flag, fed by identity provider notifications"""

    def __init__(self, provider: IdentityProviderProtocol):
        self.provider = provider
        self.current_user: Optional[User] = None
        self.loading = True
        self.fatal_error: Optional[str] = None
        self._unsubscribe: Optional[Unsubscribe] = None
        self._listeners: List[SessionListener] = []

    @property
    def user_id(self) -> Optional[str]:
        return self.current_user.id if self.current_user else None

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    def add_listener(self, listener: SessionListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def start(self) -> None:
        """Subscribe to the identity provider

        A failure here is fatal to the session: loading stays True and the error
        is kept in fatal_error for the presentation layer, then re-raised.
        """
        if self._unsubscribe is not None:
            logger.warning("Session already started")
            return

        self.loading = True
        self.current_user = None
        try:
            self._unsubscribe = self.provider.subscribe(self._on_auth_state)
        except AuthError as e:
            self.fatal_error = e.message
            logger.error(f"Identity provider subscription failed: {e.message}")
            raise
        logger.info("✓ Session started")

    def stop(self) -> None:
        """Unsubscribe from the identity provider (process teardown)"""
        if self._unsubscribe is None:
            return
        self._unsubscribe()
        self._unsubscribe = None
        logger.info("Session stopped")

    def _on_auth_state(self, user: Optional[User]) -> None:
        previous = self.user_id
        self.current_user = user
        self.loading = False

        if previous != self.user_id:
            logger.info(f"Auth state changed: {previous} -> {self.user_id}")

        for listener in list(self._listeners):
            listener(self)

    async def sign_in(self, email: str, password: str) -> User:
        """Sign in; the provider notification then updates current_user"""
        email = (email or "").strip()
        if not is_valid_email(email):
            raise ValidationError(
                "Invalid email format. Please check and try again.", field="email"
            )
        if not is_non_empty(password):
            raise ValidationError("Please enter your password.", field="password")

        user = await self.provider.sign_in(email, password)
        logger.info(f"Signed in: {user.id}")
        return user

    async def sign_up(self, email: str, password: str) -> User:
        """Create an account; providers sign the new account in right away"""
        email = (email or "").strip()
        if not is_valid_email(email):
            raise ValidationError("Please enter a valid email address.", field="email")
        if not is_valid_password(password):
            raise ValidationError(
                "Password should be at least 6 characters.", field="password"
            )

        user = await self.provider.sign_up(email, password)
        logger.info(f"Account created: {user.id}")
        return user

    async def sign_out(self) -> None:
        """Sign out; on failure the AuthError propagates and local state is unchanged"""
        await self.provider.sign_out()
        logger.info("Signed out")

    def to_dict(self) -> dict:
        return {
            "loading": self.loading,
            "currentUser": self.current_user.to_dict() if self.current_user else None,
            "fatalError": self.fatal_error,
        }
