"""
Error taxonomy
ValidationError (local pre-flight), AuthError (identity provider), RemoteError (document store)
"""

from typing import Dict, Optional, Type


class NotiAppError(Exception):
    """Base class for every error surfaced to the presentation layer"""

    default_message = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ValidationError(NotiAppError):
    """Field-shape failure detected before any network call"""

    default_message = "Invalid input."

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


# ==================== Identity provider ====================


class AuthError(NotiAppError):
    """Identity provider failure"""

    default_message = "Login failed. Please try again."

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class InvalidEmailError(AuthError):
    default_message = "Invalid email format. Please check and try again."


class UserNotFoundError(AuthError):
    default_message = "No account found with this email."


class WrongPasswordError(AuthError):
    default_message = "Incorrect password. Try again."


class MissingPasswordError(AuthError):
    default_message = "Please enter your password."


class WeakPasswordError(AuthError):
    default_message = "Password should be at least 6 characters."


class EmailInUseError(AuthError):
    default_message = "This email is already registered."


class NotAuthenticatedError(AuthError):
    default_message = "You need to be signed in to do that."


# Firebase Identity Toolkit error codes (the part before " : " in error.message)
_AUTH_ERRORS_BY_CODE: Dict[str, Type[AuthError]] = {
    "INVALID_EMAIL": InvalidEmailError,
    "EMAIL_NOT_FOUND": UserNotFoundError,
    "INVALID_PASSWORD": WrongPasswordError,
    "INVALID_LOGIN_CREDENTIALS": WrongPasswordError,
    "MISSING_PASSWORD": MissingPasswordError,
    "WEAK_PASSWORD": WeakPasswordError,
    "EMAIL_EXISTS": EmailInUseError,
}


def auth_error_from_code(code: str) -> AuthError:
    """Build the AuthError subclass matching a provider-reported reason"""
    reason = (code or "").split(":", 1)[0].strip().upper()
    error_cls = _AUTH_ERRORS_BY_CODE.get(reason, AuthError)
    return error_cls(code=reason or None)


# ==================== Remote document store ====================


class RemoteError(NotiAppError):
    """Document store operation failed (network, permission, timeout)"""

    default_message = "Could not reach the server. Please try again."

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DocumentNotFoundError(RemoteError):
    """Raised by a store when patch/remove targets a document that does not exist"""

    default_message = "The document no longer exists."


class ScheduleNotFoundError(DocumentNotFoundError):
    """Raised by the repository when the missing-document policy is "error" """

    default_message = "This schedule no longer exists."
