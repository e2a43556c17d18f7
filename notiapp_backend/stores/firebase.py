"""
Firebase REST collaborators
FirebaseAuthProvider talks to the Identity Toolkit API, FirestoreStore to the Firestore v1 REST API.
Both open a short-lived httpx.AsyncClient per request; timeouts come from httpx.Timeout.
"""

import re
import secrets
import string
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from notiapp_backend.core.errors import (
    AuthError,
    DocumentNotFoundError,
    RemoteError,
    auth_error_from_code,
)
from notiapp_backend.core.logger import get_logger
from notiapp_backend.core.models import User
from notiapp_backend.core.protocols import AuthStateCallback, Unsubscribe

logger = get_logger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"
SECURE_TOKEN_URL = "https://securetoken.googleapis.com/v1/token"
FIRESTORE_URL = "https://firestore.googleapis.com/v1"

# Refresh the ID token this many seconds before it expires
TOKEN_EXPIRY_MARGIN = 60

TokenProvider = Callable[[], Awaitable[Optional[str]]]


def _error_reason(response: httpx.Response) -> str:
    """Extract error.message (Identity Toolkit) or error.status (Firestore) from a response"""
    try:
        payload = response.json()
    except ValueError:
        return ""
    # runQuery reports errors as a one-element list
    if isinstance(payload, list):
        payload = payload[0] if payload else {}
    if not isinstance(payload, dict):
        return ""
    error = payload.get("error", {})
    if isinstance(error, dict):
        return str(error.get("message") or error.get("status") or "")
    return str(error)


# ==================== Identity provider ====================


class FirebaseAuthProvider:
    """Email/password authentication against Firebase Auth"""

    def __init__(
        self,
        api_key: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.timeout = httpx.Timeout(timeout)
        self._transport = transport
        self.current_user: Optional[User] = None
        self._id_token: Optional[str] = None
        self._refresh_token: Optional[str] = None
        self._expires_at = 0.0
        self._subscribers: List[AuthStateCallback] = []

    def subscribe(self, callback: AuthStateCallback) -> Unsubscribe:
        if not self.api_key:
            raise AuthError(
                "Firebase API key is not configured.", code="CONFIGURATION_NOT_FOUND"
            )
        self._subscribers.append(callback)
        # No persisted credentials: the first state is always "signed out"
        callback(self.current_user)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            callback(self.current_user)

    async def _post(
        self, url: str, payload: Dict[str, Any], form: bool = False
    ) -> Dict[str, Any]:
        body = {"data": payload} if form else {"json": payload}
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(url, params={"key": self.api_key}, **body)
        except httpx.TimeoutException as exc:
            logger.error(f"Auth request timed out: {exc}")
            raise AuthError(
                "The request timed out. Please try again.", code="TIMEOUT"
            ) from exc
        except httpx.RequestError as exc:
            logger.error(f"Auth request failed: {exc}")
            raise AuthError(
                "Network error. Please check your connection.",
                code="NETWORK_REQUEST_FAILED",
            ) from exc

        if response.status_code >= 400:
            reason = _error_reason(response)
            logger.warning(f"Auth request rejected ({response.status_code}): {reason}")
            raise auth_error_from_code(reason)
        return response.json()

    def _accept_credentials(self, data: Dict[str, Any], email: Optional[str]) -> User:
        self._id_token = data.get("idToken") or data.get("id_token")
        self._refresh_token = data.get("refreshToken") or data.get("refresh_token")
        expires_in = float(data.get("expiresIn") or data.get("expires_in") or 3600)
        self._expires_at = time.monotonic() + expires_in
        user_id = data.get("localId") or data.get("user_id")
        if not user_id:
            raise AuthError("Unexpected response from the identity provider.")
        return User(id=str(user_id), email=data.get("email") or email)

    async def sign_up(self, email: str, password: str) -> User:
        data = await self._post(
            f"{IDENTITY_TOOLKIT_URL}/accounts:signUp",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        self.current_user = self._accept_credentials(data, email)
        self._notify()
        return self.current_user

    async def sign_in(self, email: str, password: str) -> User:
        data = await self._post(
            f"{IDENTITY_TOOLKIT_URL}/accounts:signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        self.current_user = self._accept_credentials(data, email)
        self._notify()
        return self.current_user

    async def sign_out(self) -> None:
        # ID tokens are stateless; dropping them locally is the whole sign-out
        self._id_token = None
        self._refresh_token = None
        self._expires_at = 0.0
        self.current_user = None
        self._notify()

    async def get_id_token(self) -> Optional[str]:
        """Current ID token, refreshed through the secure token API when close to expiry"""
        if self._id_token is None:
            return None
        if time.monotonic() < self._expires_at - TOKEN_EXPIRY_MARGIN:
            return self._id_token
        if not self._refresh_token:
            return self._id_token

        logger.debug("Refreshing Firebase ID token")
        data = await self._post(
            SECURE_TOKEN_URL,
            {"grant_type": "refresh_token", "refresh_token": self._refresh_token},
            form=True,
        )
        email = self.current_user.email if self.current_user else None
        self._accept_credentials(data, email)
        return self._id_token


# ==================== Firestore value codec ====================

_FRACTION_RE = re.compile(r"\.(\d+)")


def _parse_timestamp(value: str) -> datetime:
    # Firestore returns up to nanosecond precision; datetime keeps microseconds
    value = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def _format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def encode_value(value: Any) -> Dict[str, Any]:
    """Python value -> Firestore Value"""
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, datetime):
        return {"timestampValue": _format_timestamp(value)}
    if isinstance(value, dict):
        return {"mapValue": {"fields": encode_fields(value)}}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(item) for item in value]}}
    return {"stringValue": str(value)}


def encode_fields(record: Dict[str, Any]) -> Dict[str, Any]:
    return {key: encode_value(value) for key, value in record.items()}


def decode_value(value: Dict[str, Any]) -> Any:
    """Firestore Value -> Python value"""
    if "stringValue" in value:
        return value["stringValue"]
    if "timestampValue" in value:
        return _parse_timestamp(value["timestampValue"])
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    if "arrayValue" in value:
        return [decode_value(item) for item in value["arrayValue"].get("values", [])]
    return None


def decode_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {key: decode_value(value) for key, value in fields.items()}


def decode_document(document: Dict[str, Any]) -> Dict[str, Any]:
    record = decode_fields(document.get("fields", {}))
    record["id"] = document["name"].rsplit("/", 1)[-1]
    return record


def auto_id() -> str:
    """20-character random document id, same alphabet as Firestore's client SDKs"""
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(20))


# ==================== Document store ====================


class FirestoreStore:
    """Firestore REST document store

    createdAt/updatedAt are set with REQUEST_TIME server transforms, so timestamps
    always come from the server clock.
    """

    def __init__(
        self,
        project_id: str,
        token_provider: Optional[TokenProvider] = None,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.project_id = project_id
        self.token_provider = token_provider
        self.timeout = httpx.Timeout(timeout)
        self._transport = transport

    @property
    def documents_path(self) -> str:
        return f"projects/{self.project_id}/databases/(default)/documents"

    def _document_name(self, collection: str, record_id: str) -> str:
        return f"{self.documents_path}/{collection}/{record_id}"

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Any] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        if not self.project_id:
            raise RemoteError("Firestore project id is not configured.")

        headers = {"Content-Type": "application/json"}
        if self.token_provider is not None:
            try:
                token = await self.token_provider()
            except AuthError as exc:
                raise RemoteError(exc.message) from exc
            if token:
                headers["Authorization"] = f"Bearer {token}"

        url = f"{FIRESTORE_URL}/{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.request(
                    method, url, headers=headers, json=json, params=params
                )
        except httpx.TimeoutException as exc:
            logger.error(f"Firestore {method} timed out: {exc}")
            raise RemoteError("The request timed out. Please try again.") from exc
        except httpx.RequestError as exc:
            logger.error(f"Firestore {method} failed: {exc}")
            raise RemoteError("Network error. Please check your connection.") from exc

        if response.status_code < 400:
            return response

        reason = _error_reason(response)
        logger.warning(f"Firestore {method} {path} -> {response.status_code} {reason}")
        if response.status_code == 404 or reason == "NOT_FOUND":
            raise DocumentNotFoundError(status_code=response.status_code)
        if response.status_code in (401, 403):
            raise RemoteError(
                "You don't have permission to do that.",
                status_code=response.status_code,
            )
        raise RemoteError(
            f"Server error ({response.status_code}). Please try again.",
            status_code=response.status_code,
        )

    async def _commit(self, write: Dict[str, Any]) -> None:
        await self._request(
            "POST", f"{self.documents_path}:commit", json={"writes": [write]}
        )

    async def query(
        self, collection: str, filters: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        field_filters = [
            {
                "fieldFilter": {
                    "field": {"fieldPath": field},
                    "op": "EQUAL",
                    "value": encode_value(value),
                }
            }
            for field, value in filters.items()
        ]
        structured_query: Dict[str, Any] = {"from": [{"collectionId": collection}]}
        if len(field_filters) == 1:
            structured_query["where"] = field_filters[0]
        elif field_filters:
            structured_query["where"] = {
                "compositeFilter": {"op": "AND", "filters": field_filters}
            }

        response = await self._request(
            "POST",
            f"{self.documents_path}:runQuery",
            json={"structuredQuery": structured_query},
        )
        # runQuery streams one entry per document, plus entries with only readTime
        return [
            decode_document(item["document"])
            for item in response.json()
            if isinstance(item, dict) and item.get("document")
        ]

    async def insert(self, collection: str, record: Dict[str, Any]) -> str:
        record_id = auto_id()
        await self._commit(
            {
                "update": {
                    "name": self._document_name(collection, record_id),
                    "fields": encode_fields(record),
                },
                "currentDocument": {"exists": False},
                "updateTransforms": [
                    {"fieldPath": "createdAt", "setToServerValue": "REQUEST_TIME"},
                    {"fieldPath": "updatedAt", "setToServerValue": "REQUEST_TIME"},
                ],
            }
        )
        return record_id

    async def patch(
        self, collection: str, record_id: str, fields: Dict[str, Any]
    ) -> None:
        await self._commit(
            {
                "update": {
                    "name": self._document_name(collection, record_id),
                    "fields": encode_fields(fields),
                },
                "updateMask": {"fieldPaths": sorted(fields)},
                "currentDocument": {"exists": True},
                "updateTransforms": [
                    {"fieldPath": "updatedAt", "setToServerValue": "REQUEST_TIME"}
                ],
            }
        )

    async def remove(self, collection: str, record_id: str) -> None:
        await self._request(
            "DELETE",
            self._document_name(collection, record_id),
            params={"currentDocument.exists": "true"},
        )
