"""
Credentialed Session
====================

The token/verify/logout lifecycle shared by the user and admin contexts:

    loading ──restore()──▶ authenticated
       │                        │
       └──(no/invalid token)──▶ anonymous ◀──logout()/expire()

    anonymous ──login()──▶ authenticated

A session is parameterized by a SessionSpec (storage key, login and verify
endpoints, which key of the response holds the record, how to parse it).
Every operation reports through AuthResult; nothing here raises for a
rejected credential. A failed transition leaves token, record and state
exactly as they were, except restore(), which drops a token the backend
refused.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any, Callable, Generic, TypeVar

from market_navigator.api_client import ApiClient
from market_navigator.exceptions import ApiError, NetworkError, AuthenticationError
from market_navigator.logging_config import logger


T = TypeVar("T")


class SessionState(str, Enum):
    """Where a session is in its lifecycle"""
    LOADING = "loading"
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


@dataclass
class AuthResult(Generic[T]):
    """Outcome of a credential exchange or verification"""
    ok: bool
    record: Optional[T] = None
    message: str = ""
    status_code: Optional[int] = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, record: T, message: str = "") -> "AuthResult[T]":
        return cls(ok=True, record=record, message=message)

    @classmethod
    def failure(cls, message: str, status_code: Optional[int] = None) -> "AuthResult[T]":
        return cls(ok=False, message=message, status_code=status_code)

    def unwrap(self) -> T:
        """Record on success, AuthenticationError carrying the message otherwise"""
        if not self.ok:
            raise AuthenticationError(self.message, self.status_code)
        return self.record


@dataclass(frozen=True)
class SessionSpec:
    """What distinguishes one credential namespace from another"""
    name: str
    storage_key: str
    login_path: str
    verify_path: str
    verify_method: str
    record_key: str
    parse_record: Callable[[Dict[str, Any]], Any]
    login_failure_message: str
    network_failure_message: str = "Network error"


class CredentialedSession(Generic[T]):
    """Token + cached record for one namespace"""

    INVALID_RESPONSE = "Invalid response from server"

    def __init__(self, spec: SessionSpec, client: ApiClient):
        if client.token_store.key != spec.storage_key:
            raise ValueError(
                f"{spec.name} session needs a client bound to '{spec.storage_key}', "
                f"got '{client.token_store.key}'"
            )
        self.spec = spec
        self.client = client
        self.token_store = client.token_store
        self.record: Optional[T] = None
        self.state = SessionState.LOADING
        self.busy = False

    @property
    def is_authenticated(self) -> bool:
        return self.state == SessionState.AUTHENTICATED and self.record is not None

    def _extract_record(self, response: Any) -> Optional[Dict[str, Any]]:
        if not isinstance(response, dict):
            return None
        record = response.get(self.spec.record_key)
        if record is None:
            # GET /users/profile answers with {"data": {...}}
            record = response.get("data")
        return record if isinstance(record, dict) else None

    def _become_anonymous(self) -> None:
        self.record = None
        self.state = SessionState.ANONYMOUS

    async def login(
        self,
        payload: Dict[str, Any],
        path: Optional[str] = None,
        default_message: Optional[str] = None
    ) -> AuthResult[T]:
        """Exchange credentials for a token and record"""
        path = path or self.spec.login_path
        default_message = default_message or self.spec.login_failure_message
        subject = payload.get("email") or payload.get("adminId")

        self.busy = True
        try:
            response = await self.client.post(path, json=payload, auth=False)
        except NetworkError:
            logger.log_auth_event(f"{self.spec.name}_login", False, subject, reason="network error")
            return AuthResult.failure(self.spec.network_failure_message, 0)
        except ApiError as e:
            logger.log_auth_event(f"{self.spec.name}_login", False, subject, reason=f"HTTP {e.status_code}")
            return AuthResult.failure(e.server_message or default_message, e.status_code)
        finally:
            self.busy = False

        if isinstance(response, dict) and response.get("success") is False:
            return AuthResult.failure(response.get("message") or default_message)

        token = response.get("token") if isinstance(response, dict) else None
        record_payload = self._extract_record(response)
        if not token or record_payload is None:
            logger.log_auth_event(f"{self.spec.name}_login", False, subject, reason="malformed response")
            return AuthResult.failure(self.INVALID_RESPONSE)

        record = self.spec.parse_record(record_payload)
        # Overwrites any earlier token in this namespace
        self.token_store.set(token)
        self.record = record
        self.state = SessionState.AUTHENTICATED
        logger.log_auth_event(f"{self.spec.name}_login", True, subject)
        return AuthResult.success(record, message=response.get("message", ""))

    async def restore(self) -> AuthResult[T]:
        """Validate a stored token against the backend"""
        token = self.token_store.get()
        if not token:
            self._become_anonymous()
            return AuthResult.failure("No stored session")

        self.state = SessionState.LOADING
        self.busy = True
        try:
            response = await self.client.request(self.spec.verify_path, self.spec.verify_method)
        except ApiError as e:
            self.token_store.clear()
            self._become_anonymous()
            logger.log_auth_event(f"{self.spec.name}_restore", False, reason=e.message)
            return AuthResult.failure(e.server_message or e.message, e.status_code)
        finally:
            self.busy = False

        record_payload = self._extract_record(response)
        if record_payload is None or response.get("success") is False:
            self.token_store.clear()
            self._become_anonymous()
            logger.log_auth_event(f"{self.spec.name}_restore", False, reason="rejected")
            message = response.get("message") if isinstance(response, dict) else None
            return AuthResult.failure(message or self.INVALID_RESPONSE)

        self.record = self.spec.parse_record(record_payload)
        self.state = SessionState.AUTHENTICATED
        logger.log_auth_event(f"{self.spec.name}_restore", True)
        return AuthResult.success(self.record)

    def logout(self) -> None:
        """Drop token and record; safe to call repeatedly"""
        self.token_store.clear()
        self._become_anonymous()

    def expire(self) -> None:
        """The backend rejected the token on some other call"""
        self.token_store.clear()
        self._become_anonymous()

    def merge_record(self, partial: Dict[str, Any]) -> Optional[T]:
        """Lay fields over the cached record without a network call"""
        if self.record is None:
            return None
        self.record = self.record.merged(partial)
        return self.record
