"""
Custom Exceptions for Market Navigator
======================================

Use these instead of generic Exception so callers can branch on the
failure category:

1. Transport failures (server unreachable)        -> NetworkError
2. HTTP failures carrying a JSON error body       -> ApiError
3. Rejected credentials on an authenticated call  -> AuthenticationRequiredError

Usage:
    from market_navigator.exceptions import ApiError, NetworkError

    try:
        payload = await client.get("/buyers")
    except NetworkError:
        notifier.error("Cannot reach the Market Navigator server")
    except ApiError as e:
        notifier.error(e.message)
"""

from typing import Optional, Any, Dict


class NavigatorError(Exception):
    """Base exception for all Market Navigator client errors"""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(NavigatorError):
    """Invalid client configuration"""

    def __init__(self, message: str):
        super().__init__(message, code="CONFIG_ERROR")


# ============================================
# HTTP / Transport Errors
# ============================================

class ApiError(NavigatorError):
    """Backend answered with a non-success status"""

    def __init__(
        self,
        message: str,
        status_code: int,
        payload: Optional[Any] = None,
        code: str = "API_ERROR"
    ):
        super().__init__(
            message,
            code=code,
            details={"status_code": status_code}
        )
        self.status_code = status_code
        self.payload = payload

    @property
    def server_message(self) -> Optional[str]:
        """Message supplied by the backend in its error body, if any"""
        if isinstance(self.payload, dict):
            message = self.payload.get("message")
            if isinstance(message, str) and message:
                return message
        return None


class NetworkError(ApiError):
    """Request never produced an HTTP response"""

    def __init__(self, message: str = "Network error"):
        super().__init__(message, status_code=0, code="NETWORK_ERROR")


class AuthenticationRequiredError(ApiError):
    """Authenticated request was rejected with 401; the session is gone"""

    def __init__(
        self,
        message: str = "Authentication required. Please sign in again.",
        payload: Optional[Any] = None
    ):
        super().__init__(message, status_code=401, payload=payload, code="SESSION_EXPIRED")


# ============================================
# Authentication Errors
# ============================================

class AuthenticationError(NavigatorError):
    """Credential exchange failed"""

    def __init__(self, message: str = "Authentication failed", status_code: Optional[int] = None):
        super().__init__(message, code="AUTH_FAILED", details={"status_code": status_code})
        self.status_code = status_code


class AdminAuthRequiredError(NavigatorError):
    """Admin-only operation attempted without an admin session"""

    def __init__(self, message: str = "Admin login required"):
        super().__init__(message, code="ADMIN_AUTH_REQUIRED")
