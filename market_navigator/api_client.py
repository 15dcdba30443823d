"""
Market Navigator - API Client
Token-bearing HTTP client for the Market Navigator REST API.

Every request:
  - reads the bearer token fresh from its TokenStore
  - sends JSON (or multipart when files are attached)
  - returns the parsed JSON payload or raises ApiError/NetworkError

One ApiClient is bound to one TokenStore, so the user and admin
credential namespaces can never be mixed up on the wire.
"""

import time
from typing import Optional, Dict, Any, Callable, List

import httpx

from market_navigator.exceptions import (
    ApiError,
    NetworkError,
    AuthenticationRequiredError,
)
from market_navigator.logging_config import (
    logger,
    generate_request_id,
    set_request_id,
    set_session_kind,
)
from market_navigator.token_store import TokenStore


SessionExpiredCallback = Callable[[], None]


class ApiClient:
    """HTTP client for one credential namespace"""

    def __init__(
        self,
        base_url: str,
        token_store: TokenStore,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        expire_session_on_401: bool = False,
        fallback_error_message: str = "Network error",
        name: str = "user",
    ):
        self.base_url = base_url.rstrip('/')
        self.token_store = token_store
        self.timeout = timeout
        self.expire_session_on_401 = expire_session_on_401
        self.fallback_error_message = fallback_error_message
        self.name = name
        self._transport = transport
        self._session_expired_callback: Optional[SessionExpiredCallback] = None

    def subscribe_session_expired(self, callback: Optional[SessionExpiredCallback]) -> None:
        """Register the single listener for authentication-expired events"""
        self._session_expired_callback = callback

    def _publish_session_expired(self) -> None:
        if self._session_expired_callback is not None:
            self._session_expired_callback()

    def _get_headers(
        self,
        auth: bool = True,
        multipart: bool = False,
        extra: Optional[Dict[str, str]] = None
    ) -> Dict[str, str]:
        """Get request headers"""
        headers: Dict[str, str] = {}
        # httpx writes its own multipart Content-Type with the boundary
        if not multipart:
            headers["Content-Type"] = "application/json"
        token = self.token_store.get() if auth else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if extra:
            headers.update(extra)
        return headers

    @staticmethod
    def _clean_params(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, str]]:
        """Drop unset query values; booleans go out as true/false"""
        if not params:
            return None
        cleaned = {}
        for key, value in params.items():
            if value is None:
                continue
            if isinstance(value, bool):
                cleaned[key] = "true" if value else "false"
            else:
                cleaned[key] = str(value)
        return cleaned or None

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        files: Optional[List[Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        auth: bool = True,
    ) -> Any:
        """Make an HTTP request and return the parsed JSON body"""
        if not endpoint.startswith('/'):
            endpoint = f"/{endpoint}"
        url = f"{self.base_url}{endpoint}"
        method = method.upper()
        request_headers = self._get_headers(auth=auth, multipart=bool(files), extra=headers)

        set_session_kind(self.name)
        set_request_id(generate_request_id())

        start = time.perf_counter()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.request(
                    method,
                    url,
                    headers=request_headers,
                    json=json,
                    params=self._clean_params(params),
                    files=files,
                    data=data,
                )
        except httpx.RequestError as e:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.log_request(method, endpoint, 0, duration_ms, error=type(e).__name__)
            raise NetworkError() from e

        duration_ms = (time.perf_counter() - start) * 1000
        logger.log_request(method, endpoint, response.status_code, duration_ms)

        if not response.is_success:
            self._raise_for_response(endpoint, response)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            raise ApiError("Invalid response from server", response.status_code)

    def _raise_for_response(self, endpoint: str, response: httpx.Response) -> None:
        """Turn a non-2xx response into the matching exception"""
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.status_code == 401 and self.expire_session_on_401:
            self.token_store.clear()
            logger.log_auth_event("session_expired", False, reason=f"401 from {endpoint}")
            self._publish_session_expired()
            raise AuthenticationRequiredError(payload=payload)

        if payload is None:
            raise ApiError(self.fallback_error_message, response.status_code)

        message = payload.get("message") if isinstance(payload, dict) else None
        raise ApiError(
            message or f"HTTP error! status: {response.status_code}",
            response.status_code,
            payload=payload,
        )

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        return await self.request(endpoint, "GET", params=params, **kwargs)

    async def post(self, endpoint: str, json: Optional[Any] = None, **kwargs) -> Any:
        return await self.request(endpoint, "POST", json=json, **kwargs)

    async def put(self, endpoint: str, json: Optional[Any] = None, **kwargs) -> Any:
        return await self.request(endpoint, "PUT", json=json, **kwargs)

    async def delete(self, endpoint: str, **kwargs) -> Any:
        return await self.request(endpoint, "DELETE", **kwargs)
