"""
Market Navigator - client composition

Wires one storage file, the two token namespaces and the API clients:

    storage.json
      ├── token       ─▶ main client  (NavigatorApi, UserAuthManager)
      │               └▶ forum client (ForumApi, 401 expires the session)
      └── adminToken  ─▶ admin client (AdminAuthManager, TradeDataApi)
"""

from typing import Optional, Callable

import httpx

from market_navigator.api import NavigatorApi
from market_navigator.api_client import ApiClient
from market_navigator.auth import UserAuthManager, AdminAuthManager
from market_navigator.config import NavigatorConfig
from market_navigator.forum_api import ForumApi
from market_navigator.logging_config import setup_logging
from market_navigator.notifications import Notifier
from market_navigator.token_store import (
    LocalStorage,
    TokenStore,
    USER_TOKEN_KEY,
    ADMIN_TOKEN_KEY,
)
from market_navigator.trade_data import TradeDataApi


class MarketNavigator:
    """Everything a front end needs to talk to the Market Navigator backend"""

    def __init__(
        self,
        config: Optional[NavigatorConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        navigate: Optional[Callable[[str], None]] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.config = config or NavigatorConfig.load_default()
        self.notifier = notifier or Notifier()

        self.storage = LocalStorage(self.config.storage_path)
        self.user_tokens = TokenStore(self.storage, USER_TOKEN_KEY)
        self.admin_tokens = TokenStore(self.storage, ADMIN_TOKEN_KEY)

        self.client = self._make_client(self.user_tokens, transport, name="user")
        self.forum_client = self._make_client(
            self.user_tokens,
            transport,
            name="user",
            expire_session_on_401=True,
            fallback_error_message="API request failed",
        )
        self.admin_client = self._make_client(self.admin_tokens, transport, name="admin")

        self.auth = UserAuthManager(self.client, navigate=navigate, signin_path=self.config.signin_path)
        self.auth.watch(self.forum_client)
        self.admin_auth = AdminAuthManager(self.admin_client, notifier=self.notifier)

        self.api = NavigatorApi(self.client)
        self.forum = ForumApi(self.forum_client)
        self.trade_data = TradeDataApi(self.admin_client)

    def _make_client(
        self,
        token_store: TokenStore,
        transport: Optional[httpx.AsyncBaseTransport],
        name: str,
        expire_session_on_401: bool = False,
        fallback_error_message: str = "Network error",
    ) -> ApiClient:
        return ApiClient(
            self.config.api_base_url,
            token_store,
            timeout=self.config.timeout,
            transport=transport,
            expire_session_on_401=expire_session_on_401,
            fallback_error_message=fallback_error_message,
            name=name,
        )


# Singleton instance
_navigator: Optional[MarketNavigator] = None


def get_navigator(config: Optional[NavigatorConfig] = None) -> MarketNavigator:
    """Get or create the process-wide client"""
    global _navigator
    if _navigator is None:
        config = config or NavigatorConfig.load_default()
        setup_logging(config.log_level, config.log_format)
        _navigator = MarketNavigator(config)
    return _navigator
