"""
Unit Tests for client composition
Tests for: namespace wiring, token isolation, singleton
"""
import pytest

from market_navigator import navigator as navigator_module
from market_navigator.navigator import MarketNavigator, get_navigator
from market_navigator.token_store import USER_TOKEN_KEY, ADMIN_TOKEN_KEY


class TestWiring:
    """Test what MarketNavigator builds"""

    def test_clients_bound_to_their_namespace(self, navigator):
        """Test each client reads the right storage key"""
        assert navigator.client.token_store.key == USER_TOKEN_KEY
        assert navigator.forum_client.token_store.key == USER_TOKEN_KEY
        assert navigator.admin_client.token_store.key == ADMIN_TOKEN_KEY

    def test_only_forum_client_expires_session(self, navigator):
        """Test the 401 policy placement"""
        assert navigator.forum_client.expire_session_on_401 is True
        assert navigator.client.expire_session_on_401 is False
        assert navigator.admin_client.expire_session_on_401 is False

    def test_forum_fallback_message(self, navigator):
        """Test the forum's generic error text"""
        assert navigator.forum_client.fallback_error_message == "API request failed"
        assert navigator.client.fallback_error_message == "Network error"

    def test_base_url_from_config(self, navigator, config):
        """Test every client uses the configured backend"""
        assert navigator.client.base_url == config.api_base_url
        assert navigator.admin_client.base_url == config.api_base_url


class TestTokenIsolation:
    """Test user and admin tokens never cross"""

    @pytest.mark.asyncio
    async def test_requests_carry_their_own_token(self, navigator, backend, credentials, admin_credentials, storage):
        """Test user calls carry token and admin calls carry adminToken"""
        await navigator.auth.sign_in(credentials["email"], credentials["password"])
        await navigator.admin_auth.login(admin_credentials["admin_id"], admin_credentials["password"])

        await navigator.api.get_user_profile()
        await navigator.trade_data.get_summary()

        user_header = backend.calls("GET", "/users/profile")[-1].headers["Authorization"]
        admin_header = backend.calls("GET", "/trade-data/summary")[-1].headers["Authorization"]
        assert user_header == f"Bearer {storage.get_item('token')}"
        assert admin_header == f"Bearer {storage.get_item('adminToken')}"
        assert user_header != admin_header


class TestSingleton:
    """Test get_navigator"""

    def test_returns_same_instance(self, config, monkeypatch):
        """Test the process-wide client is created once"""
        monkeypatch.setattr(navigator_module, "_navigator", None)

        first = get_navigator(config)
        second = get_navigator()

        assert first is second
        assert isinstance(first, MarketNavigator)
