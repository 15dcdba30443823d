"""
Market Navigator - client for the export market intelligence platform
"""

__version__ = "1.0.0"

from market_navigator.config import NavigatorConfig
from market_navigator.exceptions import (
    NavigatorError,
    ApiError,
    NetworkError,
    AuthenticationRequiredError,
    AuthenticationError,
    AdminAuthRequiredError,
)
from market_navigator.navigator import MarketNavigator, get_navigator

__all__ = [
    "NavigatorConfig",
    "NavigatorError",
    "ApiError",
    "NetworkError",
    "AuthenticationRequiredError",
    "AuthenticationError",
    "AdminAuthRequiredError",
    "MarketNavigator",
    "get_navigator",
]
