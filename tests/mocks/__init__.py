"""
Test doubles for the Market Navigator backend
"""
from tests.mocks.mock_backend import MockBackend, BASE_URL

__all__ = ["MockBackend", "BASE_URL"]
