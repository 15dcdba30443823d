"""
Market Navigator - Test Configuration and Fixtures
"""
import io
from typing import List, Dict, Any

import pytest
from faker import Faker
from rich.console import Console

from market_navigator.config import NavigatorConfig
from market_navigator.navigator import MarketNavigator
from market_navigator.notifications import Notifier
from market_navigator.token_store import LocalStorage, TokenStore, USER_TOKEN_KEY, ADMIN_TOKEN_KEY
from tests.mocks import MockBackend, BASE_URL

fake = Faker()


@pytest.fixture
def config(tmp_path) -> NavigatorConfig:
    """Config pointing at the mock backend with storage under tmp_path"""
    return NavigatorConfig(api_base_url=BASE_URL, config_dir=str(tmp_path / "navigator"))


@pytest.fixture
def backend() -> MockBackend:
    """Fresh in-process backend"""
    return MockBackend()


@pytest.fixture
def storage(config: NavigatorConfig) -> LocalStorage:
    return LocalStorage(config.storage_path)


@pytest.fixture
def user_tokens(storage: LocalStorage) -> TokenStore:
    return TokenStore(storage, USER_TOKEN_KEY)


@pytest.fixture
def admin_tokens(storage: LocalStorage) -> TokenStore:
    return TokenStore(storage, ADMIN_TOKEN_KEY)


@pytest.fixture
def console_output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def notifier(console_output: io.StringIO) -> Notifier:
    """Notifier rendering into a buffer instead of the terminal"""
    return Notifier(console=Console(file=console_output, width=120))


@pytest.fixture
def navigated() -> List[str]:
    """Paths the client asked to navigate to"""
    return []


@pytest.fixture
def navigator(config, backend, notifier, navigated) -> MarketNavigator:
    """Fully wired client talking to the mock backend"""
    return MarketNavigator(
        config,
        transport=backend.transport,
        navigate=navigated.append,
        notifier=notifier,
    )


@pytest.fixture
def credentials(backend: MockBackend) -> Dict[str, Any]:
    """A registered exporter"""
    email = fake.email()
    password = fake.password(length=12)
    user = backend.add_user(
        email,
        password,
        companyName=fake.company(),
        contactPerson=fake.name(),
    )
    return {"email": email, "password": password, "user": user}


@pytest.fixture
def admin_credentials(backend: MockBackend) -> Dict[str, str]:
    admin_id = fake.user_name()
    password = fake.password(length=12)
    backend.add_admin(admin_id, password)
    return {"admin_id": admin_id, "password": password}
