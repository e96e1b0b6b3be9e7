import os

# Keep log records propagating to the root logger so caplog can see them
os.environ.setdefault("WOPITRUST_LOG_ENABLED", "false")

import pytest  # noqa: E402

from wopitrust.config import APP_ID, AppConfig  # noqa: E402
from wopitrust.exceptions import RemoteLookupError  # noqa: E402
from wopitrust.in_memory import (  # noqa: E402
    InMemoryConfigStore,
    InMemoryFederationRegistry,
    StaticFeatureManager,
    StaticGlobalScaleConfig,
)


class StubResolver:
    """RemoteURLResolver answering from a dict and recording every lookup."""

    def __init__(self, urls: dict[str, str] | None = None):
        self.urls = dict(urls or {})
        self.calls: list[str] = []

    def resolve(self, peer: str) -> str:
        self.calls.append(peer)
        if peer not in self.urls:
            raise RemoteLookupError(peer)
        return self.urls[peer]


class CountingRegistry(InMemoryFederationRegistry):
    """In-memory registry that counts how often it is consulted."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls = 0

    def list_peers(self) -> list[str]:
        self.calls += 1
        return super().list_peers()

    def is_trusted(self, peer: str) -> bool:
        self.calls += 1
        return super().is_trusted(peer)


@pytest.fixture
def store() -> InMemoryConfigStore:
    return InMemoryConfigStore()


@pytest.fixture
def app_config(store) -> AppConfig:
    return AppConfig(store)


@pytest.fixture
def set_wopi_url(store):
    def set_url(url: str, *, public: str | None = None) -> None:
        store.set_app_value(APP_ID, "wopi_url", url)
        if public is not None:
            store.set_app_value(APP_ID, "public_wopi_url", public)

    return set_url


@pytest.fixture
def features() -> StaticFeatureManager:
    """Federation disabled until a test enables it."""
    return StaticFeatureManager()


@pytest.fixture
def registry() -> CountingRegistry:
    return CountingRegistry()


@pytest.fixture
def resolver() -> StubResolver:
    return StubResolver()


@pytest.fixture
def global_scale() -> StaticGlobalScaleConfig:
    return StaticGlobalScaleConfig(enabled=False)


def pytest_collection_modifyitems(items):
    """Automatically mark tests in integration_tests folder with 'integration' marker."""
    for item in items:
        if "integration_tests" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
