"""In-memory implementations of the collaborator protocols.

Useful for embedding the engine in a process that keeps its configuration
in memory, and for tests.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any


class InMemoryConfigStore:
    """Dict backed ``ConfigStore``."""

    def __init__(
        self,
        app_values: Mapping[str, Mapping[str, str]] | None = None,
        system_values: Mapping[str, Any] | None = None,
    ):
        self._app_values: dict[str, dict[str, str]] = {
            app: dict(values) for app, values in (app_values or {}).items()
        }
        self._system_values: dict[str, Any] = dict(system_values or {})

    def get_app_value(self, app: str, key: str, default: Any = None) -> Any:
        return self._app_values.get(app, {}).get(key, default)

    def set_app_value(self, app: str, key: str, value: str) -> None:
        self._app_values.setdefault(app, {})[key] = value

    def get_app_keys(self, app: str) -> list[str]:
        return list(self._app_values.get(app, {}))

    def get_system_value(self, key: str, default: Any = None) -> Any:
        return self._system_values.get(key, default)

    def set_system_value(self, key: str, value: Any) -> None:
        self._system_values[key] = value


class StaticFeatureManager:
    """``FeatureManager`` with a fixed set of enabled features.

    ``disabled_for`` maps a feature to actors it is switched off for.
    """

    def __init__(
        self,
        enabled: Iterable[str] = (),
        disabled_for: Mapping[str, Iterable[str]] | None = None,
    ):
        self.enabled = set(enabled)
        self.disabled_for = {
            feature: set(actors) for feature, actors in (disabled_for or {}).items()
        }

    def is_enabled_for_actor(self, feature: str, actor: str | None) -> bool:
        if feature not in self.enabled:
            return False
        return actor not in self.disabled_for.get(feature, set())


class InMemoryFederationRegistry:
    """``FederationRegistry`` holding peers and the subset that is trusted."""

    def __init__(self, peers: Iterable[str] = (), trusted: Iterable[str] = ()):
        self._peers = list(peers)
        self._trusted = set(trusted)

    def add_peer(self, peer: str, *, trusted: bool = False) -> None:
        if peer not in self._peers:
            self._peers.append(peer)
        if trusted:
            self._trusted.add(peer)
        else:
            self._trusted.discard(peer)

    def revoke(self, peer: str) -> None:
        self._trusted.discard(peer)

    def list_peers(self) -> list[str]:
        return list(self._peers)

    def is_trusted(self, peer: str) -> bool:
        return peer in self._trusted


class StaticGlobalScaleConfig:
    def __init__(self, enabled: bool = False):
        self.enabled = enabled

    def is_enabled(self) -> bool:
        return self.enabled
