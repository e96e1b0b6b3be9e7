"""Application configuration for the office integration.

``AppConfig`` is a typed view over a ``ConfigStore``. It knows the app's
setting keys and their defaults, and where the document server URLs and the
global-scale host list live.
"""

from __future__ import annotations

from typing import Any, Protocol

APP_ID = "officeonline"


class ConfigStore(Protocol):
    """Protocol for the host platform's configuration store.

    App values are strings scoped to an app; system values are arbitrary
    JSON-like values shared by the whole instance.
    """

    def get_app_value(self, app: str, key: str, default: Any = None) -> Any:
        """Get an app value, or ``default`` if the key was never set."""
        ...

    def set_app_value(self, app: str, key: str, value: str) -> None:
        """Set an app value."""
        ...

    def get_app_keys(self, app: str) -> list[str]:
        """List the keys set for an app."""
        ...

    def get_system_value(self, key: str, default: Any = None) -> Any:
        """Get a system value, or ``default`` if the key was never set."""
        ...


class AppConfig:
    """Typed access to the office integration's configuration."""

    DEFAULTS: dict[str, str] = {
        "wopi_url": "",
        "doc_format": "ooxml",
    }

    # Settings stored as comma separated strings
    APP_SETTING_TYPES: dict[str, str] = {
        "edit_groups": "array",
        "use_groups": "array",
    }

    SYSTEM_GS_TRUSTED_HOSTS = "gs.trustedHosts"
    FEDERATION_USE_TRUSTED_DOMAINS = "federation_use_trusted_domains"

    def __init__(self, store: ConfigStore, app_id: str = APP_ID):
        self.store = store
        self.app_id = app_id

    def get_app_value(self, key: str) -> Any:
        return self.store.get_app_value(self.app_id, key, self.DEFAULTS.get(key))

    def get_app_value_array(self, key: str) -> Any:
        """Get an app value, splitting comma separated list settings."""
        value = self.store.get_app_value(self.app_id, key, [])
        if self.APP_SETTING_TYPES.get(key) == "array" and isinstance(value, str):
            return value.split(",") if value != "" else []
        return value

    def set_app_value(self, key: str, value: str) -> None:
        self.store.set_app_value(self.app_id, key, value)

    def get_app_settings(self) -> dict[str, Any]:
        """All app settings, with ``yes``/``no`` turned into booleans."""
        result: dict[str, Any] = {}
        for key in self.store.get_app_keys(self.app_id):
            value = self.get_app_value_array(key)
            if value == "yes":
                value = True
            elif value == "no":
                value = False
            result[key] = value
        return result

    def get_internal_url(self) -> str:
        """URL the server itself uses to reach the document server."""
        return self.store.get_app_value(self.app_id, "wopi_url", "") or ""

    def get_public_url(self) -> str:
        """URL browsers use to reach the document server.

        Falls back to the internal URL when no public override is set.
        """
        public = self.store.get_app_value(self.app_id, "public_wopi_url", "")
        return public or self.get_internal_url()

    def get_global_scale_trusted_hosts(self) -> list[str]:
        hosts = self.store.get_system_value(self.SYSTEM_GS_TRUSTED_HOSTS, [])
        if not isinstance(hosts, list):
            return []
        return [host for host in hosts if isinstance(host, str)]

    def is_trusted_domain_allowed_for_federation(self) -> bool:
        return (
            self.store.get_app_value(
                self.app_id, self.FEDERATION_USE_TRUSTED_DOMAINS, "no"
            )
            == "yes"
        )
