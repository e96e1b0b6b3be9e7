"""Tests for wopitrust settings."""

import pytest
from pydantic import ValidationError

from wopitrust import settings as global_settings
from wopitrust.settings import Settings


class TestSettings:
    def test_global_settings_instance(self):
        assert isinstance(global_settings, Settings)

    def test_defaults(self, monkeypatch):
        for name in [
            "WOPITRUST_REMOTE_LOOKUP_TIMEOUT",
            "WOPITRUST_FEDERATION_PATH_PREFIX",
            "WOPITRUST_REMOTE_ACCESS_PARAM",
            "WOPITRUST_DYNAMIC_GRANT_FAILURE",
        ]:
            monkeypatch.delenv(name, raising=False)
        settings = Settings(log_enabled=False)

        assert settings.remote_lookup_timeout == 5.0
        assert settings.federation_path_prefix == "/apps/files"
        assert settings.remote_access_param == "officeonline_remote_access"
        assert settings.dynamic_grant_failure == "raise"

    def test_env_vars(self, monkeypatch):
        monkeypatch.setenv("WOPITRUST_DYNAMIC_GRANT_FAILURE", "deny")
        monkeypatch.setenv("WOPITRUST_REMOTE_LOOKUP_TIMEOUT", "2.5")
        monkeypatch.setenv("WOPITRUST_LOG_LEVEL", "debug")
        settings = Settings()

        assert settings.dynamic_grant_failure == "deny"
        assert settings.remote_lookup_timeout == 2.5
        assert settings.log_level == "DEBUG"

    def test_invalid_failure_mode(self):
        with pytest.raises(ValidationError):
            Settings(dynamic_grant_failure="ignore")  # type: ignore[arg-type]

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(remote_lookup_timeout=0)
