"""Engine settings loaded from the environment."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVEL = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """wopitrust settings.

    Every field can be set through a ``WOPITRUST_`` prefixed environment
    variable or a ``.env`` file, e.g. ``WOPITRUST_LOG_LEVEL=DEBUG``.
    """

    model_config = SettingsConfigDict(
        env_prefix="WOPITRUST_",
        env_file=".env",
        extra="ignore",
    )

    log_enabled: bool = True
    log_level: LOG_LEVEL = "INFO"
    enable_rich_tracebacks: bool = True

    remote_lookup_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Seconds allowed for one federation peer lookup",
    )
    federation_path_prefix: str = Field(
        default="/apps/files",
        description="Requests under this path may carry a remote access claim",
    )
    remote_access_param: str = Field(
        default="officeonline_remote_access",
        description="Request parameter naming the federation peer to grant",
    )
    dynamic_grant_failure: Literal["raise", "deny"] = Field(
        default="raise",
        description=(
            "What to do when a trusted peer named by a remote access claim "
            "cannot be resolved: raise PeerResolutionError or deny the grant"
        ),
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v
