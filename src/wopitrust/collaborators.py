"""Protocols for the host platform services the engine depends on.

Everything here is supplied by the caller. The engine never looks services
up on its own, so each protocol can be backed by the real platform, by
``wopitrust.in_memory`` or by a test double.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from wopitrust.policy import EmbeddingPolicy


class FeatureManager(Protocol):
    """Answers whether a platform feature is enabled for an actor."""

    def is_enabled_for_actor(self, feature: str, actor: str | None) -> bool: ...


class FederationRegistry(Protocol):
    """Registry of federation peers (other instances of the platform).

    A peer can be registered without being trusted, e.g. while approval is
    pending.
    """

    def list_peers(self) -> list[str]: ...

    def is_trusted(self, peer: str) -> bool: ...


class RemoteURLResolver(Protocol):
    """Looks up the document server URL a federation peer uses.

    Implementations must bound the time a lookup may take and raise
    ``RemoteLookupError`` on any failure.
    """

    def resolve(self, peer: str) -> str: ...


class GlobalScaleConfig(Protocol):
    """Global-scale deployment switch."""

    def is_enabled(self) -> bool: ...


class PolicySink(Protocol):
    """Receives the embedding policy built for a response.

    ``supports_form_action`` is False for policy mechanisms that cannot
    restrict form targets; the assembler then leaves form-action out.
    """

    supports_form_action: bool

    def add_default_policy(self, policy: EmbeddingPolicy) -> None: ...
