"""Trust sources.

Each source yields candidate trusted domains from one place: the local
document server configuration, the federation registry, or the global-scale
host list. Sources read their inputs on every call; nothing is cached.
"""

from __future__ import annotations

from collections.abc import Sequence

from wopitrust.collaborators import (
    FeatureManager,
    FederationRegistry,
    GlobalScaleConfig,
    RemoteURLResolver,
)
from wopitrust.config import AppConfig
from wopitrust.federation import FederationPeer
from wopitrust.urls import domain_only
from wopitrust.utilities.logging import get_logger

logger = get_logger(__name__)

FEDERATION_FEATURE = "federation"


class TrustSource:
    """Base class for trust sources."""

    name: str = "source"

    def list_domains(self, actor: str | None = None) -> Sequence[str]:
        """Return candidate trusted domains.

        Entries may be empty or duplicated; the aggregator cleans them up.

        Args:
            actor: The user the trust set is computed for, if any
        """
        raise NotImplementedError("Subclasses must implement list_domains")

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class LocalTrustSource(TrustSource):
    """The document server this instance is configured to use."""

    name = "local"

    def __init__(self, app_config: AppConfig):
        self.app_config = app_config

    def list_domains(self, actor: str | None = None) -> Sequence[str]:
        return [domain_only(self.app_config.get_public_url())]


class FederationTrustSource(TrustSource):
    """Trusted federation peers and the document servers they use.

    Only peers the registry confirms as trusted are considered. A peer whose
    document server cannot be resolved still contributes its own domain; the
    failed lookup is logged and skipped.
    """

    name = "federation"

    def __init__(
        self,
        features: FeatureManager,
        registry: FederationRegistry,
        resolver: RemoteURLResolver,
    ):
        self.features = features
        self.registry = registry
        self.resolver = resolver

    def is_enabled(self, actor: str | None = None) -> bool:
        return self.features.is_enabled_for_actor(FEDERATION_FEATURE, actor)

    def peers(self, actor: str | None = None) -> list[FederationPeer]:
        """Enumerate trusted peers, resolving each one's document server."""
        if not self.is_enabled(actor):
            return []

        peers: list[FederationPeer] = []
        for identifier in self.registry.list_peers():
            if not self.registry.is_trusted(identifier):
                continue
            try:
                document_url = self.resolver.resolve(identifier)
            except Exception as e:
                # Peer unreachable or without a document server
                logger.debug(
                    "Skipping document server of federation peer %s: %s",
                    identifier,
                    e,
                )
                document_url = None
            peers.append(
                FederationPeer(
                    identifier=identifier, trusted=True, document_url=document_url
                )
            )
        return peers

    def list_domains(self, actor: str | None = None) -> Sequence[str]:
        peers = self.peers(actor)
        urls = [peer.identifier for peer in peers]
        urls.extend(peer.document_url for peer in peers if peer.document_url)
        return [domain_only(url) for url in urls]

    def __repr__(self) -> str:
        return f"FederationTrustSource(registry={self.registry!r})"


class GlobalScaleTrustSource(TrustSource):
    """Hosts trusted across a global-scale deployment, taken verbatim."""

    name = "global_scale"

    def __init__(self, app_config: AppConfig, global_scale: GlobalScaleConfig):
        self.app_config = app_config
        self.global_scale = global_scale

    def list_domains(self, actor: str | None = None) -> Sequence[str]:
        if not self.global_scale.is_enabled():
            return []
        return self.app_config.get_global_scale_trusted_hosts()
