"""DomainListAggregator for combining trust sources into one trust set.

The trust set is the deduplicated list of ASCII trusted domains from every
source, in first-seen order. It is recomputed on every call because peers
can be revoked and configuration can change at any time.
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
from wopitrust.sources import (
    FederationTrustSource,
    GlobalScaleTrustSource,
    LocalTrustSource,
    TrustSource,
)
from wopitrust.urls import domain_only, to_ascii
from wopitrust.utilities.logging import get_logger

logger = get_logger(__name__)


class DomainListAggregator:
    """Merges trust sources into a single trust set.

    Sources are queried in order. A source that fails as a whole is logged
    and skipped, so a broken source can only shrink the trust set.
    """

    def __init__(self, sources: Sequence[TrustSource]) -> None:
        self._sources = list(sources)

    @classmethod
    def from_collaborators(
        cls,
        app_config: AppConfig,
        *,
        features: FeatureManager,
        registry: FederationRegistry,
        resolver: RemoteURLResolver,
        global_scale: GlobalScaleConfig,
    ) -> DomainListAggregator:
        """Build the standard local, federation, global-scale aggregator."""
        return cls(
            [
                LocalTrustSource(app_config),
                FederationTrustSource(features, registry, resolver),
                GlobalScaleTrustSource(app_config, global_scale),
            ]
        )

    @property
    def sources(self) -> list[TrustSource]:
        return list(self._sources)

    def compute_trust_set(self, actor: str | None = None) -> list[str]:
        """Compute the trust set for an actor.

        Returns:
            Unique, non-empty, ASCII trusted domains in first-seen order
        """
        candidates: list[str] = []
        for source in self._sources:
            try:
                candidates.extend(source.list_domains(actor))
            except Exception as e:
                logger.warning(f"Error listing trusted domains from {source}: {e}")
                continue

        trust_set: list[str] = []
        seen: set[str] = set()
        for candidate in candidates:
            domain = to_ascii(candidate)
            if not domain or domain in seen:
                continue
            seen.add(domain)
            trust_set.append(domain)

        logger.debug("Computed trust set with %d domain(s)", len(trust_set))
        return trust_set

    def is_domain_trusted(self, url: str, actor: str | None = None) -> bool:
        """Check whether the domain of ``url`` is in the current trust set."""
        domain = to_ascii(domain_only(url))
        if not domain:
            return False
        return domain in self.compute_trust_set(actor)

    def __repr__(self) -> str:
        return f"DomainListAggregator(sources={self._sources!r})"
