"""wopitrust - trusted domains and embedding policy for WOPI office integrations."""

from wopitrust.settings import Settings

settings = Settings()

from wopitrust.utilities.logging import configure_logging  # noqa: E402

if settings.log_enabled:
    configure_logging(
        level=settings.log_level,
        enable_rich_tracebacks=settings.enable_rich_tracebacks,
    )

from wopitrust.aggregate import DomainListAggregator  # noqa: E402
from wopitrust.config import AppConfig  # noqa: E402
from wopitrust.exceptions import (  # noqa: E402
    PeerResolutionError,
    RemoteLookupError,
    WopiTrustError,
)
from wopitrust.policy import (  # noqa: E402
    ContentSecurityPolicyManager,
    EmbeddingPolicy,
    PolicyAssembler,
    RequestContext,
)

__all__ = [
    "AppConfig",
    "ContentSecurityPolicyManager",
    "DomainListAggregator",
    "EmbeddingPolicy",
    "PeerResolutionError",
    "PolicyAssembler",
    "RemoteLookupError",
    "RequestContext",
    "Settings",
    "WopiTrustError",
    "settings",
]
