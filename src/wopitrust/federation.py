"""Federation peers and their document servers.

This module provides:
- FederationPeer: a peer as seen during trust set enumeration
- HTTPRemoteURLResolver: asks a peer which document server it uses
- TrustedHostsFederationRegistry: extends a registry's trust to configured hosts
"""

from __future__ import annotations

import fnmatch

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

import wopitrust
from wopitrust.collaborators import FederationRegistry
from wopitrust.config import APP_ID, AppConfig
from wopitrust.exceptions import RemoteLookupError
from wopitrust.urls import hostname_of
from wopitrust.utilities.logging import get_logger

logger = get_logger(__name__)


class FederationPeer(BaseModel):
    """A federation peer and, when it could be resolved, its document server."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    trusted: bool
    document_url: str | None = None


class _FederationData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    wopi_url: str | None = None


class _OCSEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: _FederationData


class FederationResponse(BaseModel):
    """Body of a peer's federation endpoint, in OCS JSON format."""

    model_config = ConfigDict(extra="ignore")

    ocs: _OCSEnvelope


class HTTPRemoteURLResolver:
    """Resolve a peer's document server URL through its OCS federation API.

    Each lookup is a single GET bounded by ``timeout``. Redirects are not
    followed. Every failure is raised as ``RemoteLookupError``; nothing is
    retried or cached here.
    """

    FEDERATION_PATH = "/ocs/v2.php/apps/{app_id}/api/v1/federation"

    def __init__(
        self,
        *,
        app_id: str = APP_ID,
        timeout: float | None = None,
        client: httpx.Client | None = None,
        verify: bool = True,
    ):
        """Initialize the resolver.

        Args:
            app_id: App whose federation endpoint is queried on the peer
            timeout: Seconds per lookup, defaults to settings.remote_lookup_timeout
            client: Optional shared httpx client; one is created per lookup otherwise
            verify: Verify TLS certificates of peers
        """
        self.app_id = app_id
        self.timeout = (
            timeout if timeout is not None else wopitrust.settings.remote_lookup_timeout
        )
        self.client = client
        self.verify = verify

    def federation_url(self, peer: str) -> str:
        base = peer.strip().rstrip("/")
        if "://" not in base:
            base = f"https://{base}"
        return base + self.FEDERATION_PATH.format(app_id=self.app_id)

    def resolve(self, peer: str) -> str:
        url = self.federation_url(peer)
        logger.debug("Looking up document server of %s at %s", peer, url)

        try:
            if self.client is not None:
                response = self._get(self.client, url)
            else:
                with httpx.Client(
                    timeout=self.timeout,
                    follow_redirects=False,
                    verify=self.verify,
                ) as client:
                    response = self._get(client, url)
            response.raise_for_status()
            document = FederationResponse.model_validate_json(response.content)
        except httpx.HTTPStatusError as e:
            raise RemoteLookupError(
                peer,
                f"Federation endpoint of {peer} returned HTTP "
                f"{e.response.status_code}",
            ) from e
        except httpx.HTTPError as e:
            raise RemoteLookupError(
                peer, f"Federation endpoint of {peer} is unreachable: {e}"
            ) from e
        except ValidationError as e:
            raise RemoteLookupError(
                peer, f"Federation endpoint of {peer} sent an invalid response"
            ) from e

        wopi_url = (document.ocs.data.wopi_url or "").strip()
        if not wopi_url:
            raise RemoteLookupError(
                peer, f"{peer} does not expose a document server"
            )
        return wopi_url

    def _get(self, client: httpx.Client, url: str) -> httpx.Response:
        return client.get(
            url,
            params={"format": "json"},
            headers={"OCS-APIRequest": "true", "Accept": "application/json"},
            timeout=self.timeout,
        )


class TrustedHostsFederationRegistry:
    """Registry that also trusts peers whose host is a configured trusted host.

    When ``federation_use_trusted_domains`` is ``yes``, a peer whose host
    matches one of the ``gs.trustedHosts`` patterns (``fnmatch`` style, so
    ``*.example.com`` works) is trusted even if the wrapped registry does
    not list it as trusted. Enumeration is delegated unchanged.
    """

    def __init__(self, registry: FederationRegistry, app_config: AppConfig):
        self.registry = registry
        self.app_config = app_config

    def list_peers(self) -> list[str]:
        return self.registry.list_peers()

    def is_trusted(self, peer: str) -> bool:
        if self.registry.is_trusted(peer):
            return True
        if not self.app_config.is_trusted_domain_allowed_for_federation():
            return False

        host = hostname_of(peer)
        if not host:
            return False
        return any(
            fnmatch.fnmatchcase(host, pattern.strip().lower())
            for pattern in self.app_config.get_global_scale_trusted_hosts()
            if pattern.strip()
        )
