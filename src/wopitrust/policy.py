"""Embedding policy assembly.

The embedding policy lists the origins allowed as frame ancestors and as
form-action targets for one response. It is built in two tracks:

- the static track grants the configured document server, and
- the dynamic federation track grants a federation peer named by the
  request, after the peer registry has confirmed that peer as trusted.

Example:
    ```python
    from wopitrust.policy import ContentSecurityPolicyManager, PolicyAssembler, RequestContext

    assembler = PolicyAssembler(
        app_config, features=features, registry=registry, resolver=resolver
    )
    sink = ContentSecurityPolicyManager()
    assembler.apply(RequestContext(path="/apps/files/"), sink=sink)
    response.headers["Content-Security-Policy"] = sink.header_value()
    ```
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Literal

import wopitrust
from wopitrust.collaborators import (
    FeatureManager,
    FederationRegistry,
    PolicySink,
    RemoteURLResolver,
)
from wopitrust.config import AppConfig
from wopitrust.exceptions import PeerResolutionError
from wopitrust.sources import FEDERATION_FEATURE
from wopitrust.urls import domain_only
from wopitrust.utilities.logging import get_logger

logger = get_logger(__name__)

SELF = "'self'"

# Separators that would end a CSP source expression or directive
_SOURCE_BREAK = re.compile(r"[\s;,]")


def _is_source_expression(value: str) -> bool:
    return bool(value) and not _SOURCE_BREAK.search(value)


@dataclass(frozen=True)
class EmbeddingPolicy:
    """Frame-ancestor and form-action grants for a single response.

    Instances are immutable. The ``with_*`` methods return a new policy and
    ignore empty values, duplicates, and values that are not a single
    source expression.
    """

    frame_ancestors: tuple[str, ...] = ()
    form_actions: tuple[str, ...] = ()

    def with_frame_ancestor(self, domain: str) -> EmbeddingPolicy:
        if not _is_source_expression(domain) or domain in self.frame_ancestors:
            return self
        return replace(self, frame_ancestors=(*self.frame_ancestors, domain))

    def with_form_action(self, domain: str) -> EmbeddingPolicy:
        if not _is_source_expression(domain) or domain in self.form_actions:
            return self
        return replace(self, form_actions=(*self.form_actions, domain))

    def merge(self, other: EmbeddingPolicy) -> EmbeddingPolicy:
        policy = self
        for domain in other.frame_ancestors:
            policy = policy.with_frame_ancestor(domain)
        for domain in other.form_actions:
            policy = policy.with_form_action(domain)
        return policy

    def is_empty(self) -> bool:
        return not self.frame_ancestors and not self.form_actions

    def to_header(self) -> str:
        """Render as a Content-Security-Policy header value."""
        directives = []
        if self.frame_ancestors:
            directives.append("frame-ancestors " + " ".join(self.frame_ancestors))
        if self.form_actions:
            directives.append("form-action " + " ".join(self.form_actions))
        return "; ".join(directives)


@dataclass(frozen=True)
class RequestContext:
    """The parts of an inbound request the assembler looks at.

    Attributes:
        path: Request path, e.g. ``/apps/files/``
        params: Query and form parameters
        actor: The user making the request, or None if anonymous
    """

    path: str = ""
    params: Mapping[str, str] = field(default_factory=dict)
    actor: str | None = None


class ContentSecurityPolicyManager:
    """Policy sink collecting the policies applied to one response.

    Args:
        supports_form_action: Whether the policy mechanism can restrict
            form-action targets.
    """

    def __init__(self, supports_form_action: bool = True):
        self.supports_form_action = supports_form_action
        self._policies: list[EmbeddingPolicy] = []

    def add_default_policy(self, policy: EmbeddingPolicy) -> None:
        self._policies.append(policy)

    @property
    def policies(self) -> list[EmbeddingPolicy]:
        return list(self._policies)

    def merged_policy(self) -> EmbeddingPolicy:
        merged = EmbeddingPolicy()
        for policy in self._policies:
            merged = merged.merge(policy)
        if not self.supports_form_action and merged.form_actions:
            merged = replace(merged, form_actions=())
        return merged

    def header_value(self) -> str:
        return self.merged_policy().to_header()


class PolicyAssembler:
    """Builds the embedding policy for outbound responses.

    The registry is the only authority on federation trust: a remote access
    claim on the request is used as a lookup key and nothing more. Absent,
    malformed and untrusted claims all lead to no grant.
    """

    def __init__(
        self,
        app_config: AppConfig,
        *,
        features: FeatureManager,
        registry: FederationRegistry,
        resolver: RemoteURLResolver,
        sink: PolicySink | None = None,
        federation_path_prefix: str | None = None,
        remote_access_param: str | None = None,
        dynamic_grant_failure: Literal["raise", "deny"] | None = None,
    ):
        """Initialize the assembler.

        Args:
            app_config: Source of the local document server URL
            features: Decides whether federation is enabled for an actor
            registry: Federation peer registry used to validate claims
            resolver: Looks up a peer's document server URL
            sink: Default policy sink for ``apply``
            federation_path_prefix: Paths eligible for a federation grant,
                defaults to settings.federation_path_prefix
            remote_access_param: Request parameter carrying the claim,
                defaults to settings.remote_access_param
            dynamic_grant_failure: ``"raise"`` or ``"deny"`` when a trusted
                claimed peer cannot be resolved, defaults to
                settings.dynamic_grant_failure
        """
        settings = wopitrust.settings
        self.app_config = app_config
        self.features = features
        self.registry = registry
        self.resolver = resolver
        self.sink = sink
        self.federation_path_prefix = (
            federation_path_prefix
            if federation_path_prefix is not None
            else settings.federation_path_prefix
        )
        self.remote_access_param = remote_access_param or settings.remote_access_param
        self.dynamic_grant_failure = (
            dynamic_grant_failure or settings.dynamic_grant_failure
        )

    def static_policy(self, supports_form_action: bool = True) -> EmbeddingPolicy:
        """Grants for the configured document server."""
        policy = EmbeddingPolicy()
        public_url = self.app_config.get_public_url()
        if not public_url:
            return policy

        domain = domain_only(public_url)
        policy = policy.with_frame_ancestor(SELF).with_frame_ancestor(domain)
        if supports_form_action:
            policy = policy.with_form_action(domain)
        return policy

    def remote_access_claim(self, request: RequestContext) -> str | None:
        """The peer named by the request, or None if absent or malformed.

        A claim must be a single source expression. The peer and its
        document server are granted together or not at all.
        """
        claim = request.params.get(self.remote_access_param)
        if not isinstance(claim, str):
            return None
        claim = claim.strip()
        if not _is_source_expression(claim):
            if claim:
                logger.debug("Ignoring malformed remote access claim %r", claim)
            return None
        return claim

    def federation_grant(self, request: RequestContext) -> tuple[str, ...]:
        """Frame ancestors granted to a federation peer for this request.

        Raises:
            PeerResolutionError: If the claimed peer is trusted but its
                document server cannot be resolved and failures are set to
                raise.
        """
        if not request.path.startswith(self.federation_path_prefix):
            return ()
        if not self.features.is_enabled_for_actor(FEDERATION_FEATURE, request.actor):
            return ()

        claim = self.remote_access_claim(request)
        if claim is None:
            return ()
        if not self.registry.is_trusted(claim):
            logger.debug("Ignoring remote access claim for untrusted peer %s", claim)
            return ()

        try:
            document_domain = domain_only(self.resolver.resolve(claim))
            if not document_domain:
                raise ValueError("resolved document server URL has no host")
        except Exception as e:
            if self.dynamic_grant_failure == "deny":
                logger.warning(
                    "Denying embedding grant for trusted peer %s: %s", claim, e
                )
                return ()
            raise PeerResolutionError(
                claim,
                f"Document server of trusted peer {claim} could not be resolved: {e}",
            ) from e

        logger.info(
            "Granting embedding to federation peer %s (%s)", claim, document_domain
        )
        return (claim, document_domain)

    def assemble_policy(
        self, request: RequestContext, *, sink: PolicySink | None = None
    ) -> EmbeddingPolicy:
        """Build the embedding policy for one response.

        Args:
            request: The inbound request
            sink: Sink whose capabilities apply, defaults to the assembler's

        Returns:
            The static policy plus any federation grant for this request
        """
        target = sink if sink is not None else self.sink
        supports_form_action = target.supports_form_action if target is not None else True

        policy = self.static_policy(supports_form_action=supports_form_action)
        for domain in self.federation_grant(request):
            policy = policy.with_frame_ancestor(domain)
        return policy

    def apply(
        self, request: RequestContext, *, sink: PolicySink | None = None
    ) -> EmbeddingPolicy:
        """Assemble the policy and hand it to the sink once."""
        target = sink if sink is not None else self.sink
        if target is None:
            raise ValueError("No policy sink given and no default sink configured")

        policy = self.assemble_policy(request, sink=target)
        target.add_default_policy(policy)
        return policy
