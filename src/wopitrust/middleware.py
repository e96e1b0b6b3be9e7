"""Starlette middleware that writes the embedding policy on every response.

Example:
    ```python
    from starlette.applications import Starlette
    from starlette.middleware import Middleware

    from wopitrust.middleware import EmbeddingPolicyMiddleware

    app = Starlette(
        routes=routes,
        middleware=[Middleware(EmbeddingPolicyMiddleware, assembler=assembler)],
    )
    ```
"""

from __future__ import annotations

from collections.abc import Callable

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from wopitrust.exceptions import PeerResolutionError
from wopitrust.policy import ContentSecurityPolicyManager, PolicyAssembler, RequestContext
from wopitrust.utilities.logging import get_logger

logger = get_logger(__name__)

CSP_HEADER = "Content-Security-Policy"

ActorResolver = Callable[[Request], str | None]


def default_actor(request: Request) -> str | None:
    """Actor from an authentication middleware's ``user``, if there is one."""
    user = request.scope.get("user")
    if user is None:
        return None
    # BaseUser properties raise NotImplementedError unless overridden
    try:
        if not getattr(user, "is_authenticated", False):
            return None
    except NotImplementedError:
        return None
    for attr in ("username", "display_name"):
        try:
            name = getattr(user, attr, None)
        except NotImplementedError:
            continue
        if name:
            return name
    return None


def request_context(
    request: Request, actor_resolver: ActorResolver = default_actor
) -> RequestContext:
    """Build a RequestContext from the path and query parameters."""
    return RequestContext(
        path=request.url.path,
        params=dict(request.query_params),
        actor=actor_resolver(request),
    )


class EmbeddingPolicyMiddleware(BaseHTTPMiddleware):
    """Assembles the embedding policy per request and sets the CSP header.

    A trusted federation peer that cannot be resolved during a request that
    asked for elevated embedding fails that request with a 502, so the
    caller can tell that trust was not established.
    """

    def __init__(
        self,
        app: ASGIApp,
        assembler: PolicyAssembler,
        *,
        supports_form_action: bool = True,
        actor_resolver: ActorResolver = default_actor,
    ) -> None:
        super().__init__(app)
        self.assembler = assembler
        self.supports_form_action = supports_form_action
        self.actor_resolver = actor_resolver

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        context = request_context(request, self.actor_resolver)
        sink = ContentSecurityPolicyManager(
            supports_form_action=self.supports_form_action
        )
        try:
            # Peer lookups block, keep them off the event loop
            await run_in_threadpool(self.assembler.apply, context, sink=sink)
        except PeerResolutionError as e:
            logger.warning("Remote access request for %s failed: %s", e.peer, e)
            return JSONResponse(
                {"error": "remote_lookup_failed", "error_description": str(e)},
                status_code=502,
            )

        response = await call_next(request)
        header = sink.header_value()
        if header:
            response.headers[CSP_HEADER] = header
        return response
