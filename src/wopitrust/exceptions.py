"""Custom exceptions for wopitrust."""


class WopiTrustError(Exception):
    """Base error for wopitrust."""


class RemoteLookupError(WopiTrustError):
    """Raised when a federation peer's document server URL cannot be resolved.

    The peer may be unreachable, may not run the office integration, or may
    have answered with something that is not a usable URL.
    """

    def __init__(self, peer: str, message: str | None = None):
        self.peer = peer
        super().__init__(message or f"Could not resolve document server of {peer}")


class PeerResolutionError(RemoteLookupError):
    """Raised when a trusted peer named by a request cannot be resolved.

    Unlike a failure during trust set enumeration, this one is tied to a
    request that explicitly asked for elevated embedding permission.
    """
