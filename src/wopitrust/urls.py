"""URL normalization for trusted domains.

A trusted domain is the part of a URL that matters to a browser when it
checks framing and form posting: ``scheme://host[:port]``. Paths, queries,
fragments and credentials are dropped.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

import idna

from wopitrust.utilities.logging import get_logger

logger = get_logger(__name__)

_AUTHORITY_PORT = re.compile(
    r"^(?P<host>[^/?#]*?)(?P<port>:\d+)?(?P<rest>[/?#].*)?$", re.DOTALL
)
# host[:port] with no scheme, which urlsplit would read as a path or scheme
_BARE_AUTHORITY = re.compile(r"^[^\s/?#@:]+(:\d+)?$")


def domain_only(url: str) -> str:
    """Strip everything but scheme, host and port from a URL.

    Missing components are left out rather than treated as errors. Input
    that cannot be parsed, or that has no host, yields an empty string.

    Examples:
        >>> domain_only("https://office.example.com:9980/hosting/discovery")
        'https://office.example.com:9980'
        >>> domain_only("//cdn.example.com/x")
        'cdn.example.com'
        >>> domain_only("nc-peer.org")
        'nc-peer.org'
        >>> domain_only("not a url")
        ''
    """
    candidate = url.strip() if url else ""
    if not candidate:
        return ""

    if _BARE_AUTHORITY.match(candidate):
        candidate = f"//{candidate}"

    try:
        parsed = urlsplit(candidate)
        host = parsed.hostname
        port = parsed.port
    except ValueError:
        # Bad IPv6 literal or a port that is not a number in range
        logger.debug("Ignoring malformed URL %r", url)
        return ""

    if not host:
        return ""

    if ":" in host:
        host = f"[{host}]"

    scheme = f"{parsed.scheme}://" if parsed.scheme else ""
    port_part = f":{port}" if port is not None else ""
    return f"{scheme}{host}{port_part}"


def hostname_of(url: str) -> str:
    """Lowercased host of a URL or bare ``host[:port]``, or ``""``."""
    domain = domain_only(url)
    if not domain:
        return ""
    return urlsplit(domain if "://" in domain else f"//{domain}").hostname or ""


def to_ascii(domain: str) -> str:
    """Convert the host of a trusted domain to its ASCII-compatible form.

    Only the host is touched; scheme, port and anything after the authority
    are kept as they are. Hosts that are already ASCII pass through
    unchanged, so wildcard entries such as ``*.example.com`` survive and an
    entry with a path keeps it whether or not its host is ASCII. A host
    that is not a valid international domain name yields an empty string.

    Examples:
        >>> to_ascii("https://münchen.de:8443")
        'https://xn--mnchen-3ya.de:8443'
        >>> to_ascii("münchen.de/path")
        'xn--mnchen-3ya.de/path'
    """
    if not domain or domain.isascii():
        return domain

    scheme, sep, authority = domain.partition("://")
    if not sep:
        scheme, authority = "", domain
    prefix = f"{scheme}{sep}"

    # Always matches: every group is optional or may be empty
    match = _AUTHORITY_PORT.match(authority)
    host = match.group("host")
    port = match.group("port") or ""
    rest = match.group("rest") or ""

    try:
        ascii_host = idna.encode(host, uts46=True).decode("ascii")
    except idna.IDNAError as e:
        logger.debug("Dropping domain %r, host is not a valid IDN: %s", domain, e)
        return ""

    return f"{prefix}{ascii_host}{port}{rest}"
