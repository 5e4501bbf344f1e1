"""
URL helpers: resolving links found on a page into canonical absolute
addresses and validating the seed address entered by the user.
"""

import re
from urllib.parse import urljoin, urlparse, urlunparse


DEFAULT_PORTS = {'http': 80, 'https': 443}

_whitespace_pattern = re.compile(r'\s')


class InvalidURLError(ValueError):
    """Raised when a string cannot be turned into an absolute URL."""


def normalize_url(url: str) -> str:
    """
    Canonicalize an absolute URL.

    Lower-cases the scheme and host, drops the default port for the
    scheme and gives an empty hierarchical path a trailing slash. Path,
    query and fragment are kept as they are, so `/a` and `/a#top` are
    different addresses.

    Raises:
        InvalidURLError: if the URL is malformed or not absolute
    """
    try:
        parsed = urlparse(url)
        port = parsed.port
    except ValueError as e:
        raise InvalidURLError(f"Malformed URL: {url!r}") from e

    scheme = parsed.scheme.lower()
    if not scheme:
        raise InvalidURLError(f"URL is not absolute: {url!r}")

    netloc = parsed.netloc
    path = parsed.path
    if netloc:
        userinfo, at, hostport = netloc.rpartition('@')
        hostport = hostport.lower()
        if port is not None and port == DEFAULT_PORTS.get(scheme):
            hostport = hostport.rsplit(':', 1)[0]
        netloc = f"{userinfo}{at}{hostport}"
        if not path:
            path = '/'

    return urlunparse((scheme, netloc, path, parsed.params, parsed.query, parsed.fragment))


def resolve_url(base_url: str, link: str) -> str:
    """
    Resolve a possibly relative link against the address of the page it
    was found on.

    >>> resolve_url('http://example.com/x/y', '/about')
    'http://example.com/about'
    >>> resolve_url('http://example.com/x/y', 'z.html')
    'http://example.com/x/z.html'
    """
    try:
        absolute_url = urljoin(base_url, link.strip())
    except ValueError as e:
        raise InvalidURLError(f"Cannot resolve {link!r} against {base_url!r}") from e
    return normalize_url(absolute_url)


def coerce_seed_url(raw: str) -> str:
    """
    Validate a user supplied seed address.

    A bare host such as ``example.com`` is coerced to ``http://example.com/``.
    Only http and https addresses with a host are accepted.

    Raises:
        InvalidURLError: if the input is not a usable web address
    """
    candidate = (raw or '').strip()
    if not candidate:
        raise InvalidURLError("Seed URL is empty")

    if not candidate.lower().startswith(('http://', 'https://')):
        candidate = f"http://{candidate}"

    url = normalize_url(candidate)
    parsed = urlparse(url)
    if not parsed.hostname or _whitespace_pattern.search(parsed.netloc):
        raise InvalidURLError(f"Seed URL has no valid host: {raw!r}")

    return url
