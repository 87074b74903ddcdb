"""URL validation, argument stripping and slug generation utilities."""

from __future__ import annotations

import re
import unicodedata
from urllib.parse import urljoin, urlparse

# Hosts that are rewritten before provider detection
_HOST_REWRITES: dict[str, str] = {
    "x.com": "twitter.com",
    "www.x.com": "twitter.com",
}

_WHITESPACE_RE = re.compile(r"\s")

# Characters allowed in slugs
_SLUG_UNSAFE_RE = re.compile(r"[^a-z0-9]+")
_LEADING_TRAILING_DASH_RE = re.compile(r"^-+|-+$")


def is_absolute_url(text: str) -> bool:
    """Return True if *text* is, in its entirety, an absolute URL.

    Requires a scheme and a host; surrounding or embedded whitespace makes
    the text plain prose, not a URL.
    """
    if not text or _WHITESPACE_RE.search(text):
        return False
    try:
        parsed = urlparse(text)
        parsed.port  # raises on a malformed or out-of-range port
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.hostname)


def extract_host(url: str) -> str:
    """Return the lowercased host name of *url* (no port)."""
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def rewrite_embed_host(url: str) -> str:
    """Return *url* with ``x.com`` hosts replaced by ``twitter.com``.

    Only the host is touched; scheme, port, path and query are kept.
    """
    try:
        parsed = urlparse(url)
        port = parsed.port
    except ValueError:
        return url

    host = (parsed.hostname or "").lower()
    replacement = _HOST_REWRITES.get(host)
    if not replacement:
        return url

    netloc = replacement
    if port is not None:
        netloc = f"{netloc}:{port}"
    if "@" in parsed.netloc:
        userinfo = parsed.netloc.rpartition("@")[0]
        netloc = f"{userinfo}@{netloc}"
    return parsed._replace(netloc=netloc).geturl()


def strip_url_args(url: str) -> str:
    """Drop query string and fragment from *url*.

    Returns ``scheme://host[:port]path`` or an empty string when any of
    scheme, host or path is missing.

    Example:
        https://cdn.example.com/a.jpg?w=300#top → https://cdn.example.com/a.jpg
    """
    try:
        parsed = urlparse(url.strip())
        port = parsed.port
    except ValueError:
        return ""

    if not parsed.scheme or not parsed.hostname or not parsed.path:
        return ""

    netloc = parsed.hostname if port is None else f"{parsed.hostname}:{port}"
    return f"{parsed.scheme}://{netloc}{parsed.path}"


def resolve_relative(url: str, base_url: str = "") -> str:
    """Resolve *url* against *base_url* when one is given."""
    if url and base_url:
        return urljoin(base_url, url)
    return url


def first_srcset_candidate(srcset: str) -> str:
    """Return the first URL listed in a ``srcset`` attribute value."""
    srcset = srcset.strip()
    if not srcset:
        return ""
    return srcset.split(",")[0].strip().split(" ")[0]


def slugify(text: str) -> str:
    """Convert a provider name into a lowercase, hyphenated slug.

    Example:
        "Amazon Kindle" → amazon-kindle
    """
    normalized = unicodedata.normalize("NFKD", text)
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii").lower()
    slug = _SLUG_UNSAFE_RE.sub("-", ascii_text)
    return _LEADING_TRAILING_DASH_RE.sub("", slug)
