"""Blocking HTTP helpers shared by the oEmbed and media collaborators.

Uses only the stdlib (``urllib``) for HTTP.
"""

from __future__ import annotations

import gzip
import logging
import random
import time
import urllib.error
import urllib.request
import zlib
from urllib.parse import urlparse

from block_converter.exceptions import FetchError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "block-converter/0.1 (+https://github.com/block-converter/block-converter)"

_RETRY_CODES: frozenset[int] = frozenset({429, 500, 502, 503, 504})


def _decompress(raw: bytes, headers: object | None, url: str) -> bytes:
    encoding = ""
    if headers is not None:
        try:
            encoding = str(headers.get("Content-Encoding", "")).lower().strip()
        except Exception:
            encoding = ""

    try:
        if encoding == "gzip":
            return gzip.decompress(raw)
        if encoding in ("deflate", "zlib"):
            return zlib.decompress(raw)
    except (OSError, zlib.error) as exc:
        raise FetchError(f"{encoding} decompression failed for {url}: {exc}", url=url) from exc
    return raw


def _backoff(attempt: int, retry_after: int = 0) -> float:
    return max(retry_after, 2 ** attempt) + random.uniform(0, 1)


def fetch_bytes(
    url: str,
    *,
    timeout: float = 10,
    user_agent: str | None = None,
    max_retries: int = 2,
    accept: str = "*/*",
) -> tuple[bytes, object]:
    """Fetch *url* and return ``(body, headers)``.

    Retries up to *max_retries* times with jittered exponential backoff on
    transient errors (429, 500, 502, 503, 504, and network-level failures).

    Raises:
        FetchError: On HTTP errors, connection failures, or invalid URLs.
    """
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise FetchError(f"Unsupported URL scheme: {parsed.scheme!r}", url=url)

    req = urllib.request.Request(
        url,
        headers={
            "User-Agent": user_agent or DEFAULT_USER_AGENT,
            "Accept": accept,
            "Accept-Encoding": "gzip, deflate",
        },
    )

    last_exc: FetchError | None = None
    for attempt in range(max_retries + 1):
        try:
            with urllib.request.urlopen(req, timeout=timeout) as resp:
                raw: bytes = resp.read()
                return _decompress(raw, resp.headers, url), resp.headers

        except urllib.error.HTTPError as exc:
            last_exc = FetchError(
                f"HTTP {exc.code} fetching {url}: {exc.reason}",
                url=url,
                status=exc.code,
            )
            if exc.code in _RETRY_CODES and attempt < max_retries:
                retry_after = 0
                ra_header = exc.headers.get("Retry-After", "") if exc.headers else ""
                if ra_header and ra_header.strip().isdigit():
                    retry_after = int(ra_header)
                delay = _backoff(attempt, retry_after)
                logger.debug(
                    "HTTP %d for %s, retrying in %.1fs (attempt %d/%d)",
                    exc.code, url, delay, attempt + 1, max_retries,
                )
                time.sleep(delay)
                continue
            raise last_exc from exc

        except urllib.error.URLError as exc:
            last_exc = FetchError(f"URL error fetching {url}: {exc.reason}", url=url)
            if attempt < max_retries:
                delay = _backoff(attempt)
                logger.debug(
                    "URL error for %s, retrying in %.1fs (attempt %d/%d): %s",
                    url, delay, attempt + 1, max_retries, exc.reason,
                )
                time.sleep(delay)
                continue
            raise last_exc from exc

        except OSError as exc:
            last_exc = FetchError(f"Network error fetching {url}: {exc}", url=url)
            if attempt < max_retries:
                delay = _backoff(attempt)
                logger.debug(
                    "Network error for %s, retrying in %.1fs (attempt %d/%d): %s",
                    url, delay, attempt + 1, max_retries, exc,
                )
                time.sleep(delay)
                continue
            raise last_exc from exc

    raise last_exc or FetchError(f"All retries exhausted for {url}", url=url)


def fetch_text(
    url: str,
    *,
    timeout: float = 10,
    user_agent: str | None = None,
    max_retries: int = 2,
    accept: str = "*/*",
) -> str:
    """Fetch *url* and decode the body using the response charset."""
    raw, headers = fetch_bytes(
        url,
        timeout=timeout,
        user_agent=user_agent,
        max_retries=max_retries,
        accept=accept,
    )
    charset = "utf-8"
    try:
        charset = headers.get_content_charset("utf-8") or "utf-8"
    except AttributeError:
        charset = "utf-8"
    try:
        return raw.decode(charset, errors="replace")
    except (LookupError, ValueError):
        return raw.decode("utf-8", errors="replace")
