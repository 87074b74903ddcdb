"""oEmbed metadata lookup for bare URLs.

A built-in table maps URL patterns of well-known providers to their oEmbed
endpoints.  When discovery is enabled, URLs that match no known provider are
fetched and their ``<link type="application/json+oembed">`` element is
followed instead.

Usage::

    from block_converter.oembed import OEmbedClient

    client = OEmbedClient(maxwidth=640)
    meta = client.fetch("https://vimeo.com/76979871")
    if meta:
        print(meta.provider_name, meta.type, meta.width, meta.height)
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

from bs4 import BeautifulSoup
from pydantic import BaseModel, ValidationError, field_validator

from block_converter.exceptions import FetchError, OEmbedError
from block_converter.transport import fetch_text

logger = logging.getLogger(__name__)

DEFAULT_MAXWIDTH = 500
DEFAULT_MAXHEIGHT = 750


# ---------------------------------------------------------------------------
# Response schema
# ---------------------------------------------------------------------------

class ProviderMetadata(BaseModel):
    """Validated oEmbed response."""

    type: str
    provider_name: str = ""
    provider_url: str | None = None
    title: str | None = None
    html: str | None = None
    width: float | None = None
    height: float | None = None
    thumbnail_url: str | None = None
    version: str | None = None

    model_config = {"extra": "allow"}

    @field_validator("width", "height", mode="before")
    @classmethod
    def coerce_dimension(cls, v: Any) -> Any:
        # Providers send ints, numeric strings, null or things like "100%".
        if isinstance(v, bool) or v is None:
            return None
        if isinstance(v, (int, float)):
            return v
        if isinstance(v, str):
            try:
                return float(v.strip())
            except ValueError:
                return None
        return None

    @field_validator("provider_name", mode="before")
    @classmethod
    def strip_provider_name(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v or ""


# ---------------------------------------------------------------------------
# Provider table
# ---------------------------------------------------------------------------

@dataclass
class OEmbedProvider:
    """One oEmbed endpoint and the URLs it answers for."""

    pattern: re.Pattern[str]
    endpoint: str
    sizes: bool = True
    params: dict[str, str] = field(default_factory=dict)

    def matches(self, url: str) -> bool:
        return bool(self.pattern.match(url))


def _provider(pattern: str, endpoint: str, **kwargs: Any) -> OEmbedProvider:
    return OEmbedProvider(re.compile(pattern, re.IGNORECASE), endpoint, **kwargs)


_BUILTIN_PROVIDERS: tuple[OEmbedProvider, ...] = (
    _provider(
        r"https?://((m|www)\.)?youtube\.com/(watch|playlist|shorts|live)",
        "https://www.youtube.com/oembed",
        params={"dnt": "1"},
    ),
    _provider(r"https?://youtu\.be/", "https://www.youtube.com/oembed", params={"dnt": "1"}),
    _provider(r"https?://(.+\.)?vimeo\.com/", "https://vimeo.com/api/oembed.json"),
    _provider(r"https?://(www\.)?dailymotion\.com/", "https://www.dailymotion.com/services/oembed"),
    _provider(r"https?://dai\.ly/", "https://www.dailymotion.com/services/oembed"),
    _provider(r"https?://(www\.)?flickr\.com/", "https://www.flickr.com/services/oembed/"),
    _provider(r"https?://flic\.kr/", "https://www.flickr.com/services/oembed/"),
    _provider(
        r"https?://(www\.)?twitter\.com/\w{1,15}/status(es)?/",
        "https://publish.twitter.com/oembed",
        sizes=False,
    ),
    _provider(
        r"https?://(www\.)?twitter\.com/\w{1,15}/?$",
        "https://publish.twitter.com/oembed",
        sizes=False,
    ),
    _provider(r"https?://(www\.)?soundcloud\.com/", "https://soundcloud.com/oembed"),
    _provider(r"https?://(open|play)\.spotify\.com/", "https://embed.spotify.com/oembed/"),
    _provider(r"https?://(www\.)?tiktok\.com/.*/video/", "https://www.tiktok.com/oembed"),
    _provider(r"https?://(www\.)?reddit\.com/r/[^/]+/comments/", "https://www.reddit.com/oembed"),
    _provider(r"https?://(www\.|embed\.)?ted\.com/talks/", "https://www.ted.com/services/v1/oembed.json"),
    _provider(r"https?://(.+)\.tumblr\.com/", "https://www.tumblr.com/oembed/1.0"),
    _provider(r"https?://(www\.)?speakerdeck\.com/", "https://speakerdeck.com/oembed.json"),
    _provider(r"https?://(www\.)?mixcloud\.com/", "https://app.mixcloud.com/oembed/"),
    _provider(r"https?://wordpress\.tv/", "https://wordpress.tv/oembed/"),
)


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class OEmbedClient:
    """Resolve oEmbed metadata for URLs of known providers.

    Args:
        maxwidth:   Maximum embed width requested from providers.
        maxheight:  Maximum embed height requested from providers.
        timeout:    Per-request network timeout in seconds.
        user_agent: Override the default User-Agent string.
        discover:   Follow ``<link type="application/json+oembed">`` on pages
                    that match no known provider.
    """

    def __init__(
        self,
        *,
        maxwidth: int = DEFAULT_MAXWIDTH,
        maxheight: int = DEFAULT_MAXHEIGHT,
        timeout: float = 10,
        user_agent: str | None = None,
        discover: bool = False,
    ) -> None:
        self.maxwidth = maxwidth
        self.maxheight = maxheight
        self.timeout = timeout
        self.user_agent = user_agent
        self.discover = discover
        self._providers: list[OEmbedProvider] = list(_BUILTIN_PROVIDERS)

    def add_provider(
        self,
        pattern: str,
        endpoint: str,
        *,
        sizes: bool = True,
        params: dict[str, str] | None = None,
    ) -> None:
        """Register an extra provider; it is consulted before the built-ins."""
        self._providers.insert(0, _provider(pattern, endpoint, sizes=sizes, params=params or {}))

    def get_provider(self, url: str) -> OEmbedProvider | None:
        for provider in self._providers:
            if provider.matches(url):
                return provider
        return None

    def build_request_url(self, endpoint: str, url: str, *, sizes: bool = True,
                          params: dict[str, str] | None = None) -> str:
        query: list[tuple[str, str]] = []
        if sizes:
            query.append(("maxwidth", str(self.maxwidth)))
            query.append(("maxheight", str(self.maxheight)))
        query.append(("url", url))
        query.extend((params or {}).items())
        if sizes:
            query.append(("format", "json"))
        separator = "&" if "?" in endpoint else "?"
        return f"{endpoint}{separator}{urlencode(query)}"

    def discover_endpoint(self, url: str) -> str | None:
        """Return the JSON oEmbed endpoint advertised by the page at *url*."""
        try:
            page = fetch_text(url, timeout=self.timeout, user_agent=self.user_agent,
                              accept="text/html,application/xhtml+xml")
        except FetchError as exc:
            raise OEmbedError(f"Discovery fetch failed for {url}: {exc}") from exc

        soup = BeautifulSoup(page, "lxml")
        link = soup.find("link", attrs={"type": "application/json+oembed"})
        if link is None:
            return None
        href = str(link.get("href") or "").strip()
        return href or None

    def get_data(self, url: str) -> ProviderMetadata:
        """Return validated oEmbed metadata for *url*.

        Raises:
            OEmbedError: When no provider answers for *url* or the response
                         cannot be fetched or validated.
        """
        provider = self.get_provider(url)
        if provider is not None:
            request_url = self.build_request_url(
                provider.endpoint, url, sizes=provider.sizes, params=provider.params,
            )
        elif self.discover:
            endpoint = self.discover_endpoint(url)
            if endpoint is None:
                raise OEmbedError(f"No oEmbed endpoint advertised by {url}")
            request_url = endpoint
        else:
            raise OEmbedError(f"No oEmbed provider for {url}")

        logger.debug("Requesting oEmbed data: %s", request_url)
        try:
            body = fetch_text(request_url, timeout=self.timeout, user_agent=self.user_agent,
                              accept="application/json")
        except FetchError as exc:
            raise OEmbedError(f"oEmbed request failed for {url}: {exc}") from exc

        try:
            payload = json.loads(body)
        except json.JSONDecodeError as exc:
            raise OEmbedError(f"Invalid oEmbed JSON for {url}: {exc}") from exc
        if not isinstance(payload, dict):
            raise OEmbedError(f"Unexpected oEmbed payload for {url}")

        try:
            return ProviderMetadata.model_validate(payload)
        except ValidationError as exc:
            raise OEmbedError(f"oEmbed response for {url} failed validation: {exc}") from exc

    def fetch(self, url: str) -> ProviderMetadata | None:
        """Return metadata for *url*, or None on any failure."""
        try:
            return self.get_data(url)
        except OEmbedError as exc:
            logger.debug("oEmbed lookup missed for %s: %s", url, exc)
            return None

    __call__ = fetch


_default_client: OEmbedClient | None = None


def fetch_oembed_metadata(url: str) -> ProviderMetadata | None:
    """Look *url* up with a shared default :class:`OEmbedClient`."""
    global _default_client
    if _default_client is None:
        _default_client = OEmbedClient()
    return _default_client.fetch(url)
