"""Turn bare provider URLs into embed blocks.

Instagram and Facebook URLs get fixed-shape blocks without any lookup.  Any
other absolute URL is offered to an oEmbed metadata fetcher; when it answers,
the provider name, embed type and aspect ratio drive the block attributes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from block_converter.block import Block
from block_converter.urlnorm import (
    extract_host,
    is_absolute_url,
    rewrite_embed_host,
    slugify,
)

logger = logging.getLogger(__name__)

EMBED_BLOCK = "embed"

# Returns provider metadata (ProviderMetadata or a plain mapping) or None.
MetadataFetcher = Callable[[str], Any]

# Exact rounded width/height ratios that earn an aspect-ratio class.
_ASPECT_RATIO_CLASSES: dict[Decimal, str] = {
    Decimal("1.78"): "wp-embed-aspect-16-9 wp-has-aspect-ratio",
    Decimal("1.33"): "wp-embed-aspect-4-3 wp-has-aspect-ratio",
}

_RATIO_PRECISION = Decimal("0.01")

_EMBED_FIGURE = (
    '<figure class="wp-block-embed is-type-{type} is-provider-{slug} wp-block-embed-{slug}{extra}">'
    '<div class="wp-block-embed__wrapper">{url}</div></figure>'
)


def embed_markup(url: str, embed_type: str, provider_slug: str, class_name: str = "") -> str:
    extra = f" {class_name}" if class_name else ""
    return _EMBED_FIGURE.format(type=embed_type, slug=provider_slug, extra=extra, url=url)


def aspect_ratio_class(width: float | None, height: float | None) -> str:
    """Return the aspect-ratio class for a 16:9 or 4:3 embed, else ``""``."""
    if not width or not height or width <= 0 or height <= 0:
        return ""
    # Halves round away from zero: 1.775 is 16:9, 1.335 is not 4:3.
    ratio = Decimal(str(width / height)).quantize(_RATIO_PRECISION, rounding=ROUND_HALF_UP)
    return _ASPECT_RATIO_CLASSES.get(ratio, "")


def instagram_embed(url: str) -> Block:
    return Block(
        EMBED_BLOCK,
        {
            "url": url,
            "type": "rich",
            "providerNameSlug": "instagram",
            "responsive": True,
        },
        embed_markup(url, "rich", "instagram"),
    )


def facebook_embed(url: str) -> Block:
    return Block(
        EMBED_BLOCK,
        {
            "url": url,
            "type": "rich",
            "providerNameSlug": "embed-handler",
            "responsive": True,
            "previewable": False,
        },
        embed_markup(url, "rich", "embed-handler"),
    )


def _meta_value(metadata: Any, key: str) -> Any:
    if isinstance(metadata, Mapping):
        return metadata.get(key)
    return getattr(metadata, key, None)


def _dimension(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def provider_embed(url: str, metadata: Any) -> Block:
    """Build a generic embed block for *url* from oEmbed *metadata*."""
    embed_type = str(_meta_value(metadata, "type") or "rich")
    provider_name = str(_meta_value(metadata, "provider_name") or "")
    slug = slugify(provider_name) or slugify(extract_host(url).removeprefix("www."))

    attributes: dict[str, Any] = {
        "url": url,
        "type": embed_type,
        "providerNameSlug": slug,
        "responsive": True,
    }

    class_name = aspect_ratio_class(
        _dimension(_meta_value(metadata, "width")),
        _dimension(_meta_value(metadata, "height")),
    )
    if class_name:
        attributes["className"] = class_name

    return Block(EMBED_BLOCK, attributes, embed_markup(url, embed_type, slug, class_name))


def classify_url(text: str, fetch_metadata: MetadataFetcher | None = None) -> Block | None:
    """Return an embed block when *text* is a bare provider URL, else None.

    A None result means the caller should treat *text* as ordinary content:
    either it is not an absolute URL or no provider metadata was found.
    """
    if not is_absolute_url(text):
        return None

    url = rewrite_embed_host(text)
    host = extract_host(url)

    # Instagram refuses unauthenticated oEmbed requests.
    if "instagram.com" in host:
        return instagram_embed(url)
    if "facebook.com" in host:
        return facebook_embed(url)

    if fetch_metadata is None:
        return None

    try:
        metadata = fetch_metadata(url)
    except Exception as exc:
        logger.warning("oEmbed lookup failed for %s: %s", url, exc)
        return None

    if not metadata:
        logger.debug("No oEmbed provider data for %s; keeping it as text", url)
        return None

    return provider_embed(url, metadata)
