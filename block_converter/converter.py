"""Convert an HTML fragment into a sequence of comment-delimited blocks.

Each top-level node of the fragment is dispatched by tag name to a rule that
produces one :class:`~block_converter.block.Block` or drops the node:

    h1-h6               → heading {"level": N}
    blockquote          → quote
    p and inline tags   → paragraph, or an embed when the text is a bare URL
    ul / ol             → list / list {"ordered": true}
    img                 → image (source resolved through a media resolver)
    hr                  → separator
    br, cite, source    → dropped
    anything else       → html

Rules registered with :func:`block_converter.rules.register_tag_rule` take
precedence over the built-ins.

Usage::

    from block_converter import BlockConverter

    converter = BlockConverter("<p>Hello</p><h2>World</h2>")
    print(converter.convert())
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, Union

from bs4 import BeautifulSoup, Tag

from block_converter import rules
from block_converter.block import DEFAULT_NAMESPACE, Block
from block_converter.dom import PARSER, TEXT_NODE, node_html, node_name, node_text, parse_fragment
from block_converter.embeds import MetadataFetcher, classify_url
from block_converter.media import PassthroughMediaResolver
from block_converter.normalize import minify_block, remove_empty_blocks
from block_converter.urlnorm import first_srcset_candidate, resolve_relative, strip_url_args

if TYPE_CHECKING:
    from bs4.element import PageElement

    from block_converter.config import ConverterSettings

logger = logging.getLogger(__name__)

BlockOverride = Callable[[Union[Block, str, None], "PageElement"], Union[Block, str, None]]
DocumentOverride = Callable[[str, Sequence["PageElement"]], str]

_HEADING_TAGS = frozenset(f"h{i}" for i in range(1, 7))

_PARAGRAPH_TAGS = frozenset(
    {"p", "a", "abbr", "b", "code", "em", "i", "strong", "sub", "sup", "span", "u"},
)

_DROPPED_TAGS = frozenset({"br", "cite", "source"})

SEPARATOR_MARKUP = '<hr class="wp-block-separator has-alpha-channel-opacity"/>'

BLOCK_SEPARATOR = "\n\n"


def _keep_block(block: Block | str | None, node: PageElement) -> Block | str | None:
    return block


def _keep_document(html: str, nodes: Sequence[PageElement]) -> str:
    return html


def _safe_str(val: Any, default: str = "") -> str:
    """Safely convert a BeautifulSoup attribute value (str | list | None) to str."""
    if val is None:
        return default
    if isinstance(val, list):
        return " ".join(str(v) for v in val)
    return str(val)


class BlockConverter:
    """Convert HTML fragments into block markup.

    Args:
        html:              Fragment converted by :meth:`convert` when it is
                           called without an argument.
        override_block:    Called with each produced block (or None) and its
                           source node; returns the block to keep, a
                           replacement, or None to drop the node.
        override_document: Called with the joined markup and the parsed
                           top-level nodes; its return value replaces the
                           whole output.
        fetch_metadata:    oEmbed lookup ``url -> metadata | None``.  Without
                           one, only Instagram and Facebook URLs become embeds.
        media_resolver:    Object with ``resolve(src, alt)`` or a plain
                           callable with that signature.  Defaults to
                           keeping the sanitized source URL.
        namespace:         Block comment namespace (``wp`` by default).
        base_url:          Resolves relative image sources.
        embeds:            Set to False to keep bare URLs as paragraphs.
    """

    def __init__(
        self,
        html: str = "",
        *,
        override_block: BlockOverride | None = None,
        override_document: DocumentOverride | None = None,
        fetch_metadata: MetadataFetcher | None = None,
        media_resolver: Any = None,
        namespace: str = DEFAULT_NAMESPACE,
        base_url: str = "",
        embeds: bool = True,
    ) -> None:
        self.html = html
        self.override_block = override_block or _keep_block
        self.override_document = override_document or _keep_document
        self.fetch_metadata = fetch_metadata
        self.media_resolver = media_resolver or PassthroughMediaResolver()
        self.namespace = namespace
        self.base_url = base_url
        self.embeds = embeds

        self._rules: dict[str, Callable[[PageElement], Block | None]] = {
            "blockquote": self.blockquote,
            "ul": self.ul,
            "ol": self.ol,
            "img": self.img,
            "hr": self.hr,
        }
        self._rules.update(dict.fromkeys(_HEADING_TAGS, self.heading))
        self._rules.update(dict.fromkeys(_PARAGRAPH_TAGS, self.paragraph))
        self._rules.update(dict.fromkeys(_DROPPED_TAGS, self.drop))

    @classmethod
    def from_settings(cls, settings: ConverterSettings, html: str = "", **kwargs: Any) -> BlockConverter:
        """Build a converter whose collaborators are configured from *settings*.

        Keyword arguments override the collaborators built from settings.
        """
        from block_converter.media import LocalMediaStore
        from block_converter.oembed import OEmbedClient

        options: dict[str, Any] = {
            "namespace": settings.namespace,
            "base_url": settings.base_url,
            "embeds": settings.embeds,
        }
        if settings.embeds and settings.oembed.enabled:
            options["fetch_metadata"] = OEmbedClient(
                maxwidth=settings.oembed.maxwidth,
                maxheight=settings.oembed.maxheight,
                timeout=settings.oembed.timeout,
                user_agent=settings.oembed.user_agent,
                discover=settings.oembed.discover,
            )
        if settings.media.directory:
            options["media_resolver"] = LocalMediaStore(
                settings.media.directory,
                settings.media.base_url,
                timeout=settings.media.timeout,
            )
        options.update(kwargs)
        return cls(html, **options)

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def convert(self, html: str | None = None) -> str:
        """Convert *html* (or the constructor's fragment) to block markup."""
        if html is None:
            html = self.html

        root = parse_fragment(html)
        if root is None or not root.contents:
            return ""

        nodes = list(root.children)
        rendered: list[str] = []
        for node in nodes:
            if node_name(node) == TEXT_NODE:
                continue

            block = self.convert_node(node)
            if not block:
                continue

            markup = block.render(self.namespace) if isinstance(block, Block) else str(block)
            markup = minify_block(markup, self.namespace)
            if remove_empty_blocks(markup, self.namespace).strip():
                rendered.append(markup)

        logger.debug("Converted %d top-level nodes into %d blocks", len(nodes), len(rendered))

        output = remove_empty_blocks(BLOCK_SEPARATOR.join(rendered), self.namespace)
        output = self.override_document(output, nodes)
        return str(output or "").strip()

    def convert_node(self, node: PageElement) -> Block | str | None:
        """Run the rule for *node* and pass the result through ``override_block``."""
        rule = self.get_rule(node_name(node))
        return self.override_block(rule(node), node)

    def get_rule(self, tag: str) -> Callable[[PageElement], Block | None]:
        """Return the rule for *tag*: registered first, then built-in, then html."""
        registered = rules.get_tag_rule(tag)
        if registered is not None:
            return registered
        return self._rules.get(tag, self.html_block)

    # ------------------------------------------------------------------
    # Built-in rules
    # ------------------------------------------------------------------

    def heading(self, node: PageElement) -> Block | None:
        content = node_html(node)
        if not content:
            return None
        level = int(node_name(node).removeprefix("h"))
        return Block("heading", {"level": level}, content)

    def blockquote(self, node: PageElement) -> Block | None:
        content = node_html(node)
        if not content:
            return None
        return Block("quote", {}, content)

    def paragraph(self, node: PageElement) -> Block | None:
        content = node_html(node)
        if not content:
            return None

        if self.embeds:
            embed = classify_url(node_text(node), self.fetch_metadata)
            if embed is not None:
                return embed

        return Block("paragraph", {}, content)

    def ul(self, node: PageElement) -> Block:
        return Block("list", {}, node_html(node))

    def ol(self, node: PageElement) -> Block:
        return Block("list", {"ordered": True}, node_html(node))

    def img(self, node: PageElement) -> Block | None:
        if not isinstance(node, Tag):
            return None

        src = first_srcset_candidate(_safe_str(node.get("data-srcset")))
        if not src:
            src = _safe_str(node.get("src")).strip()
        alt = _safe_str(node.get("alt"))

        resolved = self.resolve_image_source(src, alt)
        if not resolved:
            return None

        soup = BeautifulSoup("", PARSER)
        figure = soup.new_tag("figure", attrs={"class": "wp-block-image"})
        figure.append(soup.new_tag("img", attrs={"src": resolved, "alt": alt}))
        return Block("image", {}, str(figure))

    def hr(self, node: PageElement) -> Block:
        return Block("separator", {}, SEPARATOR_MARKUP)

    def html_block(self, node: PageElement) -> Block | None:
        content = node_html(node)
        if not content:
            return None
        return Block("html", {}, content)

    def drop(self, node: PageElement) -> None:
        return None

    # ------------------------------------------------------------------
    # Media
    # ------------------------------------------------------------------

    def resolve_image_source(self, src: str, alt: str) -> str:
        """Strip URL arguments from *src* and hand it to the media resolver.

        Returns an empty string when the source is unusable or the resolver
        fails; the image node is then dropped.
        """
        sanitized = strip_url_args(resolve_relative(src, self.base_url))
        if not sanitized:
            logger.debug("Dropping image with unusable source %r", src)
            return ""

        resolve = getattr(self.media_resolver, "resolve", self.media_resolver)
        try:
            resolved = resolve(sanitized, alt)
        except Exception as exc:
            logger.warning("Media resolution failed for %s: %s", sanitized, exc)
            return ""
        return resolved or ""


def convert(html: str, **kwargs: Any) -> str:
    """Convert *html* to block markup with a one-off :class:`BlockConverter`."""
    return BlockConverter(html, **kwargs).convert()
