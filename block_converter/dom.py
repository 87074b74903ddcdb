"""Thin helpers over BeautifulSoup for reading a parsed HTML fragment."""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup, Comment, Tag
from bs4.element import NavigableString, PageElement

logger = logging.getLogger(__name__)

# Parser used for every fragment; lxml wraps input in <html><body>.
PARSER = "lxml"

TEXT_NODE = "#text"
COMMENT_NODE = "#comment"


def parse_fragment(html: str) -> Tag | None:
    """Parse *html* and return the synthetic ``<body>`` root, or None.

    Malformed or partial markup is repaired by the parser; it never raises
    for bad input.
    """
    if not html or not html.strip():
        return None

    # lxml rejects lone surrogates; replace them rather than fail.
    html = html.encode("utf-8", "replace").decode("utf-8")
    soup = BeautifulSoup(html, PARSER)
    body = soup.body
    if body is None:
        logger.debug("Fragment produced no <body> root (%d chars)", len(html))
    return body


def node_name(node: PageElement) -> str:
    """Return the lowercased tag name, ``#comment`` or ``#text``."""
    if isinstance(node, Tag):
        return (node.name or "").lower()
    if isinstance(node, Comment):
        return COMMENT_NODE
    return TEXT_NODE


def node_html(node: PageElement) -> str:
    """Return the node's own markup, including its tag."""
    if isinstance(node, Comment):
        return node.output_ready()
    if isinstance(node, Tag):
        return str(node)
    if isinstance(node, NavigableString):
        return node.output_ready()
    return ""


def node_text(node: PageElement) -> str:
    return node.get_text() if isinstance(node, Tag) else str(node)


def get_nodes(node: PageElement, tag: str) -> list[Tag]:
    """Re-parse *node*'s markup and return every ``<tag>`` element inside it."""
    root = parse_fragment(node_html(node))
    if root is None:
        return []
    return root.find_all(tag)
