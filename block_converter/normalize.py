"""Whitespace minification and empty-block removal for converted markup."""

from __future__ import annotations

import re
from functools import lru_cache

from block_converter.block import DEFAULT_NAMESPACE

_WHITESPACE_RUN_RE = re.compile(r"\s{2,}")
# Spaces and tabs only; line breaks inside embed wrappers are significant.
_HORIZONTAL_WHITESPACE_RUN_RE = re.compile(r"[^\S\r\n]{2,}")

# (opening comment body, inner markup) pairs for blocks that carry nothing.
_EMPTY_SHELLS: tuple[tuple[str, str], ...] = (
    ("html", "<div></div>"),
    ("html", "<div> </div>"),
    ("paragraph", "<div> </div>"),
    ("paragraph", "<div>  </div>"),
    ("paragraph", "<p><br></p>"),
    ("paragraph", "<p><br/></p>"),
    ("paragraph", "<p><br><br><br></p>"),
    ("paragraph", "<p><br/><br/><br/></p>"),
    ('heading {"level":3}', "<h3>\n" + " " * 56 + "</h3>"),
)


def embed_marker(namespace: str = DEFAULT_NAMESPACE) -> str:
    return f"<!-- {namespace}:embed"


def minify_block(block: str, namespace: str = DEFAULT_NAMESPACE) -> str:
    """Delete every run of two or more whitespace characters in *block*.

    Embed blocks keep their line breaks; only runs of spaces and tabs are
    removed from them.
    """
    if embed_marker(namespace) in block:
        return _HORIZONTAL_WHITESPACE_RUN_RE.sub("", block)
    return _WHITESPACE_RUN_RE.sub("", block)


@lru_cache(maxsize=8)
def empty_block_literals(namespace: str = DEFAULT_NAMESPACE) -> tuple[str, ...]:
    """Return the exact empty-block strings removed for *namespace*."""
    literals: list[str] = []
    for opener, inner in _EMPTY_SHELLS:
        name = opener.split(" ", 1)[0]
        start = f"<!-- {namespace}:{opener} -->"
        end = f"<!-- /{namespace}:{name} -->"
        literals.append(f"{start}\n{inner}\n{end}")
        literals.append(f"{start}{inner}{end}")
    return tuple(literals)


@lru_cache(maxsize=8)
def _empty_paragraph_re(namespace: str) -> re.Pattern[str]:
    ns = re.escape(namespace)
    return re.compile(rf"<!-- {ns}:paragraph -->\s*?<p>\s*?</p>\s*?<!-- /{ns}:paragraph -->")


def remove_empty_paragraph_blocks(html: str, namespace: str = DEFAULT_NAMESPACE) -> str:
    """Remove paragraph blocks wrapping nothing but ``<p></p>`` and whitespace."""
    return _empty_paragraph_re(namespace).sub("", html)


def _remove_once(html: str, namespace: str) -> str:
    for literal in empty_block_literals(namespace):
        html = html.replace(literal, "")
    return remove_empty_paragraph_blocks(html, namespace)


def remove_empty_blocks(html: str, namespace: str = DEFAULT_NAMESPACE) -> str:
    """Remove known empty block shells and empty paragraph blocks.

    Removal repeats until nothing changes, so a removal that exposes a new
    empty shell is handled too and the function is idempotent.
    """
    while True:
        cleaned = _remove_once(html, namespace)
        if cleaned == html:
            return cleaned
        html = cleaned
