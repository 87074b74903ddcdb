"""Block value object and its comment-delimited serialization.

A rendered block looks like::

    <!-- wp:heading {"level":2} --><h2>Title</h2><!-- /wp:heading -->

Blocks without content collapse to the self-closing form
``<!-- wp:separator /-->``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

DEFAULT_NAMESPACE = "wp"

# Block names in the default namespace are written without their prefix.
_CORE_PREFIX = "core/"

# Sequences that would let attribute JSON break out of the HTML comment.
_ATTRIBUTE_ESCAPES: tuple[tuple[str, str], ...] = (
    ("--", "\\u002d\\u002d"),
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
    ('\\"', "\\u0022"),
)


def serialize_attributes(attributes: dict[str, Any]) -> str:
    """Encode *attributes* as compact JSON that is safe inside an HTML comment."""
    encoded = json.dumps(attributes, ensure_ascii=False, separators=(",", ":"))
    for needle, replacement in _ATTRIBUTE_ESCAPES:
        encoded = encoded.replace(needle, replacement)
    return encoded


def strip_core_prefix(name: str) -> str:
    if name.startswith(_CORE_PREFIX):
        return name[len(_CORE_PREFIX):]
    return name


def comment_delimited(
    name: str,
    attributes: dict[str, Any] | None = None,
    content: str | None = None,
    namespace: str = DEFAULT_NAMESPACE,
) -> str:
    """Wrap *content* in the opening and closing block comments for *name*."""
    name = strip_core_prefix(name)
    attrs = f"{serialize_attributes(attributes)} " if attributes else ""

    if not content:
        return f"<!-- {namespace}:{name} {attrs}/-->"

    return f"<!-- {namespace}:{name} {attrs}-->{content}<!-- /{namespace}:{name} -->"


@dataclass
class Block:
    """A named, attributed unit of converted markup.

    ``content`` holds literal inner HTML and is never re-escaped on render.
    Rules and the per-node override hook may mutate ``attributes`` and
    ``content`` freely before the block is rendered.
    """

    name: str
    attributes: dict[str, Any] = field(default_factory=dict)
    content: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Block name must not be empty")

    def render(self, namespace: str = DEFAULT_NAMESPACE) -> str:
        """Return the comment-delimited textual form of this block."""
        return comment_delimited(self.name, self.attributes, self.content, namespace)

    def __str__(self) -> str:
        return self.render()
