"""block_converter.rules — Registry for caller-supplied tag rules.

A tag rule takes one top-level node and returns a :class:`Block`, or None to
drop the node.  A registered rule fully replaces the built-in handling for
its tag name::

    from block_converter import Block, register_tag_rule

    def figure_rule(node):
        return Block("image", {}, str(node))

    register_tag_rule("figure", figure_rule)

The registry is process-wide.  Registration replaces any earlier rule for the
same tag; lookups read a snapshot and never observe a partial update.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from bs4.element import PageElement

    from block_converter.block import Block

TagRule = Callable[["PageElement"], Optional["Block"]]

# ---------------------------------------------------------------------------
# Module-level registry
# ---------------------------------------------------------------------------

_lock = threading.Lock()
_registry: dict[str, TagRule] = {}


def _normalize_tag(tag: str) -> str:
    if not isinstance(tag, str) or not tag.strip():
        raise ValueError(f"Tag name must be a non-empty string, got {tag!r}")
    return tag.strip().lower()


# ---------------------------------------------------------------------------
# Registration helpers
# ---------------------------------------------------------------------------

def register_tag_rule(tag: str, rule: TagRule) -> None:
    """Register *rule* for *tag*, replacing any earlier registration."""
    if not callable(rule):
        raise TypeError(f"Tag rule for {tag!r} must be callable")
    key = _normalize_tag(tag)
    global _registry
    with _lock:
        # Copy-on-write so concurrent readers keep a consistent snapshot.
        updated = dict(_registry)
        updated[key] = rule
        _registry = updated


def unregister_tag_rule(tag: str) -> None:
    """Remove the rule registered for *tag*, if any."""
    key = _normalize_tag(tag)
    global _registry
    with _lock:
        if key in _registry:
            updated = dict(_registry)
            del updated[key]
            _registry = updated


# ---------------------------------------------------------------------------
# Accessor helpers
# ---------------------------------------------------------------------------

def get_tag_rule(tag: str) -> TagRule | None:
    """Return the registered rule for *tag*, or None."""
    return _registry.get(tag.lower())


def has_tag_rule(tag: str) -> bool:
    return tag.lower() in _registry


def get_tag_rules() -> dict[str, TagRule]:
    """Return a copy of every registered rule keyed by tag name."""
    return dict(_registry)


def clear_tag_rules() -> None:
    """Remove all registered rules. Primarily for use in tests."""
    global _registry
    with _lock:
        _registry = {}
