"""Tests for block_converter.rules — caller-registered tag rules."""

from __future__ import annotations

import threading

import pytest

from block_converter import Block, BlockConverter, convert
from block_converter.rules import (
    clear_tag_rules,
    get_tag_rule,
    get_tag_rules,
    has_tag_rule,
    register_tag_rule,
    unregister_tag_rule,
)


def _section_rule(node):
    return Block("group", {"tagName": "section"}, node.decode_contents())


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:
    def test_register_and_get(self):
        register_tag_rule("section", _section_rule)
        assert get_tag_rule("section") is _section_rule
        assert has_tag_rule("section")

    def test_tag_names_are_case_insensitive(self):
        register_tag_rule("SECTION", _section_rule)
        assert get_tag_rule("section") is _section_rule
        assert get_tag_rule("Section") is _section_rule

    def test_last_registration_wins(self):
        first = lambda node: None  # noqa: E731
        second = lambda node: None  # noqa: E731
        register_tag_rule("aside", first)
        register_tag_rule("aside", second)
        assert get_tag_rule("aside") is second

    def test_unregister(self):
        register_tag_rule("aside", _section_rule)
        unregister_tag_rule("aside")
        assert get_tag_rule("aside") is None
        unregister_tag_rule("aside")  # no error when absent

    def test_clear(self):
        register_tag_rule("aside", _section_rule)
        register_tag_rule("section", _section_rule)
        clear_tag_rules()
        assert get_tag_rules() == {}

    def test_get_tag_rules_is_a_copy(self):
        register_tag_rule("aside", _section_rule)
        snapshot = get_tag_rules()
        snapshot["nav"] = _section_rule
        assert get_tag_rule("nav") is None

    def test_non_callable_rejected(self):
        with pytest.raises(TypeError):
            register_tag_rule("aside", "not callable")

    @pytest.mark.parametrize("tag", ["", "   ", None])
    def test_empty_tag_rejected(self, tag):
        with pytest.raises(ValueError):
            register_tag_rule(tag, _section_rule)

    def test_concurrent_registration(self):
        def worker(i: int) -> None:
            register_tag_rule(f"x-tag-{i}", _section_rule)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(get_tag_rules()) == 20


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


class TestDispatch:
    def test_unregistered_tag_uses_html_fallback(self):
        assert convert("<section>Hi</section>") == "<!-- wp:html --><section>Hi</section><!-- /wp:html -->"

    def test_registered_rule_replaces_fallback(self):
        register_tag_rule("section", _section_rule)
        assert convert("<section>Hi</section>") == (
            '<!-- wp:group {"tagName":"section"} -->Hi<!-- /wp:group -->'
        )

    def test_registered_rule_overrides_builtin(self):
        register_tag_rule("p", lambda node: Block("verse", {}, f"<pre>{node.get_text()}</pre>"))
        assert convert("<p>Roses</p>") == "<!-- wp:verse --><pre>Roses</pre><!-- /wp:verse -->"

    def test_registered_rule_can_drop(self):
        register_tag_rule("h1", lambda node: None)
        assert convert("<h1>Gone</h1><p>Stay</p>") == (
            "<!-- wp:paragraph --><p>Stay</p><!-- /wp:paragraph -->"
        )

    def test_registered_rule_output_is_normalized(self):
        register_tag_rule("aside", lambda node: Block("paragraph", {}, "<p>   </p>"))
        assert convert("<aside>x</aside>") == ""

    def test_registered_rule_for_dropped_tag(self):
        register_tag_rule("br", lambda node: Block("spacer", {"height": "20px"}))
        assert convert("<br>") == '<!-- wp:spacer {"height":"20px"} /-->'

    def test_registration_applies_to_existing_converter(self):
        converter = BlockConverter()
        assert converter.convert("<aside>x</aside>").startswith("<!-- wp:html -->")
        register_tag_rule("aside", lambda node: Block("group", {}, node.decode_contents()))
        assert converter.convert("<aside>x</aside>") == "<!-- wp:group -->x<!-- /wp:group -->"

    def test_get_rule_falls_back_to_html_block(self):
        converter = BlockConverter()
        assert converter.get_rule("marquee") == converter.html_block
        assert converter.get_rule("h2") == converter.heading
