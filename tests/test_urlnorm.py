"""Unit tests for URL helpers."""

from __future__ import annotations

import pytest

from block_converter.urlnorm import (
    extract_host,
    first_srcset_candidate,
    is_absolute_url,
    resolve_relative,
    rewrite_embed_host,
    slugify,
    strip_url_args,
)


class TestIsAbsoluteUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com",
            "http://example.com/post?id=1",
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "ftp://files.example.com/a.txt",
        ],
    )
    def test_valid(self, url):
        assert is_absolute_url(url) is True

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "example.com",
            "/relative/path",
            "mailto:someone@example.com",
            "https://example.com with words",
            " https://example.com",
            "https://",
            "not a url",
            "https://x.com:99999/status/1",
            "https://example.com:abc/",
        ],
    )
    def test_invalid(self, text):
        assert is_absolute_url(text) is False


class TestStripUrlArgs:
    def test_removes_query_and_fragment(self):
        assert strip_url_args("https://cdn.example.com/a/b.jpg?w=300&h=200#top") == (
            "https://cdn.example.com/a/b.jpg"
        )

    def test_keeps_port(self):
        assert strip_url_args("http://cdn.example.com:8080/b.jpg?x=1") == "http://cdn.example.com:8080/b.jpg"

    def test_drops_credentials(self):
        assert strip_url_args("https://user:pw@cdn.example.com/b.jpg") == "https://cdn.example.com/b.jpg"

    def test_missing_path_is_empty(self):
        assert strip_url_args("https://cdn.example.com") == ""

    def test_missing_scheme_is_empty(self):
        assert strip_url_args("//cdn.example.com/b.jpg") == ""
        assert strip_url_args("/images/b.jpg") == ""

    def test_empty_input(self):
        assert strip_url_args("") == ""

    def test_invalid_port_is_empty(self):
        assert strip_url_args("https://cdn.example.com:notaport/b.jpg") == ""


class TestRewriteEmbedHost:
    @pytest.mark.parametrize("host", ["x.com", "www.x.com", "X.com"])
    def test_rewrites_x_hosts(self, host):
        assert rewrite_embed_host(f"https://{host}/user/status/1") == "https://twitter.com/user/status/1"

    def test_keeps_port_and_query(self):
        assert rewrite_embed_host("https://x.com:8443/a?b=1") == "https://twitter.com:8443/a?b=1"

    @pytest.mark.parametrize(
        "url",
        ["https://x.company.com/a", "https://box.com/a", "https://twitter.com/a"],
    )
    def test_other_hosts_untouched(self, url):
        assert rewrite_embed_host(url) == url

    @pytest.mark.parametrize("url", ["https://x.com:99999/a", "https://x.com:abc/a"])
    def test_malformed_port_untouched(self, url):
        assert rewrite_embed_host(url) == url


class TestSlugify:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("YouTube", "youtube"),
            ("Amazon Kindle", "amazon-kindle"),
            ("Café Society!", "cafe-society"),
            ("  WordPress.tv  ", "wordpress-tv"),
            ("", ""),
        ],
    )
    def test_slugs(self, name, expected):
        assert slugify(name) == expected


def test_extract_host():
    assert extract_host("https://WWW.Instagram.com:443/p/1") == "www.instagram.com"
    assert extract_host("not a url") == ""


def test_resolve_relative():
    assert resolve_relative("/a.jpg", "https://example.com/blog/") == "https://example.com/a.jpg"
    assert resolve_relative("a.jpg", "https://example.com/blog/") == "https://example.com/blog/a.jpg"
    assert resolve_relative("/a.jpg") == "/a.jpg"
    assert resolve_relative("", "https://example.com/") == ""


def test_first_srcset_candidate():
    assert first_srcset_candidate("a.jpg 1x, b.jpg 2x") == "a.jpg"
    assert first_srcset_candidate("  https://e.com/a.jpg 480w ") == "https://e.com/a.jpg"
    assert first_srcset_candidate("") == ""
