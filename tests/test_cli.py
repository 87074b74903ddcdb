"""Tests for the block-converter command line."""

from __future__ import annotations

import io

from block_converter.__main__ import main

EXPECTED = (
    "<!-- wp:paragraph --><p>Hello</p><!-- /wp:paragraph -->"
    "\n\n"
    '<!-- wp:heading {"level":2} --><h2>World</h2><!-- /wp:heading -->'
)


def test_convert_file_to_stdout(tmp_path, capsys):
    source = tmp_path / "post.html"
    source.write_text("<p>Hello</p><h2>World</h2>", encoding="utf-8")
    assert main([str(source), "--no-oembed"]) == 0
    assert capsys.readouterr().out == EXPECTED + "\n"


def test_convert_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("<p>Hello</p><h2>World</h2>"))
    assert main(["--no-oembed"]) == 0
    assert capsys.readouterr().out == EXPECTED + "\n"


def test_write_to_out_file(tmp_path, capsys):
    source = tmp_path / "post.html"
    source.write_text("<p>Hello</p><h2>World</h2>", encoding="utf-8")
    out = tmp_path / "post.blocks.html"
    assert main([str(source), "--out", str(out), "--no-oembed"]) == 0
    assert out.read_text(encoding="utf-8") == EXPECTED + "\n"
    assert capsys.readouterr().out == ""


def test_config_namespace(tmp_path, capsys):
    source = tmp_path / "post.html"
    source.write_text("<p>Hello</p>", encoding="utf-8")
    config = tmp_path / "settings.yaml"
    config.write_text("namespace: block\noembed:\n  enabled: false\n", encoding="utf-8")
    assert main([str(source), "--config", str(config)]) == 0
    assert capsys.readouterr().out == "<!-- block:paragraph --><p>Hello</p><!-- /block:paragraph -->\n"


def test_no_embeds_keeps_url_paragraph(tmp_path, capsys):
    source = tmp_path / "post.html"
    source.write_text("<p>https://www.instagram.com/p/abc/</p>", encoding="utf-8")
    assert main([str(source), "--no-embeds"]) == 0
    assert capsys.readouterr().out.startswith("<!-- wp:paragraph -->")


def test_bad_config_returns_2(tmp_path, capsys):
    config = tmp_path / "settings.yaml"
    config.write_text("unknown_key: 1\n", encoding="utf-8")
    assert main(["--config", str(config)]) == 2
    assert "Error" in capsys.readouterr().err


def test_missing_input_returns_2(tmp_path, capsys):
    assert main([str(tmp_path / "missing.html"), "--no-oembed"]) == 2
    assert "cannot read" in capsys.readouterr().err


def test_summary_goes_to_stderr(tmp_path, capsys):
    source = tmp_path / "post.html"
    source.write_text("<p>One</p><p>Two</p><h2>Three</h2>", encoding="utf-8")
    assert main([str(source), "--no-oembed", "--summary"]) == 0
    captured = capsys.readouterr()
    assert captured.out.count("<!-- wp:paragraph -->") == 2
    assert "Conversion Summary" in captured.err
    assert "paragraph" in captured.err
    assert "heading" in captured.err
