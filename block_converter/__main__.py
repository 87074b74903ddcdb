"""CLI entry point: python -m block_converter [INPUT] [options]"""

from __future__ import annotations

import argparse
import logging
import re
import sys
from collections import Counter
from pathlib import Path

from rich import box
from rich.console import Console
from rich.rule import Rule
from rich.table import Table

from block_converter.config import ConverterSettings, load_settings
from block_converter.converter import BlockConverter
from block_converter.exceptions import ConfigError

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="block-converter",
        description="Convert legacy HTML into comment-delimited block markup.",
    )
    parser.add_argument("input", nargs="?", default="-", metavar="INPUT",
                        help="HTML file to convert, or - for stdin (default: -)")
    parser.add_argument("--out", default=None, metavar="FILE",
                        help="Write the converted markup here (default: stdout)")
    parser.add_argument("--config", default=None, metavar="FILE",
                        help="YAML settings file")
    parser.add_argument("--base-url", default=None, metavar="URL",
                        help="Resolve relative image sources against this URL")
    parser.add_argument("--media-dir", default=None, metavar="DIR",
                        help="Download images into DIR and reference the stored copies")
    parser.add_argument("--media-base-url", default=None, metavar="URL",
                        help="Public URL prefix under which --media-dir is served")
    parser.add_argument("--no-embeds", action="store_true", default=False,
                        help="Keep bare URLs as paragraphs instead of embeds")
    parser.add_argument("--no-oembed", action="store_true", default=False,
                        help="Skip oEmbed lookups (Instagram/Facebook embeds still apply)")
    parser.add_argument("--summary", action="store_true", default=False,
                        help="Print a table of emitted block types to stderr")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        metavar="{DEBUG,INFO,WARNING,ERROR}",
                        help="Logging level (default: WARNING)")
    return parser


def _apply_overrides(settings: ConverterSettings, args: argparse.Namespace) -> ConverterSettings:
    """Return *settings* updated with the command-line flags that were given."""
    update: dict[str, object] = {}
    if args.base_url is not None:
        update["base_url"] = args.base_url
    if args.no_embeds:
        update["embeds"] = False

    oembed = settings.oembed
    if args.no_oembed:
        oembed = oembed.model_copy(update={"enabled": False})

    media = settings.media
    if args.media_dir is not None:
        media = media.model_copy(update={"directory": args.media_dir})
    if args.media_base_url is not None:
        media = media.model_copy(update={"base_url": args.media_base_url})

    update["oembed"] = oembed
    update["media"] = media
    return settings.model_copy(update=update)


def _count_blocks(markup: str, namespace: str) -> Counter[str]:
    pattern = re.compile(rf"<!-- {re.escape(namespace)}:([a-z][a-z0-9_/-]*)")
    return Counter(pattern.findall(markup))


def _print_summary(markup: str, namespace: str) -> None:
    console = Console(stderr=True)
    counts = _count_blocks(markup, namespace)

    console.print(Rule("[bold cyan]Conversion Summary[/bold cyan]"))
    console.print(f"  [bold]Blocks emitted :[/bold] [green]{sum(counts.values())}[/green]")
    console.print(f"  [bold]Output length  :[/bold] {len(markup):,} characters")

    if counts:
        tbl = Table(box=box.SIMPLE_HEAVY, show_lines=False)
        tbl.add_column("Block", style="cyan", no_wrap=True)
        tbl.add_column("Count", justify="right", no_wrap=True)
        for name, count in counts.most_common():
            tbl.add_row(name, str(count))
        console.print(tbl)


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        settings = _apply_overrides(load_settings(args.config), args)
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    try:
        html = _read_input(args.input)
    except OSError as exc:
        print(f"Error: cannot read {args.input}: {exc}", file=sys.stderr)
        return 2

    markup = BlockConverter.from_settings(settings).convert(html)

    if args.out:
        Path(args.out).write_text(markup + "\n", encoding="utf-8")
        logger.info("Wrote %d characters to %s", len(markup), args.out)
    else:
        sys.stdout.write(markup + "\n")

    if args.summary:
        _print_summary(markup, settings.namespace)
    return 0


if __name__ == "__main__":
    sys.exit(main())
