"""CLI entry point: python -m pageclip --url URL [options]"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from pageclip import settings
from pageclip.annotation import select_text
from pageclip.clipper import clip, scraped_message
from pageclip.document import ClipDocument
from pageclip.extractors.icons import scrape_icons
from pageclip.extractors.images import is_img_combo
from pageclip.fetch import FetchError, fetch_bytes
from pageclip.items import ScrapedMessage
from pageclip.profiles import ClipSettings, ProfileError, load_profile

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pageclip",
        description=(
            "Clip a web page: title, description, site name, hero images and icon.\n"
            "Narrow the clip to a passage with --quote."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--url", metavar="URL",
                        help="Page to fetch and clip")
    source.add_argument("--file", metavar="PATH",
                        help="Local HTML file to clip")
    parser.add_argument("--base-url", default="", metavar="URL",
                        help="Document URL to assume for --file (default: none)")
    parser.add_argument("--quote", default=None, metavar="TEXT",
                        help="Clip only the first passage matching this text")
    parser.add_argument("--render-js", action="store_true", default=False,
                        help="Load --url in headless Chromium (requires playwright)")
    parser.add_argument("--profile", default=None, metavar="PATH",
                        help="YAML profile with per-domain clip settings")
    parser.add_argument("--icon-data", action="store_true", default=False,
                        help="Fetch the icon and embed it as a data: URL")
    parser.add_argument("--pretty", action="store_true", default=False,
                        help="Render the result with Rich instead of raw JSON")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        metavar="{DEBUG,INFO,WARNING,ERROR}",
                        help=f"Logging level (default: {settings.LOG_LEVEL})")
    return parser


def _load_document(args: argparse.Namespace) -> ClipDocument:
    if args.file:
        html = Path(args.file).read_bytes()
        return ClipDocument.from_html(html, url=args.base_url)
    if args.render_js:
        from pageclip.browser import render

        return render(args.url, timeout=settings.FETCH_TIMEOUT)
    blob = fetch_bytes(args.url)
    return ClipDocument.from_html(blob.data, url=args.url)


async def _icon_data_url(doc: ClipDocument) -> str | None:
    icon = next(scrape_icons(doc.document_element, doc.base_url), None)
    if icon is None:
        return None
    try:
        return await icon.to_data_url()
    except FetchError as exc:
        logger.warning("Could not fetch icon %s: %s", icon.href, exc)
        return None


async def _run(doc: ClipDocument, config: ClipSettings, icon_data: bool) -> ScrapedMessage:
    data = await clip(doc, config)
    if icon_data:
        embedded = await _icon_data_url(doc)
        if embedded is not None:
            data = data.model_copy(update={"icon": embedded})
    return scraped_message(data)


def _print_pretty(message: ScrapedMessage) -> None:
    from rich.console import Console
    from rich.table import Table

    data = message.scraped
    console = Console()
    tbl = Table(title=f"[bold cyan]{data.title or data.url}[/bold cyan]", show_header=False)
    tbl.add_column("Field", style="bold")
    tbl.add_column("Value", overflow="fold")
    tbl.add_row("URL", data.url)
    tbl.add_row("Site", data.name)
    tbl.add_row("Description", data.description)
    tbl.add_row("Icon", (data.icon or "")[:120])
    layout = "combo" if is_img_combo(data.hero) else "single"
    for i, url in enumerate(data.hero):
        tbl.add_row(f"Hero {i + 1} ({layout})" if i == 0 else f"Hero {i + 1}", url)
    if data.selector:
        tbl.add_row("Selector", json.dumps([s.model_dump() for s in data.selector]))
    console.print(tbl)


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level, format=settings.LOG_FORMAT, stream=sys.stderr)

    if args.render_js and not args.url:
        print("ERROR: --render-js needs --url", file=sys.stderr)
        return 1

    try:
        doc = _load_document(args)
    except (FetchError, OSError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    config = ClipSettings()
    if args.profile:
        try:
            config = load_profile(args.profile, doc.url)
        except ProfileError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1

    if args.quote is not None and select_text(doc, args.quote) is None:
        print(f"ERROR: Quote not found in document: {args.quote!r}", file=sys.stderr)
        return 1

    message = asyncio.run(_run(doc, config, args.icon_data))

    if args.pretty:
        _print_pretty(message)
    else:
        print(message.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
