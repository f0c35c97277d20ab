"""pageclip - summarize a web page, or a highlighted passage of it, as a clip.

Quick usage::

    import asyncio
    from pageclip import ClipDocument, clip

    doc = ClipDocument.from_html(html, url="https://example.com/blog/some-post")
    data = asyncio.run(clip(doc))
    print(data.title, data.description, data.hero)

Clipping a selection::

    from pageclip import select_text

    select_text(doc, "the passage the user highlighted")
    data = asyncio.run(clip(doc))
    print(data.selector)
"""

from pageclip.annotation import get_range_selector, resolve_selector, select_text
from pageclip.blob import Blob, read_as_data_url
from pageclip.clipper import (
    archive,
    archived_message,
    clip,
    clip_selection,
    clip_summary,
    loaded,
    scraped_message,
)
from pageclip.document import ClipDocument
from pageclip.extractors.icons import Icon
from pageclip.fetch import FetchError, fetch_blob
from pageclip.items import (
    ArchiveData,
    ArchivedMessage,
    ScrapeData,
    ScrapedMessage,
    TextPositionSelector,
    TextQuoteSelector,
    parse_host_message,
)
from pageclip.profiles import ClipSettings, ProfileError, load_profile
from pageclip.selection import Boundary, Range, RangeSelection, select

__version__ = "0.1.0"
__all__ = [
    "ArchiveData",
    "ArchivedMessage",
    "Blob",
    "Boundary",
    "ClipDocument",
    "ClipSettings",
    "FetchError",
    "Icon",
    "ProfileError",
    "Range",
    "RangeSelection",
    "ScrapeData",
    "ScrapedMessage",
    "TextPositionSelector",
    "TextQuoteSelector",
    "archive",
    "archived_message",
    "clip",
    "clip_selection",
    "clip_summary",
    "fetch_blob",
    "get_range_selector",
    "load_profile",
    "loaded",
    "parse_host_message",
    "read_as_data_url",
    "resolve_selector",
    "scraped_message",
    "select",
    "select_text",
]
