"""pageclip.clipper - turn a loaded document into a :class:`ScrapeData` clip.

Things we can use, roughly in the order pages provide them reliably:

- ``<title>`` and headings
- meta description
- Twitter card meta tags (https://dev.twitter.com/cards/markup)
- Facebook Open Graph tags (https://developers.facebook.com/docs/sharing/webmasters#markup)
- hentry microformats
- favicon / touch icon links

Basic usage::

    from pageclip import ClipDocument, clip

    doc = ClipDocument.from_html(html, url="https://example.com/post")
    data = asyncio.run(clip(doc))
    print(data.title, data.hero)
"""

from __future__ import annotations

import asyncio
import functools
import logging

from bs4 import Tag

from pageclip.annotation import get_range_selector
from pageclip.document import ClipDocument
from pageclip.extractors.dom import as_element
from pageclip.extractors.icons import scrape_icon
from pageclip.extractors.images import find_hero_img_urls, is_img_size_at_least, scrape_hero_img_urls
from pageclip.extractors.lazy import concat, take
from pageclip.extractors.metadata import scrape_description, scrape_site_name, scrape_title
from pageclip.items import ArchiveData, ArchivedMessage, ScrapedMessage, ScrapeData
from pageclip.profiles import ClipSettings
from pageclip.selection import RangeSelection

logger = logging.getLogger(__name__)

_DEFAULT_SETTINGS = ClipSettings()


async def loaded(document: ClipDocument, timeout: float | None = None) -> None:
    """Wait for *document* to finish loading.

    Returns at once when it is already complete.  With *timeout* set, gives
    up after that many seconds and lets extraction run on the partial tree.
    """
    if document.ready_state == "complete":
        return

    loop = asyncio.get_running_loop()
    done: asyncio.Future[None] = loop.create_future()

    def listener(_event: str) -> None:
        document.remove_event_listener("load", listener)
        if not done.done():
            done.set_result(None)

    document.add_event_listener("load", listener)
    try:
        if timeout is None:
            await done
        else:
            await asyncio.wait_for(done, timeout)
    except TimeoutError:
        document.remove_event_listener("load", listener)
        logger.warning(
            "Document %s not loaded after %.1fs; clipping partial content",
            document.url, timeout,
        )


async def clip(document: ClipDocument, config: ClipSettings | None = None) -> ScrapeData:
    """Clip the active selection if there is one, otherwise the whole page."""
    selection = RangeSelection.get(document)
    if selection is not None:
        return await clip_selection(selection, config)
    return await clip_summary(document, config)


async def clip_summary(document: ClipDocument, config: ClipSettings | None = None) -> ScrapeData:
    cfg = config or _DEFAULT_SETTINGS
    await loaded(document, cfg.ready_timeout)

    root = document.document_element
    data = ScrapeData(
        url=document.url,
        icon=scrape_icon(root, document.base_url),
        hero=list(take(cfg.hero_limit, scrape_hero_img_urls(root, document.url))),
        title=scrape_title(root, cfg.title_fallback).strip(),
        description=scrape_description(root, cfg.description_fallback).strip(),
        name=scrape_site_name(root, cfg.name_fallback).strip(),
        selector=None,
    )
    logger.info("Clipped %s: %r (%d hero images)", data.url, data.title, len(data.hero))
    return data


def _is_selected_hero(selection: RangeSelection, cfg: ClipSettings, img: Tag) -> bool:
    return selection.contains_node(img) and is_img_size_at_least(
        img, cfg.selection_hero_min_width, cfg.selection_hero_min_height,
    )


async def clip_selection(
    selection: RangeSelection,
    config: ClipSettings | None = None,
) -> ScrapeData:
    """Clip the user's selection.

    Title, icon and site name still describe the whole page.  The
    description is the selected text and an image inside the selection
    beats any page-level hero image.
    """
    cfg = config or _DEFAULT_SETTINGS
    document = selection.document
    ranges = selection.ranges()
    if not ranges:
        return await clip_summary(document, cfg)

    root = document.document_element
    url = document.url
    icon = scrape_icon(root, document.base_url)
    title = scrape_title(root, cfg.title_fallback).strip()
    name = scrape_site_name(root, cfg.name_fallback).strip()

    first_range = ranges[0]
    ancestor = as_element(first_range.common_ancestor_container)

    # Images from the selected content first, then the page's own hero
    # images.  Only the first one is kept.
    if ancestor is None:
        imgs: list[str] = []
    else:
        imgs = list(find_hero_img_urls(
            ancestor,
            functools.partial(_is_selected_hero, selection, cfg),
            base=document.base_url,
        ))
    images = concat([imgs, scrape_hero_img_urls(root, url)])
    hero = list(take(1, images))

    description = selection.to_text().strip()
    selector = get_range_selector(first_range)

    data = ScrapeData(
        url=url,
        icon=icon,
        hero=hero,
        title=title,
        description=description,
        name=name,
        selector=[selector],
    )
    logger.info("Clipped selection on %s: %d chars", url, len(description))
    return data


def archive(document: ClipDocument) -> ArchiveData:
    """Snapshot the document's markup for the ``archived`` message."""
    return ArchiveData(url=document.url, data=document.serialize().encode("utf-8"))


def scraped_message(data: ScrapeData) -> ScrapedMessage:
    return ScrapedMessage(scraped=data)


def archived_message(data: ArchiveData) -> ArchivedMessage:
    return ArchivedMessage(archived=data)
