"""Favicon discovery.

All icon relations are matched with one combined selector, so icons come
out in document order.  ``scrape_icons(..., by_priority=True)`` re-orders
them by relation instead.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import math
from collections.abc import Awaitable, Callable, Iterator
from enum import StrEnum

from bs4 import Tag

from pageclip.blob import Blob, create_blob_url, read_as_data_url
from pageclip.extractors.dom import Root, as_link, attr_str, get_href, query
from pageclip.extractors.lazy import first, map_seq
from pageclip.fetch import fetch_blob

logger = logging.getLogger(__name__)


class IconRel(StrEnum):
    icon = "icon"
    shortcut_icon = "shortcut icon"
    apple_touch_icon = "apple-touch-icon"
    apple_touch_icon_precomposed = "apple-touch-icon-precomposed"
    mask_icon = "mask-icon"


ICON_REL_PRIORITY: tuple[IconRel, ...] = (
    IconRel.shortcut_icon,
    IconRel.apple_touch_icon,
    IconRel.apple_touch_icon_precomposed,
    IconRel.mask_icon,
    IconRel.icon,
)

_ICON_SELECTOR = ", ".join(f'link[rel="{rel.value}"]' for rel in ICON_REL_PRIORITY)

Size = tuple[float, float]
BlobFetcher = Callable[[str], Awaitable[Blob]]


async def _default_fetcher(url: str) -> Blob:
    return await fetch_blob(url, cache="force-cache", redirect="follow")


class Icon:
    """A ``<link>`` icon declaration whose bytes are fetched on demand.

    The first ``to_blob()`` call starts the fetch; every later or concurrent
    call awaits the same task, so an instance fetches at most once.
    """

    def __init__(
        self,
        link: Tag,
        base_url: str = "",
        fetcher: BlobFetcher | None = None,
    ) -> None:
        self.source_element = link
        self._base_url = base_url
        self._fetcher = fetcher or _default_fetcher
        self._blob_cache: asyncio.Future[Blob] | None = None

    @classmethod
    def decode(cls, el: Tag, base_url: str = "") -> Icon | None:
        link = as_link(el)
        if link is None:
            return None
        return cls(link, base_url)

    def __repr__(self) -> str:
        return f"Icon(rel={self.rel!r}, href={self.href!r})"

    @property
    def type(self) -> str:
        return attr_str(self.source_element, "type")

    @property
    def rel(self) -> str:
        return attr_str(self.source_element, "rel")

    @property
    def href(self) -> str:
        return get_href(self.source_element, self._base_url) or ""

    def sizes(self) -> Iterator[Size]:
        for entry in attr_str(self.source_element, "sizes").split():
            if entry.lower() == "any":
                yield (math.inf, math.inf)
                continue
            width, sep, height = entry.lower().partition("x")
            if not sep or not width.isdigit() or not height.isdigit():
                logger.debug("Skipping malformed icon size %r", entry)
                continue
            yield (int(width), int(height))

    async def to_blob(self) -> Blob:
        if self._blob_cache is None:
            self._blob_cache = asyncio.ensure_future(self._fetcher(self.href))
        return await asyncio.shield(self._blob_cache)

    async def to_blob_url(self) -> str:
        blob = await self.to_blob()
        return create_blob_url(blob)

    async def to_data_url(self) -> str:
        blob = await self.to_blob()
        return await read_as_data_url(blob)


def _rel_rank(icon: Icon) -> int:
    for rank, rel in enumerate(ICON_REL_PRIORITY):
        if icon.rel.lower() == rel.value:
            return rank
    return len(ICON_REL_PRIORITY)


def scrape_icons(el: Root, base_url: str = "", *, by_priority: bool = False) -> Iterator[Icon]:
    icons = query(_ICON_SELECTOR, functools.partial(Icon.decode, base_url=base_url), el)
    if by_priority:
        return iter(sorted(icons, key=_rel_rank))
    return icons


def scrape_icon(el: Root, base_url: str = "") -> str | None:
    return first(map_seq(lambda icon: icon.href, scrape_icons(el, base_url)), None)
