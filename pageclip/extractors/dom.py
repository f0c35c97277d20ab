"""Document query adapter and node decoders.

``query()`` is the only place the extractors touch the parsed tree.  Each
resolver hands it a CSS selector plus a *decode* function; decoders narrow a
node to the shape they expect and return ``None`` for anything else, so a
stray ``<div class="entry-title">`` where a ``<meta>`` was expected simply
produces no candidate.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator
from typing import Any, TypeVar
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

logger = logging.getLogger(__name__)

R = TypeVar("R")

Root = BeautifulSoup | Tag

# Attribute names used by pageclip.browser to record real natural image sizes.
NATURAL_WIDTH_ATTR = "data-pageclip-natural-width"
NATURAL_HEIGHT_ATTR = "data-pageclip-natural-height"


def query(
    selector: str,
    decode: Callable[[Tag], R | None],
    root: Root,
) -> Iterator[R]:
    """Yield non-None ``decode(el)`` for every element matching *selector*.

    Matching happens on first pull, in document order.
    """
    try:
        elements = root.select(selector)
    except (SelectorSyntaxError, ValueError) as exc:
        logger.debug("Selector %r failed: %s", selector, exc)
        return
    for element in elements:
        data = decode(element)
        if data is not None:
            yield data


# ---------------------------------------------------------------------------
# Safe downcasts
# ---------------------------------------------------------------------------

def as_element(node: Any) -> Tag | None:
    """Return *node* if it is an element (not text, comment or document)."""
    if isinstance(node, Tag) and not isinstance(node, BeautifulSoup):
        return node
    return None


def _as_tag_named(node: Any, name: str) -> Tag | None:
    el = as_element(node)
    if el is not None and (el.name or "").lower() == name:
        return el
    return None


def as_meta(node: Any) -> Tag | None:
    return _as_tag_named(node, "meta")


def as_link(node: Any) -> Tag | None:
    return _as_tag_named(node, "link")


def as_img(node: Any) -> Tag | None:
    return _as_tag_named(node, "img")


# ---------------------------------------------------------------------------
# Attribute helpers
# ---------------------------------------------------------------------------

def attr_str(el: Tag, name: str, default: str = "") -> str:
    """Read an attribute as a string; multi-valued attributes are space-joined."""
    val = el.get(name)
    if val is None:
        return default
    if isinstance(val, list):
        return " ".join(str(v) for v in val)
    return str(val)


def _attr_int(el: Tag, name: str) -> int | None:
    raw = attr_str(el, name).strip().lower().removesuffix("px")
    try:
        return int(float(raw))
    except (ValueError, OverflowError):
        return None


def base_url(root: Root, document_url: str = "") -> str:
    """Resolve the effective base URL: ``<base href>`` first, then *document_url*."""
    base = root.find("base", href=True)
    if isinstance(base, Tag):
        href = attr_str(base, "href").strip()
        if href:
            return urljoin(document_url, href)
    return document_url


# ---------------------------------------------------------------------------
# Decoders
# ---------------------------------------------------------------------------

def text_of(node: Any) -> str:
    """Text content of *node*; empty string for anything without text."""
    if isinstance(node, Tag):
        return node.get_text()
    if isinstance(node, str):
        return str(node)
    return ""


def get_text(el: Tag) -> str | None:
    text = text_of(el)
    return text if text.strip() else None


def get_content(el: Tag) -> str | None:
    meta = as_meta(el)
    if meta is None:
        return None
    content = attr_str(meta, "content").strip()
    return content or None


def get_src(el: Tag, base: str = "") -> str:
    img = as_img(el)
    if img is None:
        return ""
    src = attr_str(img, "src").strip()
    return urljoin(base, src) if src else ""


def get_href(el: Tag, base: str = "") -> str | None:
    link = as_link(el)
    if link is None:
        return None
    href = attr_str(link, "href").strip()
    return urljoin(base, href) if href else None


def natural_size(img: Tag) -> tuple[int, int]:
    """Best-known intrinsic size of an ``<img>``.

    Sizes recorded from a live browser win; otherwise the ``width`` and
    ``height`` attributes stand in.  Unknown dimensions read as 0.
    """
    width = _attr_int(img, NATURAL_WIDTH_ATTR)
    if width is None:
        width = _attr_int(img, "width")
    height = _attr_int(img, NATURAL_HEIGHT_ATTR)
    if height is None:
        height = _attr_int(img, "height")
    return width or 0, height or 0


def matches_class(el: Tag, pattern: re.Pattern[str]) -> bool:
    return pattern.search(attr_str(el, "class")) is not None
