"""Hero image resolution.

Hand-curated social images (Open Graph, then Twitter Card) come first; only
when those run short do we dig through ``<img>`` elements ourselves.
Duplicates across sources are kept.
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterator

from bs4 import Tag

from pageclip import settings
from pageclip.extractors.dom import Root, as_img, base_url, get_content, get_src, natural_size, query
from pageclip.extractors.lazy import concat, filter_seq, map_seq, take


def is_img_size_at_least(img: Tag, w: int, h: int) -> bool:
    """Strictly larger than ``w x h`` on both axes."""
    width, height = natural_size(img)
    return width > w and height > h


def is_img_hero_size(img: Tag) -> bool:
    return is_img_size_at_least(img, settings.HERO_MIN_WIDTH, settings.HERO_MIN_HEIGHT)


def _isnt_empty(text: str) -> bool:
    return text != ""


# See https://developers.facebook.com/docs/sharing/webmasters#images.
# The two properties are equivalent.
def query_open_graph_img_urls(el: Root) -> Iterator[str]:
    return query(
        'meta[property="og:image"], meta[property="og:image:url"]',
        get_content,
        el,
    )


# See https://dev.twitter.com/cards/markup.
def query_twitter_img_urls(el: Root) -> Iterator[str]:
    return query(
        'meta[name="twitter:image"], '
        'meta[name="twitter:image:src"], '
        'meta[name="twitter:image0"], '
        'meta[name="twitter:image1"], '
        'meta[name="twitter:image2"], '
        'meta[name="twitter:image3"]',
        get_content,
        el,
    )


def find_hero_img_urls(
    el: Root,
    is_qualified: Callable[[Tag], bool] = is_img_hero_size,
    base: str = "",
) -> Iterator[str]:
    """Absolute ``src`` of up to 4 content images that pass *is_qualified*."""
    candidates = query("img", as_img, el)
    hero_sized = filter_seq(is_qualified, candidates)
    urls = map_seq(functools.partial(get_src, base=base), hero_sized)
    return take(settings.HERO_LIMIT, filter_seq(_isnt_empty, urls))


def scrape_hero_img_urls(el: Root, document_url: str = "") -> Iterator[str]:
    """Lazily yield up to 4 hero image URLs for the page.

    Open Graph and Twitter queries are kept separate so a site carrying both
    yields its Open Graph image first.
    """
    base = base_url(el, document_url)
    all_urls = concat([
        query_open_graph_img_urls(el),
        query_twitter_img_urls(el),
        find_hero_img_urls(el, base=base),
    ])
    return take(settings.HERO_LIMIT, all_urls)


def is_img_combo(img_urls: list[str]) -> bool:
    """Four or more images are shown as a combination, otherwise just the first."""
    return len(img_urls) > 3
