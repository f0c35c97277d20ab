"""Title, description and site-name resolution.

Each resolver is a priority chain (highest -> lowest):

    title:        og:title / twitter:title -> hentry title -> <title> -> h1-h3
    description:  twitter:description -> og:description -> hentry summary
                  -> meta description -> first content-y paragraph
    site name:    application-name -> og:site_name -> twitter:site

Sources are lazy; a later source only runs when every earlier one came up
empty.
"""

from __future__ import annotations

import re
from collections.abc import Iterator

from bs4 import Tag

from pageclip.extractors.dom import Root, get_content, get_text, query, text_of
from pageclip.extractors.heuristics import count_words, is_description_candidate
from pageclip.extractors.lazy import concat, filter_seq, first, identity, map_seq

# ---------------------------------------------------------------------------
# Title cleaning
# ---------------------------------------------------------------------------

_SEPARATOR_RE = re.compile(r"\s[|\-:]\s")
_TRAILING_SECTION_RE = re.compile(r"(.*)[|\-:] .*")
_LEADING_SECTION_RE = re.compile(r"[^|\-]*[|\-](.*)")


def clean_title(text: str) -> str:
    """Strip "| Site Name"-style suffixes from a document title.

    ``"My Great Post | My Blog"`` becomes ``"My Great Post"``.  When the
    suffix split leaves fewer than 3 words the part after the first bare
    ``|``/``-`` is tried instead, and kept only if it has at least 5 words.
    """
    title = text
    if _SEPARATOR_RE.search(text):
        title = _TRAILING_SECTION_RE.sub(r"\1", text)

        if count_words(title) < 3:
            title = _LEADING_SECTION_RE.sub(r"\1", text)

            # Fall back to the raw title if word count is too short.
            if count_words(title) < 5:
                title = text

    return title.strip()


def get_clean_text(el: Tag) -> str | None:
    text = get_text(el)
    return clean_title(text) if text is not None else None


# ---------------------------------------------------------------------------
# Title
# ---------------------------------------------------------------------------

def scrape_title(el: Root, fallback: str = "Untitled") -> str:
    """Find a good title within the page.  Usage: ``scrape_title(soup, "Untitled")``."""
    candidates = concat([
        query('meta[property="og:title"], meta[name="twitter:title"]', get_content, el),
        # hentry microformats.  On a listing page this is the first entry's
        # title, which is what a reader sees first anyway.
        query(".entry-title, .h-entry .p-name", get_text, el),
        query("title", get_clean_text, el),
        query("h1, h2, h3", get_text, el),
    ])
    return first(candidates, fallback)


# ---------------------------------------------------------------------------
# Description
# ---------------------------------------------------------------------------

def scrape_description_from_content(el: Root) -> Iterator[str]:
    """Text of every paragraph that reads like prose, in document order."""
    paragraphs = query("p", identity, el)
    qualified = filter_seq(is_description_candidate, paragraphs)
    return map_seq(text_of, qualified)


def scrape_description(el: Root, fallback: str = "") -> str:
    candidates = concat([
        # Social descriptions are written for readers, meta description for
        # search bots.
        query('meta[name="twitter:description"]', get_content, el),
        query('meta[property="og:description"]', get_content, el),
        query(".entry-summary, .h-entry .p-summary", get_text, el),
        query("meta[name=description]", get_content, el),
        scrape_description_from_content(el),
    ])
    return first(candidates, fallback)


# ---------------------------------------------------------------------------
# Site name
# ---------------------------------------------------------------------------

def scrape_site_name(el: Root, fallback: str = "") -> str:
    """Find the site name.  The site's base URL is usually the best fallback."""
    candidates = concat([
        query('meta[name="application-name"]', get_content, el),
        query('meta[property="og:site_name"]', get_content, el),
        # Note this is a Twitter @handle.
        query('meta[name="twitter:site"]', get_content, el),
    ])
    return first(candidates, fallback)
