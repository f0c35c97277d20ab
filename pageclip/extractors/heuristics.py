"""Deterministic heuristics for telling prose apart from page furniture.

The score is crude and is only ever combined with the class
blacklist and link density in ``is_description_candidate``.
"""

from __future__ import annotations

import re

from bs4 import Tag

from pageclip import settings
from pageclip.extractors.dom import matches_class, query, text_of
from pageclip.extractors.lazy import reduce_seq

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

UNLIKELY_CONTENT_CLASSNAMES: re.Pattern[str] = re.compile(
    r"date|social|community|remark|discuss|disqus|e-?mail|rss|print|extra|share"
    r"|login|sign|reply|combx|comment|com-|contact|header|menu|foot|footer"
    r"|footnote|masthead|media|meta|outbrain|promo|related|scroll|shoutbox"
    r"|sidebar|sponsor|shopping|tags|tool|widget|ad-break|agegate|pagination"
    r"|pager|popup|tweet|twitter",
    re.IGNORECASE,
)


# ---------------------------------------------------------------------------
# Text scoring
# ---------------------------------------------------------------------------

def score_contentyness(text: str) -> int:
    """Score how content-y a string looks.

    Strings under 25 characters score 0.  Otherwise the score starts at 1,
    gains one point per comma-delimited part and one per 100 characters
    (capped at 3).
    """
    if len(text) < settings.MIN_CONTENT_LENGTH:
        return 0
    score = 1
    score += len(text.split(","))
    score += min(len(text) // 100, 3)
    return score


def score_el_contentyness(el: Tag) -> int:
    return score_contentyness(text_of(el))


def is_sufficiently_contenty(el: Tag, base: int = settings.CONTENTYNESS_BASELINE) -> bool:
    return score_el_contentyness(el) > base


def is_sufficiently_long(text: str) -> bool:
    return len(text) > settings.MIN_CONTENT_LENGTH


def is_text_sufficiently_long(el: Tag) -> bool:
    return is_sufficiently_long(text_of(el))


def count_words(text: str) -> int:
    return len(text.split())


# ---------------------------------------------------------------------------
# Element signals
# ---------------------------------------------------------------------------

def is_unlikely_candidate(el: Tag) -> bool:
    return matches_class(el, UNLIKELY_CONTENT_CLASSNAMES)


def _el_text_length(el: Tag) -> int:
    return len(text_of(el))


def calc_link_density(el: Tag) -> float:
    """Ratio of text inside descendant ``<a>`` elements to the element's text."""
    text_size = _el_text_length(el)
    if text_size == 0:
        return 0.0
    link_size = reduce_seq(lambda size, total: total + size, 0, query("a", _el_text_length, el))
    return link_size / text_size


def is_high_link_density(el: Tag) -> bool:
    return calc_link_density(el) > settings.MAX_LINK_DENSITY


def is_description_candidate(el: Tag) -> bool:
    """True when *el* reads like article prose rather than boilerplate."""
    return (
        not is_unlikely_candidate(el)
        and is_text_sufficiently_long(el)
        and not is_high_link_density(el)
        and is_sufficiently_contenty(el)
    )
