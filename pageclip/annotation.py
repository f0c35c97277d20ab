"""Serializable anchors for document ranges.

``get_range_selector`` describes a :class:`~pageclip.selection.Range` as a
W3C Web Annotation ``TextQuoteSelector``; ``resolve_selector`` turns a quote
or position selector back into a range over the same (or a re-fetched) page.

See https://www.w3.org/TR/annotation-model/#selectors.
"""

from __future__ import annotations

import logging

from pageclip.document import ClipDocument
from pageclip.items import Selector, TextPositionSelector, TextQuoteSelector
from pageclip.selection import Boundary, Range, select

logger = logging.getLogger(__name__)

# Characters of context stored on each side of a quote.
CONTEXT_LENGTH = 32


def get_range_selector(range_: Range) -> TextQuoteSelector:
    index = range_.document.tree_index()
    text = index.text()
    start = index.text_offset(range_.start_point)
    end = index.text_offset(range_.end_point)
    return TextQuoteSelector(
        exact=text[start:end],
        prefix=text[max(0, start - CONTEXT_LENGTH):start],
        suffix=text[end:end + CONTEXT_LENGTH],
    )


def _range_from_offsets(document: ClipDocument, start: int, end: int) -> Range | None:
    index = document.tree_index()
    start_loc = index.locate(start)
    end_loc = index.locate(end, prefer_end=True)
    if start_loc is None or end_loc is None:
        return None
    return Range(document, Boundary(*start_loc), Boundary(*end_loc))


def _quote_offset(text: str, selector: TextQuoteSelector) -> int | None:
    """Offset of the occurrence of ``exact`` whose context fits best."""
    best: int | None = None
    best_score = -1
    pos = text.find(selector.exact)
    while pos != -1:
        score = 0
        if selector.prefix and text[:pos].endswith(selector.prefix):
            score += 2
        if selector.suffix and text[pos + len(selector.exact):].startswith(selector.suffix):
            score += 1
        if score > best_score:
            best, best_score = pos, score
        pos = text.find(selector.exact, pos + 1)
    return best


def resolve_selector(document: ClipDocument, selector: Selector) -> Range | None:
    """Find the range *selector* points at in *document*, or None."""
    if isinstance(selector, TextPositionSelector):
        if selector.end < selector.start:
            return None
        return _range_from_offsets(document, selector.start, selector.end)

    if not selector.exact:
        return None
    text = document.tree_index().text()
    start = _quote_offset(text, selector)
    if start is None:
        logger.debug("Quote not found in %s: %r", document.url, selector.exact[:40])
        return None
    return _range_from_offsets(document, start, start + len(selector.exact))


def select_text(
    document: ClipDocument,
    exact: str,
    prefix: str = "",
    suffix: str = "",
) -> Range | None:
    """Select the first matching quote in *document*; None if it is absent."""
    range_ = resolve_selector(document, TextQuoteSelector(exact=exact, prefix=prefix, suffix=suffix))
    if range_ is not None:
        select(document, range_)
    return range_
