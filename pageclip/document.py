"""In-memory document model.

A :class:`ClipDocument` is a parsed page (BeautifulSoup over ``lxml``) plus
what a browser would know about it: its URL, ready state, a one-shot
``load`` event and the user's current selection, if any.

Usage::

    doc = ClipDocument.from_html(html, url="https://example.com/post")
    data = await clip(doc)
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Literal, NamedTuple

from bs4 import BeautifulSoup, NavigableString, PageElement, Tag
from bs4.element import CData, Comment, Declaration, Doctype, ProcessingInstruction

from pageclip.extractors.dom import base_url

if TYPE_CHECKING:
    from pageclip.selection import RangeSelection

logger = logging.getLogger(__name__)

ReadyState = Literal["loading", "interactive", "complete"]
Listener = Callable[[str], None]

_NON_TEXT_STRINGS = (Comment, CData, Declaration, Doctype, ProcessingInstruction)
_UNRENDERED_TAGS: frozenset[str] = frozenset(
    {"head", "script", "style", "noscript", "template", "title"},
)


def is_rendered_text(node: PageElement) -> bool:
    """True for text nodes a reader would see on the page."""
    if not isinstance(node, NavigableString) or isinstance(node, _NON_TEXT_STRINGS):
        return False
    return not any(parent.name in _UNRENDERED_TAGS for parent in node.parents)


class Point(NamedTuple):
    """Sortable location in document order: node index plus offset inside it."""

    index: int
    offset: float


class TreeIndex:
    """Document-order positions of every node and the rendered text runs.

    Built once per document; the tree is assumed not to change afterwards.
    """

    def __init__(self, soup: BeautifulSoup) -> None:
        self.nodes: list[PageElement] = list(soup.descendants)
        self._index: dict[int, int] = {id(node): i for i, node in enumerate(self.nodes)}
        self.text_runs: list[tuple[int, NavigableString]] = []
        self._run_starts: list[int] = []
        self._run_indexes: list[int] = []
        total = 0
        for i, node in enumerate(self.nodes):
            if is_rendered_text(node):
                self.text_runs.append((i, node))
                self._run_starts.append(total)
                self._run_indexes.append(i)
                total += len(node)
        self.text_length = total

    def index_of(self, node: PageElement) -> int:
        return self._index[id(node)]

    def start_point(self, node: PageElement) -> Point:
        return Point(self.index_of(node), 0)

    def end_point(self, node: PageElement) -> Point:
        if isinstance(node, NavigableString):
            return Point(self.index_of(node), len(node))
        if isinstance(node, Tag) and node.contents:
            return self.end_point(node.contents[-1])
        return Point(self.index_of(node), 1)

    def boundary_point(self, node: PageElement, offset: int) -> Point:
        """Convert a DOM-style ``(container, offset)`` boundary to a :class:`Point`."""
        if isinstance(node, NavigableString):
            return Point(self.index_of(node), max(0, min(offset, len(node))))
        if isinstance(node, Tag) and offset < len(node.contents):
            return self.start_point(node.contents[max(0, offset)])
        return self.end_point(node)

    def text_offset(self, point: Point) -> int:
        """Character offset of *point* within the rendered document text."""
        pos = bisect.bisect_left(self._run_indexes, point.index)
        if pos < len(self._run_indexes) and self._run_indexes[pos] == point.index:
            node = self.text_runs[pos][1]
            return self._run_starts[pos] + int(min(point.offset, len(node)))
        if pos == 0:
            return 0
        return self._run_starts[pos - 1] + len(self.text_runs[pos - 1][1])

    def locate(self, offset: int, *, prefer_end: bool = False) -> tuple[NavigableString, int] | None:
        """Text node and in-node offset for a document text *offset*."""
        if not self.text_runs or offset < 0 or offset > self.text_length:
            return None
        if prefer_end:
            pos = bisect.bisect_left(self._run_starts, offset) - 1
        else:
            pos = bisect.bisect_right(self._run_starts, offset) - 1
        pos = max(pos, 0)
        start = self._run_starts[pos]
        node = self.text_runs[pos][1]
        return node, min(offset - start, len(node))

    def text(self) -> str:
        return "".join(str(node) for _, node in self.text_runs)

    def rendered_text_between(self, start: Point, end: Point) -> str:
        parts: list[str] = []
        lo = bisect.bisect_left(self._run_indexes, start.index)
        hi = bisect.bisect_right(self._run_indexes, end.index)
        for i, node in self.text_runs[lo:hi]:
            begin = int(start.offset) if i == start.index else 0
            stop = int(min(end.offset, len(node))) if i == end.index else len(node)
            parts.append(str(node)[begin:stop])
        return "".join(parts)


class ClipDocument:
    """A loaded (or loading) page."""

    def __init__(
        self,
        soup: BeautifulSoup,
        url: str = "",
        ready_state: ReadyState = "complete",
    ) -> None:
        self.soup = soup
        self.url = url
        self.ready_state: ReadyState = ready_state
        self.selection: RangeSelection | None = None
        self._listeners: dict[str, list[Listener]] = {}
        self._tree_index: TreeIndex | None = None

    @classmethod
    def from_html(
        cls,
        html: str | bytes,
        url: str = "",
        ready_state: ReadyState = "complete",
    ) -> ClipDocument:
        return cls(BeautifulSoup(html, "lxml"), url=url, ready_state=ready_state)

    def __repr__(self) -> str:
        return f"ClipDocument(url={self.url!r}, ready_state={self.ready_state!r})"

    @property
    def document_element(self) -> Tag:
        """The ``<html>`` element, or the soup itself for fragments."""
        html = self.soup.find("html")
        return html if isinstance(html, Tag) else self.soup

    @property
    def base_url(self) -> str:
        return base_url(self.soup, self.url)

    def serialize(self) -> str:
        return str(self.soup)

    def tree_index(self) -> TreeIndex:
        if self._tree_index is None:
            self._tree_index = TreeIndex(self.soup)
        return self._tree_index

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def add_event_listener(self, event: str, listener: Listener) -> None:
        self._listeners.setdefault(event, []).append(listener)

    def remove_event_listener(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)

    def dispatch_event(self, event: str) -> None:
        for listener in list(self._listeners.get(event, [])):
            listener(event)

    def mark_loaded(self) -> None:
        """Flip the ready state to ``complete`` and fire ``load``."""
        self.ready_state = "complete"
        logger.debug("Document loaded: %s", self.url)
        self.dispatch_event("load")

