"""Ranges and user selections over a :class:`~pageclip.document.ClipDocument`.

A :class:`Range` is a start/end pair of DOM-style boundaries: a container
node and an offset (characters for text nodes, child index for elements).
"""

from __future__ import annotations

from typing import NamedTuple

from bs4 import PageElement, Tag

from pageclip.document import ClipDocument, Point


class Boundary(NamedTuple):
    node: PageElement
    offset: int


def _is_within(container: PageElement, node: PageElement) -> bool:
    """True when *container* is *node* or one of its descendants."""
    return container is node or any(parent is node for parent in container.parents)


class Range:
    """A contiguous region of a document."""

    def __init__(self, document: ClipDocument, start: Boundary, end: Boundary) -> None:
        self.document = document
        index = document.tree_index()
        start_point = index.boundary_point(*start)
        end_point = index.boundary_point(*end)
        if end_point < start_point:
            start, end = end, start
            start_point, end_point = end_point, start_point
        self.start = start
        self.end = end
        self._start_point: Point = start_point
        self._end_point: Point = end_point

    @classmethod
    def select_node(cls, document: ClipDocument, node: Tag) -> Range:
        """Range spanning *node* and everything inside it."""
        parent = node.parent
        if parent is None:
            return cls.select_node_contents(document, node)
        offset = parent.contents.index(node)
        return cls(document, Boundary(parent, offset), Boundary(parent, offset + 1))

    @classmethod
    def select_node_contents(cls, document: ClipDocument, node: Tag) -> Range:
        return cls(document, Boundary(node, 0), Boundary(node, len(node.contents)))

    def __repr__(self) -> str:
        return f"Range({self.text()!r})"

    @property
    def collapsed(self) -> bool:
        return self._start_point == self._end_point

    @property
    def start_point(self) -> Point:
        return self._start_point

    @property
    def end_point(self) -> Point:
        return self._end_point

    @property
    def common_ancestor_container(self) -> PageElement:
        """Deepest node that contains both boundary containers."""
        start_chain = [self.start.node, *self.start.node.parents]
        end_ids = {id(self.end.node)} | {id(p) for p in self.end.node.parents}
        for node in start_chain:
            if id(node) in end_ids:
                return node
        return self.document.soup

    def contains_node(self, node: PageElement) -> bool:
        """True when the range starts before *node* and ends after it.

        A boundary placed inside *node* does not count, even when it sits at
        the very edge of its content: ``(text, len(text))`` lies before the
        end of the ``<p>`` holding that text.
        """
        index = self.document.tree_index()
        try:
            node_start = index.start_point(node)
            node_end = index.end_point(node)
        except KeyError:
            return False
        starts_before = self._start_point < node_start or (
            self._start_point == node_start and not _is_within(self.start.node, node)
        )
        ends_after = node_end < self._end_point or (
            node_end == self._end_point and not _is_within(self.end.node, node)
        )
        return starts_before and ends_after

    def text(self) -> str:
        return self.document.tree_index().rendered_text_between(
            self._start_point, self._end_point,
        )


class RangeSelection:
    """The user's current selection: a document and one or more ranges."""

    def __init__(self, document: ClipDocument, ranges: list[Range]) -> None:
        self.document = document
        self._ranges = list(ranges)

    @staticmethod
    def get(document: ClipDocument) -> RangeSelection | None:
        """The document's active selection, or None when nothing is selected."""
        selection = document.selection
        if selection is None or selection.is_empty:
            return None
        return selection

    def __repr__(self) -> str:
        return f"RangeSelection({self._ranges!r})"

    @property
    def is_empty(self) -> bool:
        return all(r.collapsed for r in self._ranges)

    def ranges(self) -> list[Range]:
        return list(self._ranges)

    def contains_node(self, node: PageElement) -> bool:
        return any(r.contains_node(node) for r in self._ranges)

    def to_text(self) -> str:
        return "".join(r.text() for r in self._ranges)


def select(document: ClipDocument, *ranges: Range) -> RangeSelection:
    """Install *ranges* as the document's active selection."""
    selection = RangeSelection(document, list(ranges))
    document.selection = selection
    return selection
