"""Lazy sequence primitives for candidate chains.

Every resolver in ``pageclip.extractors`` is a ``concat`` of candidate
sources consumed with ``first``.  Sources are generators, so nothing runs
until it is pulled: a page whose ``og:title`` answers the question never
has its paragraphs scanned.

Only ``reduce_seq`` and ``first`` are eager.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import TypeVar

A = TypeVar("A")
B = TypeVar("B")


def identity(x: A) -> A:
    return x


def filter_seq(pred: Callable[[A], bool], source: Iterable[A]) -> Iterator[A]:
    for item in source:
        if pred(item):
            yield item


def map_seq(f: Callable[[A], B], source: Iterable[A]) -> Iterator[B]:
    for item in source:
        yield f(item)


def reduce_seq(reducer: Callable[[A, B], B], initial: B, items: Iterable[A]) -> B:
    """Fold *items* into a single value; *reducer* receives ``(item, state)``."""
    state = initial
    for item in items:
        state = reducer(item, state)
    return state


def concat(sources: Iterable[Iterable[A]]) -> Iterator[A]:
    """Chain *sources* end to end.

    Source *k+1* is not touched until source *k* is exhausted.
    """
    for source in sources:
        yield from source


def take(n: int, source: Iterable[A]) -> Iterator[A]:
    """Yield at most *n* items, stopping as soon as the n-th is produced."""
    if n <= 0:
        return
    count = 0
    for item in source:
        yield item
        count += 1
        if count >= n:
            break


def first(source: Iterable[A], fallback: B) -> A | B:
    """Return the first item of *source* or *fallback* when it is empty."""
    for item in source:
        return item
    return fallback
