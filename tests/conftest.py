"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from pageclip.document import ClipDocument
from pageclip.fetch import clear_cache

FIXTURES_DIR = Path(__file__).parent / "fixtures"

ARTICLE_URL = "https://example.com/posts/tide-pools"


def _read_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


@pytest.fixture(autouse=True)
def _empty_fetch_cache():
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def article_html() -> str:
    return _read_fixture("article.html")


@pytest.fixture
def bare_html() -> str:
    return _read_fixture("bare.html")


@pytest.fixture
def article_doc(article_html) -> ClipDocument:
    return ClipDocument.from_html(article_html, url=ARTICLE_URL)


@pytest.fixture
def bare_doc(bare_html) -> ClipDocument:
    return ClipDocument.from_html(bare_html, url="https://example.org/")
