"""Tests for pageclip.clipper."""

from __future__ import annotations

import asyncio
import logging

import pytest

from pageclip.annotation import select_text
from pageclip.clipper import (
    archive,
    archived_message,
    clip,
    clip_selection,
    clip_summary,
    loaded,
    scraped_message,
)
from pageclip.document import ClipDocument
from pageclip.items import ArchiveData, ScrapeData, parse_host_message
from pageclip.profiles import ClipSettings
from pageclip.selection import Boundary, Range, RangeSelection, select

OG_IMAGE = "https://cdn.example.com/og-tidepool.jpg"
TW_IMAGE = "https://cdn.example.com/tw-tidepool.jpg"
WIDE_IMAGE = "https://example.com/img/pool-wide.jpg"
SNAIL_IMAGE = "https://example.com/img/snail.jpg"


# ---------------------------------------------------------------------------
# Readiness
# ---------------------------------------------------------------------------

class TestLoaded:
    def test_complete_document_returns_immediately(self, article_doc):
        asyncio.run(asyncio.wait_for(loaded(article_doc), 1))

    def test_waits_for_load_event(self, article_html):
        doc = ClipDocument.from_html(article_html, url="https://example.com/", ready_state="loading")

        async def run():
            asyncio.get_running_loop().call_later(0.01, doc.mark_loaded)
            await loaded(doc)

        asyncio.run(asyncio.wait_for(run(), 1))
        assert doc.ready_state == "complete"

    def test_listener_is_removed_after_firing(self, article_html):
        doc = ClipDocument.from_html(article_html, ready_state="interactive")

        async def run():
            asyncio.get_running_loop().call_soon(doc.mark_loaded)
            await loaded(doc)

        asyncio.run(run())
        assert doc._listeners.get("load") == []

    def test_timeout_proceeds_with_warning(self, article_html, caplog):
        doc = ClipDocument.from_html(article_html, url="https://example.com/", ready_state="loading")
        with caplog.at_level(logging.WARNING, logger="pageclip.clipper"):
            asyncio.run(loaded(doc, timeout=0.01))
        assert "not loaded" in caplog.text
        assert doc._listeners.get("load") == []

    def test_clip_waits_for_load(self, article_html):
        doc = ClipDocument.from_html(article_html, url="https://example.com/p", ready_state="loading")

        async def run():
            task = asyncio.ensure_future(clip(doc))
            await asyncio.sleep(0.01)
            assert not task.done()
            doc.mark_loaded()
            return await asyncio.wait_for(task, 1)

        assert asyncio.run(run()).title == "How Tide Pools Work"


# ---------------------------------------------------------------------------
# Whole-page clips
# ---------------------------------------------------------------------------

class TestClipSummary:
    def test_article(self, article_doc):
        data = asyncio.run(clip_summary(article_doc))
        assert data == ScrapeData(
            url="https://example.com/posts/tide-pools",
            icon="https://example.com/favicon.ico",
            hero=[OG_IMAGE, TW_IMAGE, WIDE_IMAGE],
            title="How Tide Pools Work",
            description="A field guide to the small worlds left behind by the ebbing tide.",
            name="Coastal Notes",
            selector=None,
        )

    def test_bare_page_uses_empty_fallbacks(self, bare_doc):
        data = asyncio.run(clip(bare_doc))
        assert data.title == ""
        assert data.description == ""
        assert data.name == ""
        assert data.icon is None
        assert data.hero == []
        assert data.selector is None

    def test_configured_fallbacks_and_hero_limit(self, bare_doc, article_doc):
        cfg = ClipSettings(title_fallback="Untitled", name_fallback="example.org", hero_limit=1)
        assert asyncio.run(clip(bare_doc, cfg)).title == "Untitled"
        assert asyncio.run(clip(bare_doc, cfg)).name == "example.org"
        assert asyncio.run(clip(article_doc, cfg)).hero == [OG_IMAGE]

    def test_fields_are_trimmed(self):
        doc = ClipDocument.from_html(
            '<head><meta property="og:title" content="  Padded  ">'
            '<meta property="og:site_name" content=" Site "></head>',
            url="https://x.test/",
        )
        data = asyncio.run(clip(doc))
        assert data.title == "Padded"
        assert data.name == "Site"

    def test_relative_icon_resolved_against_base_element(self):
        doc = ClipDocument.from_html(
            '<head><base href="https://cdn.x.test/"><link rel="icon" href="fav.png"></head>',
            url="https://x.test/page",
        )
        assert asyncio.run(clip(doc)).icon == "https://cdn.x.test/fav.png"


# ---------------------------------------------------------------------------
# Selection clips
# ---------------------------------------------------------------------------

class TestClipSelection:
    def test_image_inside_selection_wins(self, article_doc):
        article = article_doc.soup.find("article")
        second = article.find(id="second")
        figure = article.find("figure")
        rng = Range(
            article_doc,
            Boundary(article, article.contents.index(second)),
            Boundary(article, article.contents.index(figure) + 1),
        )
        select(article_doc, rng)

        data = asyncio.run(clip(article_doc))
        assert data.hero == [SNAIL_IMAGE]
        assert data.description == second.get_text()
        assert data.title == "How Tide Pools Work"
        assert data.name == "Coastal Notes"
        assert data.icon == "https://example.com/favicon.ico"
        assert len(data.selector) == 1
        assert data.selector[0].exact.startswith("Visiting at low tide")

    def test_text_only_selection_falls_back_to_page_hero(self, article_doc):
        select_text(article_doc, "Visiting at low tide")
        data = asyncio.run(clip(article_doc))
        assert data.hero == [OG_IMAGE]
        assert data.description == "Visiting at low tide"
        assert data.selector[0].exact == "Visiting at low tide"

    def test_small_selected_image_is_skipped(self):
        doc = ClipDocument.from_html(
            '<body><div id="sel"><p>Some chosen words</p>'
            '<img src="/tiny.png" width="150" height="150"></div></body>',
            url="https://x.test/",
        )
        select(doc, Range.select_node(doc, doc.soup.find(id="sel")))
        data = asyncio.run(clip(doc))
        assert data.hero == []
        assert data.description == "Some chosen words"

    def test_image_outside_selection_is_not_a_selection_hero(self):
        doc = ClipDocument.from_html(
            '<body><div id="box"><p id="chosen">Some chosen words</p>'
            '<img src="/big.png" width="300" height="300"></div></body>',
            url="https://x.test/",
        )
        # The range's ancestor is #box but the image is outside the range.
        rng = Range.select_node(doc, doc.soup.find(id="chosen"))
        select(doc, rng)
        assert asyncio.run(clip(doc)).hero == []

    def test_empty_selection_clips_summary(self, article_doc):
        data = asyncio.run(clip_selection(RangeSelection(article_doc, [])))
        assert data.selector is None
        assert data.hero == [OG_IMAGE, TW_IMAGE, WIDE_IMAGE]

    def test_collapsed_selection_clips_summary(self, article_doc):
        node = article_doc.soup.find(id="second").contents[0]
        select(article_doc, Range(article_doc, Boundary(node, 2), Boundary(node, 2)))
        assert asyncio.run(clip(article_doc)).selector is None


# ---------------------------------------------------------------------------
# Archive and messages
# ---------------------------------------------------------------------------

class TestArchiveAndMessages:
    def test_archive_contains_markup(self, article_doc):
        data = archive(article_doc)
        assert isinstance(data, ArchiveData)
        assert data.url == article_doc.url
        assert b"<title>How Tide Pools Work | Coastal Notes</title>" in data.data

    def test_archived_message_json_round_trip(self, article_doc):
        message = archived_message(archive(article_doc))
        parsed = parse_host_message(message.model_dump_json())
        assert parsed.type == "archived"
        assert parsed.archived.data == message.archived.data

    def test_scraped_message(self, article_doc):
        message = scraped_message(asyncio.run(clip(article_doc)))
        payload = message.model_dump(mode="json")
        assert payload["type"] == "scraped"
        assert payload["scraped"]["selector"] is None
        assert parse_host_message(payload) == message


@pytest.mark.parametrize("ready_state", ["loading", "interactive"])
def test_not_ready_states_wait(article_html, ready_state):
    doc = ClipDocument.from_html(article_html, ready_state=ready_state)
    with pytest.raises(TimeoutError):
        asyncio.run(asyncio.wait_for(loaded(doc), 0.01))
