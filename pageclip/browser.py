"""Capture a live browser page as a :class:`ClipDocument`.

Static HTML only knows the ``width``/``height`` attributes of an image and
nothing about what the user has highlighted.  A real page knows both, so
the capture script records each image's natural size on a cloned tree and
describes the current selection as a text quote.

Usage::

    from playwright.sync_api import sync_playwright

    with sync_playwright() as p:
        page = p.chromium.launch().new_page()
        page.goto("https://example.com/post")
        doc = document_from_page(page)
"""

from __future__ import annotations

import logging
from typing import Any

from pageclip import settings
from pageclip.annotation import CONTEXT_LENGTH, select_text
from pageclip.document import ClipDocument
from pageclip.extractors.dom import NATURAL_HEIGHT_ATTR, NATURAL_WIDTH_ATTR
from pageclip.fetch import FetchError

logger = logging.getLogger(__name__)

_CAPTURE_JS = """
([widthAttr, heightAttr, context]) => {
    const clone = document.documentElement.cloneNode(true);
    const live = document.querySelectorAll('img');
    const copies = clone.querySelectorAll('img');
    live.forEach((img, i) => {
        const copy = copies[i];
        if (!copy) return;
        copy.setAttribute(widthAttr, String(img.naturalWidth || 0));
        copy.setAttribute(heightAttr, String(img.naturalHeight || 0));
        if (img.currentSrc) copy.setAttribute('src', img.currentSrc);
    });

    let quote = null;
    const sel = window.getSelection();
    if (sel && sel.rangeCount > 0 && !sel.isCollapsed) {
        const range = sel.getRangeAt(0);
        const before = document.createRange();
        before.setStart(document.body, 0);
        before.setEnd(range.startContainer, range.startOffset);
        const after = document.createRange();
        after.setStart(range.endContainer, range.endOffset);
        after.setEnd(document.body, document.body.childNodes.length);
        quote = {
            exact: range.toString(),
            prefix: before.toString().slice(-context),
            suffix: after.toString().slice(0, context),
        };
    }

    return {
        url: document.URL,
        readyState: document.readyState,
        html: '<!DOCTYPE html>' + clone.outerHTML,
        quote: quote,
    };
}
"""


def document_from_page(page: Any) -> ClipDocument:
    """Snapshot a Playwright ``Page`` (sync API) into a :class:`ClipDocument`.

    The page's current selection, if any, becomes the document's active
    selection.
    """
    snapshot: dict[str, Any] = page.evaluate(
        _CAPTURE_JS, [NATURAL_WIDTH_ATTR, NATURAL_HEIGHT_ATTR, CONTEXT_LENGTH],
    )
    doc = ClipDocument.from_html(
        snapshot["html"],
        url=snapshot["url"],
        ready_state=snapshot.get("readyState") or "complete",
    )
    quote = snapshot.get("quote")
    if quote and quote.get("exact", "").strip():
        selected = select_text(
            doc, quote["exact"], prefix=quote.get("prefix", ""), suffix=quote.get("suffix", ""),
        )
        if selected is None:
            logger.debug("Browser selection could not be anchored in %s", doc.url)
    return doc


def render(url: str, *, timeout: int = 30, user_agent: str | None = None) -> ClipDocument:
    """Load *url* in headless Chromium and capture it once ``load`` fires.

    Raises:
        FetchError: When Playwright is missing or navigation fails.
    """
    try:
        from playwright.sync_api import Error as PlaywrightError
        from playwright.sync_api import sync_playwright
    except ImportError as exc:
        raise FetchError(
            "render_js requires playwright: pip install playwright && playwright install chromium",
            url=url,
        ) from exc

    try:
        with sync_playwright() as p:
            browser = p.chromium.launch(headless=True, args=settings.PLAYWRIGHT_LAUNCH_ARGS)
            try:
                ctx = browser.new_context(
                    user_agent=user_agent or settings.USER_AGENT,
                    viewport={"width": 1920, "height": 1080},
                )
                page = ctx.new_page()
                page.goto(
                    url,
                    timeout=max(timeout * 1_000, settings.PLAYWRIGHT_NAVIGATION_TIMEOUT),
                    wait_until="load",
                )
                logger.debug("Playwright load reached for %s", url)
                return document_from_page(page)
            finally:
                browser.close()
    except PlaywrightError as exc:
        raise FetchError(f"Playwright failed for {url}: {exc}", url=url) from exc
