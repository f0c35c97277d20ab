"""pageclip.fetch - fetch a resource by URL into a :class:`~pageclip.blob.Blob`.

Uses only the stdlib (``urllib``) for HTTP.  The blocking request runs on a
worker thread so callers can ``await`` it from the event loop::

    blob = await fetch_blob("https://example.com/favicon.ico")
    print(blob.type, len(blob.data))

Cache modes mirror the browser ``fetch()`` options pageclip needs:

* ``"force-cache"`` - reuse any previously fetched response for the URL,
  fetch and remember it otherwise.
* ``"reload"``      - always fetch, then remember the response.
* ``"no-store"``    - always fetch, never remember.

Redirect modes: ``"follow"`` (default) or ``"error"``.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import urllib.error
import urllib.request
from collections import OrderedDict
from typing import Literal
from urllib.parse import urlparse

from pageclip import settings
from pageclip.blob import Blob

logger = logging.getLogger(__name__)

CacheMode = Literal["force-cache", "reload", "no-store"]
RedirectMode = Literal["follow", "error"]


# ---------------------------------------------------------------------------
# Public exception
# ---------------------------------------------------------------------------

class FetchError(RuntimeError):
    """Raised when a resource cannot be fetched.

    Attributes:
        url    -- the URL that failed
        status -- HTTP status code (0 if no response was received)
    """

    def __init__(self, message: str, url: str = "", status: int = 0) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


# ---------------------------------------------------------------------------
# Response cache
# ---------------------------------------------------------------------------

class _ResponseCache:
    """Small process-wide LRU of fetched blobs keyed by URL."""

    def __init__(self, max_entries: int) -> None:
        self._max_entries = max(1, max_entries)
        self._lock = threading.Lock()
        self._entries: OrderedDict[str, Blob] = OrderedDict()

    def get(self, url: str) -> Blob | None:
        with self._lock:
            blob = self._entries.get(url)
            if blob is not None:
                self._entries.move_to_end(url)
            return blob

    def put(self, url: str, blob: Blob) -> None:
        with self._lock:
            self._entries[url] = blob
            self._entries.move_to_end(url)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


_CACHE = _ResponseCache(settings.FETCH_CACHE_SIZE)


def clear_cache() -> None:
    """Forget every cached response.  Primarily for use in tests."""
    _CACHE.clear()


# ---------------------------------------------------------------------------
# Low-level HTTP fetch
# ---------------------------------------------------------------------------

class _RejectRedirects(urllib.request.HTTPRedirectHandler):
    def redirect_request(self, req, fp, code, msg, headers, newurl):  # noqa: ANN001
        raise FetchError(
            f"Redirect {code} from {req.full_url} to {newurl} not allowed",
            url=req.full_url,
            status=code,
        )


def fetch_bytes(
    url: str,
    *,
    redirect: RedirectMode = "follow",
    timeout: int = settings.FETCH_TIMEOUT,
    user_agent: str | None = None,
) -> Blob:
    """Fetch *url* synchronously and return its body and MIME type.

    Raises:
        FetchError: On HTTP errors, connection failures or invalid URLs.
    """
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise FetchError(f"Unsupported URL scheme: {parsed.scheme!r}", url=url)

    req = urllib.request.Request(
        url,
        headers={
            "User-Agent": user_agent or settings.USER_AGENT,
            "Accept": "image/avif,image/webp,image/apng,image/svg+xml,image/*,*/*;q=0.8",
        },
    )
    if redirect == "error":
        _open = urllib.request.build_opener(_RejectRedirects()).open
    else:
        _open = urllib.request.urlopen

    try:
        with _open(req, timeout=timeout) as resp:
            data: bytes = resp.read()
            content_type = resp.headers.get_content_type() if resp.headers else ""
    except urllib.error.HTTPError as exc:
        raise FetchError(
            f"HTTP {exc.code} fetching {url}: {exc.reason}", url=url, status=exc.code,
        ) from exc
    except urllib.error.URLError as exc:
        raise FetchError(f"URL error fetching {url}: {exc.reason}", url=url) from exc
    except OSError as exc:
        raise FetchError(f"Network error fetching {url}: {exc}", url=url) from exc

    return Blob(data=data, type=content_type or "application/octet-stream")


async def fetch_blob(
    url: str,
    *,
    cache: CacheMode = "force-cache",
    redirect: RedirectMode = "follow",
    timeout: int = settings.FETCH_TIMEOUT,
) -> Blob:
    """Fetch *url* into a :class:`Blob` without blocking the event loop."""
    if cache == "force-cache":
        cached = _CACHE.get(url)
        if cached is not None:
            logger.debug("Cache hit for %s", url)
            return cached

    blob = await asyncio.to_thread(fetch_bytes, url, redirect=redirect, timeout=timeout)
    logger.debug("Fetched %s (%s, %d bytes)", url, blob.type, len(blob.data))

    if cache != "no-store":
        _CACHE.put(url, blob)
    return blob
