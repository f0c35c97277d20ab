"""Tests for pageclip.fetch (network is always mocked)."""

from __future__ import annotations

import asyncio
import email.message
import io
import urllib.error
from unittest.mock import MagicMock, patch

import pytest

from pageclip.blob import Blob
from pageclip.fetch import FetchError, fetch_blob, fetch_bytes


def _response(body: bytes, content_type: str) -> MagicMock:
    headers = email.message.Message()
    headers["Content-Type"] = content_type
    resp = MagicMock()
    resp.read.return_value = body
    resp.headers = headers
    resp.__enter__.return_value = resp
    resp.__exit__.return_value = False
    return resp


class TestFetchBytes:
    def test_returns_body_and_mime_type(self):
        with patch("urllib.request.urlopen", return_value=_response(b"ico", "image/x-icon; charset=binary")):
            blob = fetch_bytes("https://x.test/favicon.ico")
        assert blob == Blob(data=b"ico", type="image/x-icon")

    def test_unsupported_scheme(self):
        with pytest.raises(FetchError, match="Unsupported URL scheme"):
            fetch_bytes("ftp://x.test/favicon.ico")

    def test_relative_url_rejected(self):
        with pytest.raises(FetchError):
            fetch_bytes("/favicon.ico")

    def test_http_error_carries_status(self):
        err = urllib.error.HTTPError(
            "https://x.test/missing.ico", 404, "Not Found", email.message.Message(), io.BytesIO(b""),
        )
        with patch("urllib.request.urlopen", side_effect=err):
            with pytest.raises(FetchError) as exc_info:
                fetch_bytes("https://x.test/missing.ico")
        assert exc_info.value.status == 404
        assert exc_info.value.url == "https://x.test/missing.ico"

    def test_connection_error(self):
        with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("refused")):
            with pytest.raises(FetchError) as exc_info:
                fetch_bytes("https://x.test/favicon.ico")
        assert exc_info.value.status == 0


class TestFetchBlob:
    def test_force_cache_fetches_once(self):
        blob = Blob(data=b"a", type="image/png")
        with patch("pageclip.fetch.fetch_bytes", return_value=blob) as fetch:
            async def run():
                first = await fetch_blob("https://x.test/a.png")
                second = await fetch_blob("https://x.test/a.png")
                return first, second

            first, second = asyncio.run(run())
        assert first is second is blob
        assert fetch.call_count == 1

    def test_no_store_always_fetches(self):
        with patch("pageclip.fetch.fetch_bytes", return_value=Blob(data=b"a")) as fetch:
            async def run():
                await fetch_blob("https://x.test/a.png", cache="no-store")
                await fetch_blob("https://x.test/a.png", cache="no-store")
                await fetch_blob("https://x.test/a.png")

            asyncio.run(run())
        assert fetch.call_count == 3

    def test_reload_refreshes_cache(self):
        old, new = Blob(data=b"old"), Blob(data=b"new")
        with patch("pageclip.fetch.fetch_bytes", side_effect=[old, new]) as fetch:
            async def run():
                await fetch_blob("https://x.test/a.png")
                await fetch_blob("https://x.test/a.png", cache="reload")
                return await fetch_blob("https://x.test/a.png")

            assert asyncio.run(run()) is new
        assert fetch.call_count == 2

    def test_errors_propagate_and_are_not_cached(self):
        err = FetchError("HTTP 500", url="https://x.test/a.png", status=500)
        with patch("pageclip.fetch.fetch_bytes", side_effect=[err, Blob(data=b"ok")]) as fetch:
            async def run():
                with pytest.raises(FetchError):
                    await fetch_blob("https://x.test/a.png")
                return await fetch_blob("https://x.test/a.png")

            assert asyncio.run(run()).data == b"ok"
        assert fetch.call_count == 2

    def test_redirect_mode_passed_through(self):
        with patch("pageclip.fetch.fetch_bytes", return_value=Blob(data=b"a")) as fetch:
            asyncio.run(fetch_blob("https://x.test/a.png", redirect="error"))
        assert fetch.call_args.kwargs["redirect"] == "error"
