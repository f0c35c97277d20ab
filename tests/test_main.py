"""Tests for the pageclip command line."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

from pageclip.__main__ import main
from pageclip.blob import Blob
from pageclip.fetch import FetchError

ARTICLE = Path(__file__).parent / "fixtures" / "article.html"
BASE_URL = "https://example.com/posts/tide-pools"


def _run_json(capsys, argv: list[str]) -> dict:
    assert main(argv) == 0
    return json.loads(capsys.readouterr().out)


class TestMain:
    def test_clip_file(self, capsys):
        out = _run_json(capsys, ["--file", str(ARTICLE), "--base-url", BASE_URL])
        assert out["type"] == "scraped"
        scraped = out["scraped"]
        assert scraped["url"] == BASE_URL
        assert scraped["title"] == "How Tide Pools Work"
        assert scraped["icon"] == "https://example.com/favicon.ico"
        assert scraped["selector"] is None

    def test_quote_produces_selector(self, capsys):
        out = _run_json(capsys, [
            "--file", str(ARTICLE), "--base-url", BASE_URL, "--quote", "Visiting at low tide",
        ])
        scraped = out["scraped"]
        assert scraped["description"] == "Visiting at low tide"
        assert scraped["selector"][0]["type"] == "TextQuoteSelector"
        assert scraped["selector"][0]["exact"] == "Visiting at low tide"

    def test_missing_quote(self, capsys):
        assert main(["--file", str(ARTICLE), "--quote", "absent passage"]) == 1
        assert "Quote not found" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main(["--file", str(tmp_path / "missing.html")]) == 1
        assert capsys.readouterr().err.startswith("ERROR:")

    def test_render_js_needs_url(self, capsys):
        assert main(["--file", str(ARTICLE), "--render-js"]) == 1
        assert "--render-js needs --url" in capsys.readouterr().err

    def test_url_is_fetched(self, capsys):
        blob = Blob(data=ARTICLE.read_bytes(), type="text/html")
        with patch("pageclip.__main__.fetch_bytes", return_value=blob) as fetch:
            out = _run_json(capsys, ["--url", BASE_URL])
        fetch.assert_called_once_with(BASE_URL)
        assert out["scraped"]["name"] == "Coastal Notes"

    def test_fetch_error(self, capsys):
        err = FetchError("HTTP 503", url=BASE_URL, status=503)
        with patch("pageclip.__main__.fetch_bytes", side_effect=err):
            assert main(["--url", BASE_URL]) == 1
        assert "HTTP 503" in capsys.readouterr().err

    def test_icon_data(self, capsys):
        icon = Blob(data=b"ico", type="image/x-icon")
        with patch("pageclip.fetch.fetch_bytes", return_value=icon):
            out = _run_json(capsys, ["--file", str(ARTICLE), "--base-url", BASE_URL, "--icon-data"])
        assert out["scraped"]["icon"] == "data:image/x-icon;base64,aWNv"

    def test_icon_data_failure_keeps_href(self, capsys):
        err = FetchError("HTTP 404", status=404)
        with patch("pageclip.fetch.fetch_bytes", side_effect=err):
            out = _run_json(capsys, ["--file", str(ARTICLE), "--base-url", BASE_URL, "--icon-data"])
        assert out["scraped"]["icon"] == "https://example.com/favicon.ico"

    def test_profile(self, tmp_path, capsys):
        profile = tmp_path / "profile.yaml"
        profile.write_text("domains:\n  example.com:\n    hero_limit: 1\n", encoding="utf-8")
        out = _run_json(capsys, [
            "--file", str(ARTICLE), "--base-url", BASE_URL, "--profile", str(profile),
        ])
        assert out["scraped"]["hero"] == ["https://cdn.example.com/og-tidepool.jpg"]

    def test_bad_profile(self, tmp_path, capsys):
        profile = tmp_path / "profile.yaml"
        profile.write_text("default:\n  nonsense: 1\n", encoding="utf-8")
        assert main(["--file", str(ARTICLE), "--profile", str(profile)]) == 1
        assert "Unknown profile keys" in capsys.readouterr().err

    def test_pretty(self, capsys):
        assert main(["--file", str(ARTICLE), "--base-url", BASE_URL, "--pretty"]) == 0
        assert "Coastal Notes" in capsys.readouterr().out
