"""Project-wide defaults for pageclip.

Per-domain overrides are loaded from YAML profiles (see ``pageclip.profiles``);
everything here is the baseline those profiles merge onto.
"""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Hero images
# ---------------------------------------------------------------------------
HERO_LIMIT = 4

# Whole-document scan: images must be strictly larger than this.
HERO_MIN_WIDTH = 480
HERO_MIN_HEIGHT = 300

# Images inside a user selection qualify at a smaller size.
SELECTION_HERO_MIN_WIDTH = 200
SELECTION_HERO_MIN_HEIGHT = 100

# ---------------------------------------------------------------------------
# Content scoring
# ---------------------------------------------------------------------------
MIN_CONTENT_LENGTH = 25
CONTENTYNESS_BASELINE = 3
MAX_LINK_DENSITY = 0.5

# ---------------------------------------------------------------------------
# Document readiness
# ---------------------------------------------------------------------------
def _env_timeout(name: str) -> float | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number of seconds", name, raw)
        return None


# None waits forever for the document's load event.
READY_TIMEOUT: float | None = _env_timeout("PAGECLIP_READY_TIMEOUT")

# ---------------------------------------------------------------------------
# Icon fetching
# ---------------------------------------------------------------------------
FETCH_TIMEOUT = 30
FETCH_CACHE_SIZE = 64
USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)

# ---------------------------------------------------------------------------
# Browser capture
# ---------------------------------------------------------------------------
PLAYWRIGHT_LAUNCH_ARGS: list[str] = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]
PLAYWRIGHT_NAVIGATION_TIMEOUT = 30_000  # ms

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
