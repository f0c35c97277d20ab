"""Binary blobs and their read-out forms."""

from __future__ import annotations

import atexit
import base64
import contextlib
import mimetypes
import os
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Blob:
    """Fetched binary content plus its MIME type."""

    data: bytes
    type: str = "application/octet-stream"


async def read_as_data_url(blob: Blob) -> str:
    """Encode *blob* as a ``data:`` URL."""
    encoded = base64.b64encode(blob.data).decode("ascii")
    return f"data:{blob.type or 'application/octet-stream'};base64,{encoded}"


# ---------------------------------------------------------------------------
# Blob URLs
# ---------------------------------------------------------------------------

_blob_files: list[Path] = []
_blob_files_lock = threading.Lock()


def create_blob_url(blob: Blob) -> str:
    """Write *blob* to a temporary file and return its ``file://`` URI.

    The file lives until :func:`revoke_blob_url` or interpreter exit.
    """
    suffix = mimetypes.guess_extension(blob.type) or ""
    fd, name = tempfile.mkstemp(prefix="pageclip-", suffix=suffix)
    with os.fdopen(fd, "wb") as fh:
        fh.write(blob.data)
    path = Path(name)
    with _blob_files_lock:
        _blob_files.append(path)
    return path.as_uri()


def revoke_blob_url(url: str) -> None:
    """Delete the file behind a URL returned by :func:`create_blob_url`."""
    with _blob_files_lock:
        for path in list(_blob_files):
            if path.as_uri() == url:
                _blob_files.remove(path)
                with contextlib.suppress(OSError):
                    path.unlink()


@atexit.register
def _remove_blob_files() -> None:
    with _blob_files_lock:
        for path in _blob_files:
            with contextlib.suppress(OSError):
                path.unlink()
        _blob_files.clear()
