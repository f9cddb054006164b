"""Data-URL helpers for submission previews."""

from __future__ import annotations

import re
from typing import Optional, Tuple


DEFAULT_MIME_TYPES = {
    "video": "video/mp4",
    "audio": "audio/mpeg",
    "image": "image/jpeg",
    "document": "application/pdf",
}
FALLBACK_MIME_TYPE = "application/octet-stream"

_DATA_URL_MIME = re.compile(r"^data:([^;,]+)")
_WHITESPACE = re.compile(r"\s")
_URL_PREFIXES = ("http://", "https://", "blob:")


def mime_type_from_data_url(preview: str | None) -> Optional[str]:
    """Extract ``image/png`` from ``data:image/png;base64,...``; None otherwise."""

    if not preview:
        return None
    match = _DATA_URL_MIME.match(preview)
    if match is None:
        return None
    return match.group(1).strip() or None


def file_extension(file_name: str) -> Optional[str]:
    if "." not in file_name:
        return None
    extension = file_name.rsplit(".", 1)[-1].strip()
    return extension or None


def format_preview(
    data: str | None,
    mime_type: str | None,
    file_type: str,
) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(preview, mime_type)`` ready for a browser.

    Data URLs and http/https/blob URLs pass through unchanged; anything else is
    treated as bare base64 and wrapped in a data URL with a per-type default.
    """

    if not data:
        return None, None

    if data.startswith("data:"):
        return data, mime_type_from_data_url(data) or mime_type

    if data.startswith(_URL_PREFIXES):
        return data, mime_type

    mime = mime_type or DEFAULT_MIME_TYPES.get(file_type, FALLBACK_MIME_TYPE)
    clean = _WHITESPACE.sub("", data)
    return f"data:{mime};base64,{clean}", mime
