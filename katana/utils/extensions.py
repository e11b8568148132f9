"""File-extension based validation of crawled paths."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

DEFAULT_DENYLIST = (
    ".3g2", ".3gp", ".7z", ".apk", ".arj", ".avi", ".axd", ".bmp", ".csv",
    ".deb", ".dll", ".doc", ".drv", ".eot", ".exe", ".flv", ".gif", ".gifv",
    ".gz", ".h264", ".ico", ".iso", ".jar", ".jpeg", ".jpg", ".lock", ".m4a",
    ".m4v", ".map", ".mkv", ".mov", ".mp3", ".mp4", ".mpeg", ".mpg", ".msi",
    ".ogg", ".ogm", ".ogv", ".otf", ".pdf", ".pkg", ".png", ".ppt", ".psd",
    ".rar", ".rm", ".rpm", ".svg", ".swf", ".sys", ".tar.gz", ".tar", ".tif",
    ".tiff", ".ttf", ".txt", ".vob", ".wav", ".webm", ".webp", ".wmv", ".woff",
    ".woff2", ".xcf", ".xls", ".xlsx", ".zip",
)


def normalize_extension(extension: str) -> str:
    """Lower-case an extension and make sure it starts with a dot."""
    extension = extension.lower()
    return extension if extension.startswith(".") else "." + extension


def _path_ext(path: str) -> str:
    base = path.rpartition("/")[2]
    dot = base.rfind(".")
    return base[dot:] if dot >= 0 else ""


class Validator:
    """Decides whether a path is allowed based on its extension."""

    def __init__(
        self,
        extensions_match: Iterable[str] | None = None,
        extensions_filter: Iterable[str] | None = None,
    ) -> None:
        self.extensions_match = {normalize_extension(e) for e in extensions_match or ()}
        self.extensions_filter = {
            normalize_extension(e)
            for e in (*DEFAULT_DENYLIST, *(extensions_filter or ()))
        }

    def validate_path(self, item: str) -> bool:
        """Return True if the extension of ``item`` is allowed."""
        try:
            path = urlsplit(item).path
        except ValueError as exc:
            logger.warning("validatepath: failed to parse url %s got %s", item, exc)
            path = ""
        extension = _path_ext(path or item).lower()
        if self.extensions_match:
            return extension in self.extensions_match
        return extension not in self.extensions_filter