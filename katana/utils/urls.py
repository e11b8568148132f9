"""Small URL and HTML attribute parsing helpers."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

logger = logging.getLogger(__name__)

_WEB_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/113.0.0.0 Safari/537.36"
)

_SRCSET_SEPARATORS = re.compile(r"[\s,]*")
_SRCSET_URL = re.compile(r"\S*")
_SRCSET_DESCRIPTORS = re.compile(r"(?:[^,(]|\([^)]*\)?)*,?")


def is_url(url: str) -> bool:
    """Return True if the string parses as a URL with a host name."""
    try:
        return bool(urlsplit(url).hostname)
    except ValueError as exc:
        logger.debug("is_url: failed to parse url %s got %s", url, exc)
        return False


def parse_srcset_tag(value: str) -> list[str]:
    """Return the image URLs listed in a srcset attribute value."""
    urls: list[str] = []
    pos = _SRCSET_SEPARATORS.match(value).end()
    while pos < len(value):
        match = _SRCSET_URL.match(value, pos)
        url, pos = match.group(), match.end()
        if url.endswith(","):
            url = url.rstrip(",")
        else:
            pos = _SRCSET_DESCRIPTORS.match(value, pos).end()
        if url:
            urls.append(url)
        pos = _SRCSET_SEPARATORS.match(value, pos).end()
    return urls


def parse_link_tag(value: str) -> list[str]:
    """Return the URLs enclosed in angle brackets in a Link header value."""
    return [
        piece.strip("<>")
        for chunk in value.split(",")
        for piece in (p.strip(" ") for p in chunk.split(";"))
        if piece.startswith("<") and piece.endswith(">")
    ]


def parse_refresh_tag(value: str) -> str:
    """Return the target URL of a refresh header value, or an empty string."""
    chunks = value.split("url=")
    if len(chunks) < 2:
        return ""
    return chunks[1].removesuffix(";")


def web_user_agent() -> str:
    """Return the desktop Chrome user agent string."""
    return _WEB_USER_AGENT


def flatten_headers(headers: Mapping[str, Iterable[str]]) -> dict[str, str]:
    """Join multi-valued headers with semicolons."""
    return {key: ";".join(values) for key, values in headers.items()}


def replace_all_query_param(request_url: str, value: str) -> str:
    """Blank the value of every query parameter, keeping one entry per key.

    ``value`` is accepted for interface compatibility; parameters are emptied.
    """
    try:
        parts = urlsplit(request_url)
    except ValueError:
        return request_url
    keys = dict.fromkeys(key for key, _ in parse_qsl(parts.query, keep_blank_values=True))
    query = urlencode({key: "" for key in keys})
    return urlunsplit(parts._replace(query=query))