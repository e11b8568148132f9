"""Regular-expression based endpoint extraction from page and script bodies."""

from __future__ import annotations

import re

_BODY_PATTERN = (
    r"(?:("
    r"(?:\.\./[A-Za-z0-9\-_/\\?&@.=%]+)"
    r"|(https?://[A-Za-z0-9_\-.]+(?:\.\./)?/[A-Za-z0-9\-_/\\?&@.=%]+)"
    r"|(/[A-Za-z0-9\-_/\\?&@.%]+\.(aspx?|action|cfm|cgi|do|pl|css|x?html?|js(?:p|on)?|pdf|php5?|py|rss))"
    r"|([A-Za-z0-9\-_?&@.%]+/[A-Za-z0-9/\\\-_?&@.%]+\.(aspx?|action|cfm|cgi|do|pl|css|x?html?|js(?:p|on)?|pdf|php5?|py|rss))"
    r"))"
)

_JS_PATTERN = (
    r"""(?:"|'|\s)("""
    r"""((https?://[A-Za-z0-9_\-.]+(?::\d{1,5})?)+(?:\.\./)?/[A-Za-z0-9/\-_\\.%]+(?:[\?|#][^"']+)?)"""
    r"""|((?:\.\./)?[a-zA-Z0-9\-_/\\%]+\.(aspx?|js(?:on|p)?|html|php5?|action|do)(?:[\?|#][^"']+)?)"""
    r"""|((?:\.\./)[a-zA-Z0-9\-_/\\%]+(?:/|\\)[a-zA-Z0-9\-_]{3,}(?:[\?|#][^"']+)?)"""
    r"""|((?:\.\./)[a-zA-Z0-9\-_/\\%]{3,}/)"""
    r""")(?:"|'|\s)"""
)

page_body_regex = re.compile(_BODY_PATTERN)
relative_endpoints_regex = re.compile(_JS_PATTERN)


def _unique_first_groups(pattern: re.Pattern[str], data: str) -> list[str]:
    return list(dict.fromkeys(match.group(1) for match in pattern.finditer(data)))


def extract_body_endpoints(data: str) -> list[str]:
    """Return the unique endpoints found in a page body, in order of appearance."""
    return _unique_first_groups(page_body_regex, data)


def extract_relative_endpoints(data: str) -> list[str]:
    """Return the unique endpoints found in a script, in order of appearance."""
    return _unique_first_groups(relative_endpoints_regex, data)