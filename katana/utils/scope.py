"""Crawl scope management by host name and URL patterns."""

from __future__ import annotations

import ipaddress
import re
from collections.abc import Iterable
from enum import Enum
from urllib.parse import urlsplit

from katana.utils.domains import domain_rdn_and_dn


class ScopeError(ValueError):
    """Raised for invalid scope configuration or unparsable URLs."""


class DNSScopeField(Enum):
    """Which part of the host name decides whether a URL is in scope."""

    DN = 1
    RDN = 2
    FQDN = 3
    CUSTOM = 4


_FIELDS_BY_NAME = {
    "dn": DNSScopeField.DN,
    "rdn": DNSScopeField.RDN,
    "fqdn": DNSScopeField.FQDN,
}


def _compile(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ScopeError(f"could not compile regex {pattern}: {exc}") from exc


def _hostname(url: str) -> str:
    try:
        netloc = urlsplit(url).netloc
    except ValueError as exc:
        raise ScopeError(f"could not parse url {url}: {exc}") from exc
    host = netloc.rpartition("@")[2]
    if host.startswith("["):
        end = host.find("]")
        return host[1:end] if end >= 0 else host[1:]
    return host.partition(":")[0]


def _is_ip(hostname: str) -> bool:
    try:
        ipaddress.ip_address(hostname)
    except ValueError:
        return False
    return True


class Manager:
    """Decides whether URLs fall within the crawl scope."""

    def __init__(
        self,
        in_scope: Iterable[str] | None = None,
        out_of_scope: Iterable[str] | None = None,
        field_scope: str = "rdn",
        no_scope: bool = False,
    ) -> None:
        self.no_scope = no_scope
        self.field_scope_pattern: re.Pattern[str] | None = None
        field = _FIELDS_BY_NAME.get(field_scope)
        if field is None:
            self.field_scope = DNSScopeField.CUSTOM
            self.field_scope_pattern = _compile(field_scope)
        else:
            self.field_scope = field
        self.in_scope = [_compile(p) for p in in_scope or ()]
        self.out_of_scope = [_compile(p) for p in out_of_scope or ()]

    def validate(self, url: str, root_hostname: str) -> bool:
        """Return True if ``url`` is in scope for a crawl rooted at ``root_hostname``."""
        if self.no_scope:
            return True
        dns_validated = self._validate_dns(_hostname(url), root_hostname)
        if self.in_scope or self.out_of_scope:
            return self._validate_url(url) and dns_validated
        return dns_validated

    def _validate_url(self, url: str) -> bool:
        if any(pattern.search(url) for pattern in self.out_of_scope):
            return False
        if not self.in_scope:
            return True
        return any(pattern.search(url) for pattern in self.in_scope)

    def _validate_dns(self, hostname: str, root_hostname: str) -> bool:
        if self.field_scope is DNSScopeField.CUSTOM and self.field_scope_pattern.search(hostname):
            return True
        if self.field_scope is DNSScopeField.FQDN or _is_ip(hostname):
            return hostname.casefold() == root_hostname.casefold()
        rdn, dn = domain_rdn_and_dn(root_hostname)
        if self.field_scope is DNSScopeField.DN:
            return dn in hostname
        if self.field_scope is DNSScopeField.RDN:
            return hostname.endswith(rdn)
        return False