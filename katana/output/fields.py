"""Selection of parts of crawled URLs for output and per-host field files."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import parse_qsl, unquote, urlencode, urlsplit, urlunsplit

from katana.output.result import Result
from katana.utils.domains import DomainError, effective_tld_plus_one

logger = logging.getLogger(__name__)

FIELD_NAMES = (
    "url",
    "path",
    "fqdn",
    "rdn",
    "rurl",
    "qurl",
    "qpath",
    "file",
    "ufile",
    "key",
    "value",
    "kv",
    "dir",
    "udir",
)


@dataclass(frozen=True)
class FieldOutput:
    """One value selected for a field."""

    field: str
    value: str


@dataclass(frozen=True)
class _ParsedURL:
    text: str
    scheme: str
    host: str
    hostname: str
    path: str
    query: dict[str, list[str]]

    @property
    def root_url(self) -> str:
        return f"{self.scheme}://{self.host}"

    def encoded_query(self) -> str:
        return urlencode([(key, value) for key, values in self.query.items() for value in values])

    def file(self) -> str:
        if self.path in ("", "/"):
            return ""
        trimmed = self.path.rstrip("/")
        base = trimmed.rpartition("/")[2] if trimmed else "/"
        return base if "." in base else ""

    def directory(self) -> str:
        if self.path in ("", "/") or "/" not in self.path[1:]:
            return ""
        return self.path[: self.path[1:].rfind("/") + 2]


def _parse(url: str) -> _ParsedURL:
    parts = urlsplit(url)
    host = parts.netloc.rpartition("@")[2]
    if host.startswith("["):
        end = host.find("]")
        hostname = host[1:end] if end >= 0 else host[1:]
    else:
        hostname = host.partition(":")[0]
    query: dict[str, list[str]] = {}
    for key, value in parse_qsl(parts.query, keep_blank_values=True):
        query.setdefault(key, []).append(value)
    return _ParsedURL(
        text=urlunsplit(parts),
        scheme=parts.scheme,
        host=host,
        hostname=hostname,
        path=unquote(parts.path),
        query=query,
    )


def _rdn(hostname: str) -> str:
    try:
        return effective_tld_plus_one(hostname)
    except DomainError:
        return ""


def _split_fields(fields: str) -> list[str]:
    return [name for name in fields.split(",") if name]


def validate_field_names(names: str, custom_fields: Iterable[str] | None = None) -> None:
    """Raise ValueError unless every comma separated name is a known field.

    ``custom_fields`` holds the names of the loaded custom fields.
    """
    known = set(FIELD_NAMES) | set(custom_fields or ())
    for name in names.split(","):
        if name not in known:
            raise ValueError(f"invalid field {name} specified: {names}")


def _format_one(result: Result, parsed: _ParsedURL, name: str) -> Iterator[FieldOutput]:
    url = result.request.url
    if name == "url":
        yield FieldOutput("url", url)
    elif name == "rdn":
        yield FieldOutput("rdn", _rdn(parsed.hostname))
    elif name == "path":
        if parsed.path:
            yield FieldOutput("path", parsed.path)
    elif name == "fqdn":
        yield FieldOutput("fqdn", parsed.hostname)
    elif name == "rurl":
        yield FieldOutput("rurl", parsed.root_url)
    elif name == "qpath":
        if parsed.query:
            yield FieldOutput("qpath", f"{parsed.path}?{parsed.encoded_query()}")
    elif name == "qurl":
        if parsed.query:
            yield FieldOutput("qurl", url)
    elif name == "key":
        yield from (FieldOutput("key", key) for key in parsed.query)
    elif name == "kv":
        yield from (
            FieldOutput("kv", f"{key}={value}")
            for key, values in parsed.query.items()
            for value in values
        )
    elif name == "value":
        yield from (
            FieldOutput("value", value) for values in parsed.query.values() for value in values
        )
    elif name == "file":
        if file_name := parsed.file():
            yield FieldOutput("file", file_name)
    elif name == "ufile":
        if parsed.file():
            yield FieldOutput("ufile", parsed.text)
    elif name == "udir":
        if directory := parsed.directory():
            yield FieldOutput("udir", parsed.root_url + directory)
    elif name == "dir":
        if directory := parsed.directory():
            yield FieldOutput("dir", directory)
    else:
        yield from (FieldOutput(name, value) for value in result.request.custom_fields.get(name, ()))


def format_field(result: Result, fields: str) -> list[FieldOutput]:
    """Return the values of the comma separated ``fields`` for a result."""
    try:
        parsed = _parse(result.request.url)
    except ValueError:
        return []
    return [output for name in _split_fields(fields) for output in _format_one(result, parsed, name)]


def value_for_field(result: Result, url: str, field: str) -> str:
    """Return the value of a predefined field for ``url`` as one string.

    Multi-valued fields are joined with newlines; an empty string means the
    field has no value.
    """
    try:
        parsed = _parse(url)
    except ValueError:
        return ""
    if field == "url":
        return result.request.url
    if field == "path":
        return parsed.path
    if field == "fqdn":
        return parsed.hostname
    if field == "rdn":
        return _rdn(parsed.hostname)
    if field == "rurl":
        return parsed.root_url
    if field == "ufile":
        return parsed.text if parsed.file() else ""
    if field == "file":
        return parsed.file()
    if field == "dir":
        return parsed.directory()
    if field == "udir":
        directory = parsed.directory()
        return parsed.root_url + directory if directory else ""
    if field == "qpath":
        return f"{parsed.path}?{parsed.encoded_query()}" if parsed.query else ""
    if field == "qurl":
        return parsed.text if parsed.query else ""
    if field == "key":
        return "\n".join(parsed.query)
    if field == "value":
        return "\n".join(value for values in parsed.query.values() for value in values)
    if field == "kv":
        return "\n".join(
            f"{key}={value}" for key, values in parsed.query.items() for value in values
        )
    return ""


def custom_field_values(result: Result) -> list[FieldOutput]:
    """Return every custom field value recorded on the result's request."""
    return [
        FieldOutput(name, value)
        for name, values in result.request.custom_fields.items()
        for value in values
    ]


def _append(directory: str | Path, parsed: _ParsedURL, field: str, data: str) -> None:
    path = Path(directory) / f"{parsed.scheme}_{parsed.hostname}_{field}.txt"
    try:
        with open(path, "a", encoding="utf-8") as handle:
            handle.write(data + "\n")
    except OSError as exc:
        logger.debug("could not append to %s: %s", path, exc)


def store_fields(
    result: Result,
    fields: Iterable[str],
    directory: str | Path,
    custom_fields: Mapping[str, Any] | None = None,
) -> None:
    """Append the values of ``fields`` to per-host files in ``directory``."""
    url = result.request.url
    try:
        parsed = _parse(url)
    except ValueError as exc:
        logger.warning("store_fields: failed to parse url %s got %s", url, exc)
        return
    for name in fields:
        if value := value_for_field(result, url, name):
            _append(directory, parsed, name, value)
        if custom_fields and name in custom_fields:
            for output in custom_field_values(result):
                _append(directory, parsed, output.field, output.value)