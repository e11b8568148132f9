"""Crawl results and error records written by the output writers."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from katana.utils.formfields import Form


def _compact(mapping: dict[str, Any]) -> dict[str, Any]:
    """Drop empty values the way an omit-empty serializer does."""
    return {key: value for key, value in mapping.items() if value}


def _timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass
class Request:
    """A request issued by the crawler."""

    method: str = ""
    url: str = ""
    body: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    tag: str = ""
    attribute: str = ""
    source: str = ""
    element: str = ""
    depth: int = 0
    raw: str = ""
    custom_fields: dict[str, list[str]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form of the request, without empty fields."""
        return _compact({
            "method": self.method,
            "endpoint": self.url,
            "body": self.body,
            "headers": dict(self.headers),
            "tag": self.tag,
            "attribute": self.attribute,
            "source": self.source,
            "element": self.element,
            "depth": self.depth,
            "raw": self.raw,
            "custom_fields": {k: list(v) for k, v in self.custom_fields.items()},
        })


@dataclass
class Response:
    """A response received by the crawler.

    ``status_code`` is zero when no HTTP response was actually received.
    ``status`` and ``url`` describe the underlying HTTP exchange and are not
    part of the JSON form.
    """

    status_code: int = 0
    status: str = ""
    url: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""
    content_length: int = 0
    technologies: list[str] = field(default_factory=list)
    raw: str = ""
    forms: list[Form] = field(default_factory=list)
    stored_response_path: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form of the response, without empty fields."""
        return _compact({
            "status_code": self.status_code,
            "headers": dict(self.headers),
            "body": self.body,
            "content_length": self.content_length,
            "technologies": list(self.technologies),
            "raw": self.raw,
            "forms": [asdict(form) for form in self.forms],
            "stored_response_path": self.stored_response_path,
        })


@dataclass
class Result:
    """One result of the crawl."""

    request: Request = field(default_factory=Request)
    response: Response | None = None
    timestamp: datetime | None = None
    error: str = ""

    def has_response(self) -> bool:
        """Return True if the result holds a response that was actually received."""
        return self.response is not None and self.response.status_code != 0

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form of the result, without empty fields."""
        return _compact({
            "timestamp": _timestamp(self.timestamp),
            "request": self.request.to_dict() if self.request is not None else None,
            "response": self.response.to_dict() if self.response is not None else None,
            "error": self.error,
        })


@dataclass
class ErrorRecord:
    """A failed request, as written to the error log."""

    timestamp: datetime | None = None
    endpoint: str = ""
    source: str = ""
    error: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form of the record, without empty fields."""
        return _compact({
            "timestamp": _timestamp(self.timestamp),
            "endpoint": self.endpoint,
            "source": self.source,
            "error": self.error,
        })