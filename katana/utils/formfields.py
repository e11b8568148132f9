"""Extraction of HTML forms and their parameters."""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import SplitResult, urlsplit, urlunsplit

from bs4 import BeautifulSoup

_DEFAULT_ENCTYPE = "application/x-www-form-urlencoded"


@dataclass
class Form:
    """A form found in a page."""

    method: str = ""
    action: str = ""
    enctype: str = ""
    parameters: list[str] = field(default_factory=list)


def _attr(element, name: str) -> str:
    value = element.get(name)
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(value)
    return value


def _merge_paths(base: str, extra: str) -> str:
    if not extra:
        return base
    if not base:
        return extra
    return base.rstrip("/") + "/" + extra.lstrip("/")


def _resolve(base_url: str, action: str) -> str | None:
    try:
        base = urlsplit(base_url)
        relative = urlsplit(action)
    except ValueError:
        return None
    if action.startswith("/"):
        resolved: SplitResult = base._replace(
            path=relative.path, query=relative.query, fragment=relative.fragment
        )
    else:
        query = "&".join(q for q in (base.query, relative.query) if q)
        resolved = base._replace(path=_merge_paths(base.path, relative.path), query=query)
    return urlunsplit(resolved)


def parse_form_fields(html: str, base_url: str | None = None) -> list[Form]:
    """Return the forms of a page with their input, textarea and select names.

    Relative actions are resolved against ``base_url`` when it is given.
    """
    soup = BeautifulSoup(html, "html.parser")
    forms: list[Form] = []
    for element in soup.find_all("form"):
        action = _attr(element, "action")
        method = _attr(element, "method") or "GET"
        enctype = _attr(element, "enctype")
        if not enctype and method != "GET":
            enctype = _DEFAULT_ENCTYPE

        try:
            parsed = urlsplit(action)
        except ValueError:
            if base_url is not None:
                action = base_url
        else:
            is_absolute = bool(parsed.scheme) or action.startswith(("//", "\\"))
            if not is_absolute and base_url is not None:
                resolved = _resolve(base_url, action)
                if resolved is None:
                    continue
                action = resolved

        parameters = [
            _attr(field_element, "name")
            for field_element in element.find_all(["input", "textarea", "select"])
            if "name" in field_element.attrs
        ]
        form = Form(method=method.upper(), action=action, enctype=enctype, parameters=parameters)
        if form.action or form.method or form.enctype or form.parameters:
            forms.append(form)
    return forms