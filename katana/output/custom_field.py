"""User-defined output fields extracted from responses with regular expressions."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from katana.output.fields import FIELD_NAMES

_VALID_NAME = re.compile(r"[A-Za-z0-9_-]+")


class Part(str, Enum):
    """The part of a request or response a custom field is taken from."""

    HEADER = "header"
    BODY = "body"
    RESPONSE = "response"

    def __str__(self) -> str:
        return self.value


class CustomFieldError(ValueError):
    """Raised for unreadable or invalid custom field configuration."""


@dataclass
class CustomFieldConfig:
    """The definition of one custom field."""

    name: str = ""
    type: str = ""
    part: str = ""
    group: int = 0
    regex: list[str] = field(default_factory=list)
    compiled_regex: list[re.Pattern[str]] = field(
        default_factory=list, repr=False, compare=False
    )

    def to_dict(self) -> dict[str, Any]:
        """Return the configuration-file form, without empty fields."""
        items = {
            "name": self.name,
            "type": self.type,
            "part": self.part,
            "group": self.group,
            "regex": list(self.regex),
        }
        return {key: value for key, value in items.items() if value}


DEFAULT_FIELD_CONFIG_DATA = (
    CustomFieldConfig(
        name="email",
        type="regex",
        part=Part.RESPONSE.value,
        regex=[r"([a-zA-Z0-9._-]+@[a-zA-Z0-9._-]+\.[a-zA-Z0-9_-]+)"],
    ),
)


def _decode_error(detail: object) -> CustomFieldError:
    return CustomFieldError(f"could not decode field config: {detail}")


def _config_from_mapping(item: Any) -> CustomFieldConfig:
    if not isinstance(item, dict):
        raise _decode_error(f"expected a mapping, got {item!r}")
    regex = item.get("regex") or []
    if not isinstance(regex, list):
        raise _decode_error(f"regex must be a list, got {regex!r}")
    try:
        group = int(item.get("group") or 0)
    except (TypeError, ValueError) as exc:
        raise _decode_error(exc) from exc
    return CustomFieldConfig(
        name=str(item.get("name") or ""),
        type=str(item.get("type") or ""),
        part=str(item.get("part") or ""),
        group=group,
        regex=[str(pattern) for pattern in regex],
    )


def _read_configs(path: str | Path) -> list[CustomFieldConfig]:
    try:
        with open(path, encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except OSError as exc:
        raise CustomFieldError(f"could not read field config: {exc}") from exc
    except yaml.YAMLError as exc:
        raise _decode_error(exc) from exc
    if data is None:
        raise _decode_error("empty document")
    if not isinstance(data, list):
        raise _decode_error(f"expected a list, got {type(data).__name__}")
    return [_config_from_mapping(item) for item in data]


def parse_custom_field_names(path: str | Path) -> list[CustomFieldConfig]:
    """Read a field configuration file and check that its field names are usable.

    Names must be made of letters, digits, ``_`` and ``-``, must not clash
    with a predefined field and must be unique.
    """
    seen: set[str] = set()
    configs = _read_configs(path)
    for config in configs:
        if not _VALID_NAME.fullmatch(config.name):
            raise CustomFieldError(f"wrong custom field name {config.name}")
        if config.name in FIELD_NAMES:
            raise CustomFieldError(
                f'could not register custom field. "{config.name}" already pre-defined field'
            )
        if config.name in seen:
            raise CustomFieldError(
                f'could not register custom field. "{config.name}" custom field already exists'
            )
        seen.add(config.name)
    return configs


def load_custom_fields(path: str | Path, fields: str) -> dict[str, CustomFieldConfig]:
    """Load the configured fields named in the comma separated ``fields``.

    Regular expressions are compiled and a missing part defaults to the
    whole response.
    """
    available: dict[str, CustomFieldConfig] = {}
    for config in _read_configs(path):
        for pattern in config.regex:
            try:
                config.compiled_regex.append(re.compile(pattern))
            except re.error as exc:
                raise CustomFieldError(
                    f"could not parse regex in field config: {exc}"
                ) from exc
        if not config.part:
            config.part = Part.RESPONSE.value
        available[config.name] = config
    return {
        name: available[name]
        for name in (part for part in fields.split(",") if part)
        if name in available
    }


def init_custom_field_config_file(home: str | Path | None = None) -> Path:
    """Return the default field configuration file, creating it if missing."""
    base = Path(home) if home is not None else Path.home()
    path = base / ".config" / "katana" / "field-config.yaml"
    if path.is_file():
        return path
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(path, "w", encoding="utf-8") as handle:
            yaml.safe_dump(
                [config.to_dict() for config in DEFAULT_FIELD_CONFIG_DATA],
                handle,
                sort_keys=False,
            )
    except OSError as exc:
        raise CustomFieldError(f"could not create field config: {exc}") from exc
    return path