"""Helpers for ordered string maps."""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping


def merge_data_maps(target: MutableMapping[str, str], source: Mapping[str, str]) -> None:
    """Copy every entry of ``source`` into ``target``, in order, overwriting."""
    for key, value in source.items():
        target[key] = value