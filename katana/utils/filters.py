"""Deduplication and cycle detection for crawled URLs and content."""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from dataclasses import dataclass

MAX_CHROME_URL_LENGTH = 2097152
MIN_SEQUENCE_LENGTH = 10
MAX_SEQUENCE_COUNT = 10


@dataclass(frozen=True)
class RepeatingSequence:
    """The longest repeating substring of a text and how often it occurs."""

    sequence: str
    count: int


def longest_repeating_sequence(text: str) -> RepeatingSequence:
    """Find the longest non-overlapping repeated substring of ``text``."""
    n = len(text)
    previous = [0] * (n + 1)
    best_length = 0
    best_end = 0
    for i in range(1, n + 1):
        current = [0] * (n + 1)
        for j in range(i + 1, n + 1):
            if text[i - 1] == text[j - 1] and previous[j - 1] < j - i:
                current[j] = previous[j - 1] + 1
                if current[j] > best_length:
                    best_length = current[j]
                    best_end = max(i, best_end)
        previous = current
    sequence = text[best_end - best_length:best_end] if best_length else ""
    return RepeatingSequence(sequence, text.count(sequence))


class Filter(ABC):
    """Interface of a deduplication mechanism."""

    @abstractmethod
    def close(self) -> None:
        """Release the resources held by the filter."""

    @abstractmethod
    def unique_url(self, url: str) -> bool:
        """Return True the first time a URL is seen."""

    @abstractmethod
    def unique_content(self, content: bytes) -> bool:
        """Return True the first time a piece of content is seen."""

    @abstractmethod
    def is_cycle(self, url: str) -> bool:
        """Return True if the URL looks like a navigation loop."""


class SimpleFilter(Filter):
    """In-memory filter keeping every URL and content hash seen."""

    def __init__(self) -> None:
        self._seen: set[str] = set()

    def _first_time(self, key: str) -> bool:
        if key in self._seen:
            return False
        self._seen.add(key)
        return True

    def close(self) -> None:
        self._seen.clear()

    def unique_url(self, url: str) -> bool:
        return self._first_time(url)

    def unique_content(self, content: bytes) -> bool:
        return self._first_time(hashlib.md5(content).hexdigest())

    def is_cycle(self, url: str) -> bool:
        if len(url) > MAX_CHROME_URL_LENGTH:
            return True
        sequence = longest_repeating_sequence(url)
        return (
            sequence.count >= MAX_SEQUENCE_COUNT
            and len(sequence.sequence) > MIN_SEQUENCE_LENGTH
        )

    def __enter__(self) -> SimpleFilter:
        return self

    def __exit__(self, *args) -> None:
        self.close()