"""Crawler building blocks: scope, filtering, queueing, extraction and output."""

__version__ = "0.1.0"