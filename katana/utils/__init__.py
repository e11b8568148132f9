"""Scope, domains, extensions, deduplication, queues, endpoint and form extraction, URL helpers."""