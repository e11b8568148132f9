"""Buffered output files and on-disk storage of crawled responses."""

from __future__ import annotations

import hashlib
import os
from urllib.parse import urlsplit

from katana.output.result import Result

INDEX_FILE = "index.txt"


class FileWriter:
    """A buffered, line oriented output file.

    The file is created, or truncated if it exists, when the writer is made.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = os.fspath(path)
        self._file = open(self.path, "wb")

    def write(self, data: str | bytes) -> None:
        """Write ``data`` followed by a newline."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._file.write(data)
        self._file.write(b"\n")

    def close(self) -> None:
        """Flush everything to disk and close the file."""
        if self._file.closed:
            return
        self._file.flush()
        try:
            os.fsync(self._file.fileno())
        except OSError:
            pass
        self._file.close()

    def __enter__(self) -> FileWriter:
        return self

    def __exit__(self, *args) -> None:
        self.close()


def response_hash(url: str) -> str:
    """Return the hex SHA-1 digest of a URL, used as a response file name."""
    return hashlib.sha1(url.encode("utf-8")).hexdigest()


def response_host(url: str) -> str:
    """Return the host of ``url`` (with port) made safe as a directory name.

    Raises ValueError if the URL cannot be parsed.
    """
    host = urlsplit(url).netloc.rpartition("@")[2]
    return os.path.normpath(host.replace(":", "_"))


def response_file_name(folder: str, domain: str, url: str) -> str:
    """Return the file a response for ``url`` is stored in, creating its host directory."""
    host_dir = os.path.join(folder, domain)
    os.makedirs(host_dir, exist_ok=True)
    return os.path.join(host_dir, response_hash(url) + ".txt")


def update_index(folder: str, result: Result) -> None:
    """Append a line for a stored response to the existing index file of ``folder``."""
    fd = os.open(os.path.join(folder, INDEX_FILE), os.O_APPEND | os.O_WRONLY)
    with os.fdopen(fd, "a", encoding="utf-8") as index:
        url = result.request.url
        domain = response_host(url)
        status = result.response.status if result.response is not None else ""
        index.write(f"{response_file_name(folder, domain, url)} {url} ({status})\n")