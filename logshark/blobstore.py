"""Minimal interface to the external durable blob store.

The engine only ever lists, reads and writes whole objects of text lines.
Keys are "/"-separated strings such as "raw/access-01.csv".
"""

import logging
import os
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional

from logshark.errors import BlobStoreError

logger = logging.getLogger(__name__)


class BlobStore(ABC):
    """
    Abstract base class for blob stores.

    Implementations raise BlobStoreError for every failure to reach or use
    the underlying storage, including missing keys.
    """

    @abstractmethod
    def list_keys(self, prefix: str = "") -> list[str]:
        """
        Return all keys starting with prefix, sorted.

        Args:
            prefix: Key prefix to filter on. Empty string lists everything.
        """
        pass

    @abstractmethod
    def read_lines(self, key: str) -> list[str]:
        """
        Return every line of the object, without line terminators.

        Raises:
            BlobStoreError: If the object cannot be read.
        """
        pass

    @abstractmethod
    def write_lines(self, key: str, lines: Iterable[str]) -> None:
        """
        Replace the object at key with the given lines.

        Raises:
            BlobStoreError: If the object cannot be written.
        """
        pass

    @contextmanager
    def open_lines(self, key: str) -> Iterator[list[str]]:
        """Scoped read: acquire the object, hand out its lines, release."""
        lines = self.read_lines(key)
        try:
            yield lines
        finally:
            logger.debug("Released %s (%d lines)", key, len(lines))


class LocalBlobStore(BlobStore):
    """Blob store backed by a directory on the local filesystem."""

    def __init__(
        self, root: str, encoding: str = "utf-8", errors: str = "surrogateescape"
    ):
        """
        Create a store rooted at a directory.

        Args:
            root: Directory holding the objects. Created on first write.
            encoding: Text encoding of every object.
            errors: Codec error handler. The default keeps undecodable
                bytes as lone surrogates, which the parser rejects per line.
        """
        self._root = os.path.abspath(root)
        self._encoding = encoding
        self._errors = errors

    @property
    def root(self) -> str:
        return self._root

    def _path(self, key: str) -> str:
        parts = [p for p in key.split("/") if p]
        if not parts or any(p == ".." for p in parts):
            raise BlobStoreError(f"Invalid key: {key!r}")
        return os.path.join(self._root, *parts)

    def list_keys(self, prefix: str = "") -> list[str]:
        if not os.path.isdir(self._root):
            raise BlobStoreError(f"Blob store root does not exist: {self._root}")
        keys = []
        try:
            for dirpath, _dirnames, filenames in os.walk(self._root):
                for filename in filenames:
                    full = os.path.join(dirpath, filename)
                    key = os.path.relpath(full, self._root).replace(os.sep, "/")
                    if key.startswith(prefix):
                        keys.append(key)
        except OSError as e:
            raise BlobStoreError(f"Cannot list {self._root}: {e}") from e
        return sorted(keys)

    def read_lines(self, key: str) -> list[str]:
        path = self._path(key)
        try:
            with open(path, encoding=self._encoding, errors=self._errors, newline="") as f:
                return f.read().splitlines()
        except (OSError, UnicodeDecodeError) as e:
            raise BlobStoreError(f"Cannot read {key}: {e}") from e

    def write_lines(self, key: str, lines: Iterable[str]) -> None:
        path = self._path(key)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(
                path, "w", encoding=self._encoding, errors=self._errors, newline=""
            ) as f:
                for line in lines:
                    f.write(line)
                    f.write("\n")
        except (OSError, UnicodeEncodeError) as e:
            raise BlobStoreError(f"Cannot write {key}: {e}") from e


class MemoryBlobStore(BlobStore):
    """In-process blob store, used by tests and small jobs."""

    def __init__(self, objects: Optional[dict[str, list[str]]] = None):
        self._objects: dict[str, list[str]] = {
            key: list(lines) for key, lines in (objects or {}).items()
        }
        self._lock = threading.Lock()

    def list_keys(self, prefix: str = "") -> list[str]:
        with self._lock:
            return sorted(k for k in self._objects if k.startswith(prefix))

    def read_lines(self, key: str) -> list[str]:
        with self._lock:
            if key not in self._objects:
                raise BlobStoreError(f"No such object: {key}")
            return list(self._objects[key])

    def write_lines(self, key: str, lines: Iterable[str]) -> None:
        data = list(lines)
        with self._lock:
            self._objects[key] = data

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._objects
