"""
File access capability consumed by the edit tools.

The tools never touch the filesystem directly; they go through a
:class:`FileOperations` implementation, so a sandbox bridge or an
in-memory store can be swapped in.
"""

from __future__ import annotations

import logging
import os
import shutil
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class FileOperations(ABC):
    """Minimal byte-level file interface."""

    @abstractmethod
    def read_bytes(self, path: str) -> bytes:
        """Return the file's content; raise ``FileNotFoundError`` if absent."""

    @abstractmethod
    def write_bytes(self, path: str, data: bytes) -> None:
        ...

    @abstractmethod
    def exists(self, path: str) -> bool:
        ...

    @abstractmethod
    def make_dirs(self, path: str) -> None:
        """Create *path* and any missing parents; no-op if it exists."""


class LocalFileOperations(FileOperations):
    """Local filesystem with atomic temp-file + rename writes."""

    def read_bytes(self, path: str) -> bytes:
        with open(path, "rb") as f:
            return f.read()

    def write_bytes(self, path: str, data: bytes) -> None:
        abs_path = os.path.abspath(path)
        tmp_path = abs_path + ".smartpatch_tmp"

        try:
            with open(tmp_path, "wb") as f:
                f.write(data)

            # Keep permission bits (e.g. +x) of the file being replaced
            if os.path.exists(abs_path):
                shutil.copymode(abs_path, tmp_path)
            os.replace(tmp_path, abs_path)
        except Exception:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def make_dirs(self, path: str) -> None:
        if path:
            os.makedirs(path, exist_ok=True)


class InMemoryFileOperations(FileOperations):
    """Dict-backed store, keyed by normalized path."""

    def __init__(self, files: dict[str, bytes] | None = None) -> None:
        self.files: dict[str, bytes] = {
            os.path.normpath(k): v for k, v in (files or {}).items()
        }
        self.dirs: set[str] = set()

    def read_bytes(self, path: str) -> bytes:
        key = os.path.normpath(path)
        if key not in self.files:
            raise FileNotFoundError(path)
        return self.files[key]

    def write_bytes(self, path: str, data: bytes) -> None:
        self.files[os.path.normpath(path)] = data

    def exists(self, path: str) -> bool:
        key = os.path.normpath(path)
        return key in self.files or key in self.dirs

    def make_dirs(self, path: str) -> None:
        if path:
            self.dirs.add(os.path.normpath(path))


class DryRunFileOperations(FileOperations):
    """Reads through to *base*, holds writes in memory until :meth:`commit`.

    Reads of a path that has a pending write return the pending content.
    """

    def __init__(self, base: FileOperations) -> None:
        self.base = base
        self.pending: dict[str, bytes] = {}
        self._dirs: list[str] = []

    def read_bytes(self, path: str) -> bytes:
        if path in self.pending:
            return self.pending[path]
        return self.base.read_bytes(path)

    def write_bytes(self, path: str, data: bytes) -> None:
        self.pending[path] = data

    def exists(self, path: str) -> bool:
        return path in self.pending or self.base.exists(path)

    def make_dirs(self, path: str) -> None:
        self._dirs.append(path)

    def original(self, path: str) -> bytes | None:
        """Content of *path* in the base store, or ``None`` if absent."""
        if not self.base.exists(path):
            return None
        return self.base.read_bytes(path)

    def commit(self) -> list[str]:
        """Flush pending writes to *base*; returns the written paths."""
        for d in self._dirs:
            self.base.make_dirs(d)
        written: list[str] = []
        for path, data in self.pending.items():
            self.base.write_bytes(path, data)
            written.append(path)
        logger.debug("[DryRun] Committed %d file(s)", len(written))
        self.pending.clear()
        self._dirs.clear()
        return written

    def discard(self) -> None:
        self.pending.clear()
        self._dirs.clear()
