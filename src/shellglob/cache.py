"""
Shared memo of directory reads and stat calls.

One `GlobCache` is used by every walker of a `Glob` run, and a caller may pass
the same instance to several runs to avoid re-reading unchanged directories.
All methods may be called from several threads at once.
"""

from __future__ import annotations

import os
import stat
import threading
from collections.abc import Callable
from typing import NamedTuple, TypeVar

_V = TypeVar("_V")


class Entry(NamedTuple):
    """A directory entry. `is_dir` follows symlinks; dangling links are not directories."""

    name: str
    is_dir: bool
    is_symlink: bool


class _Failure(NamedTuple):
    """A failed directory read, kept without its traceback."""

    kind: type[OSError]
    args: tuple[object, ...]
    filename: str | None

    @classmethod
    def of(cls, e: OSError) -> _Failure:
        return cls(type(e), e.args, e.filename)

    def error(self) -> OSError:
        e = self.kind(*self.args)
        e.filename = self.filename
        return e


class GlobCache:
    """
    Thread-safe cache of `readdir`, `lstat`, `stat` and `realpath` results,
    keyed by path string. Failed directory reads are remembered too.

    The lock only guards the tables; filesystem calls run outside it, so two
    threads may race to fill the same key and the first result stored wins.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._readdir: dict[str, tuple[Entry, ...] | _Failure] = {}
        self._lstat: dict[str, os.stat_result | None] = {}
        self._stat: dict[str, os.stat_result | None] = {}
        self._realpath: dict[str, str | None] = {}
        self.hits = 0
        self.misses = 0

    def readdir(self, path: str) -> tuple[Entry, ...]:
        """List `path`, raising a new copy of the cached `OSError` if it can't be read."""
        result = self._lookup(self._readdir, path, _scan)
        if isinstance(result, _Failure):
            raise result.error()
        return result

    def lstat(self, path: str) -> os.stat_result | None:
        return self._lookup(self._lstat, path, _lstat)

    def stat(self, path: str) -> os.stat_result | None:
        return self._lookup(self._stat, path, _stat)

    def realpath(self, path: str) -> str | None:
        """Canonical absolute path, or `None` if `path` is missing or a dangling link."""
        return self._lookup(self._realpath, path, _realpath)

    def exists(self, path: str) -> bool:
        """True if `path` exists, counting dangling symlinks."""
        return self.lstat(path) is not None

    def is_dir(self, path: str) -> bool:
        st = self.stat(path)
        return st is not None and stat.S_ISDIR(st.st_mode)

    def identity(self, path: str) -> tuple[int, int] | None:
        """`(st_dev, st_ino)` of the file `path` resolves to."""
        st = self.stat(path)
        if st is None:
            return None
        return (st.st_dev, st.st_ino)

    def clear(self) -> None:
        with self._lock:
            self._readdir.clear()
            self._lstat.clear()
            self._stat.clear()
            self._realpath.clear()
            self.hits = 0
            self.misses = 0

    def _lookup(self, table: dict[str, _V], key: str, compute: Callable[[str], _V]) -> _V:
        with self._lock:
            if key in table:
                self.hits += 1
                return table[key]
            self.misses += 1
        value = compute(key)
        with self._lock:
            return table.setdefault(key, value)


def _scan(path: str) -> tuple[Entry, ...] | _Failure:
    entries: list[Entry] = []
    try:
        with os.scandir(path) as scan:
            for entry in scan:
                try:
                    is_symlink = entry.is_symlink()
                    is_dir = entry.is_dir()
                except OSError:
                    is_symlink = is_dir = False
                entries.append(Entry(entry.name, is_dir, is_symlink))
    except OSError as e:
        return _Failure.of(e)
    return tuple(entries)


def _lstat(path: str) -> os.stat_result | None:
    try:
        return os.lstat(path)
    except OSError:
        return None


def _stat(path: str) -> os.stat_result | None:
    try:
        return os.stat(path)
    except OSError:
        return None


def _realpath(path: str) -> str | None:
    try:
        return os.path.realpath(path, strict=True)
    except OSError:
        return None
