"""
Traversal engine: walks the filesystem for one compiled alternative.

Directory reads and stats go through a shared `GlobCache`. Unreadable
subdirectories are skipped; failing to read the pattern's own root (the cwd,
or the filesystem or drive root for absolute patterns) fails the whole walk.
"""

from __future__ import annotations

import logging
import os
import posixpath
import threading
from collections.abc import Iterable, Iterator

import anyio.to_thread

from shellglob.cache import Entry, GlobCache
from shellglob.errors import WalkError
from shellglob.ignore import IgnoreFilter
from shellglob.pattern import CompiledAlternative, Segment, SegmentKind
from shellglob.types import GlobOptions

log = logging.getLogger(__name__)

_Chain = frozenset[tuple[int, int]]


class MatchSet:
    """Insertion-ordered set of match strings, safe to fill from several threads."""

    def __init__(self, items: Iterable[str] = ()) -> None:
        self._lock = threading.Lock()
        self._items: dict[str, None] = {}
        self.update(items)

    def add(self, item: str) -> bool:
        """Add `item`; returns False if it was already present."""
        with self._lock:
            if item in self._items:
                return False
            self._items[item] = None
            return True

    def update(self, items: Iterable[str]) -> None:
        for item in items:
            self.add(item)

    def __contains__(self, item: object) -> bool:
        with self._lock:
            return item in self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            snapshot = list(self._items)
        return iter(snapshot)

    def __repr__(self) -> str:
        return f"MatchSet({list(self)!r})"


class GlobWalker:
    """
    Finds the paths matching one `CompiledAlternative`.

    Results are unique within one walk, in discovery order. If `matches` is
    given, every result is also added to it as it is found, so several walkers of
    one `Glob` fill a single union of matches.
    """

    def __init__(
        self,
        alternative: CompiledAlternative,
        options: GlobOptions,
        cache: GlobCache | None = None,
        matches: MatchSet | None = None,
        ignore: IgnoreFilter | None = None,
    ) -> None:
        self.alternative = alternative
        self.options = options
        self.cache = cache or options.cache or GlobCache()
        self.matches = matches
        self.ignore = ignore if ignore is not None else IgnoreFilter(options.ignore_patterns)
        self.cwd = os.path.abspath(options.cwd or os.curdir)
        self._root = ""
        self._found: dict[str, None] = {}

    async def walk(self) -> list[str]:
        """Same as `walk_sync()`, run on a worker thread."""
        return await anyio.to_thread.run_sync(self.walk_sync)

    def walk_sync(self) -> list[str]:
        self._found = {}
        segments = self.alternative.segments
        if self.alternative.is_absolute:
            self._root = self.alternative.root
            out, rest = self.alternative.parts[:1], segments[1:]
        else:
            self._root, out, rest = self.cwd, (), segments

        if not self.cache.is_dir(self._root):
            raise WalkError(f"Glob root is not a directory: {self._root}", self._root)

        self._step(self._root, out, rest, frozenset())
        return list(self._found)

    def _step(self, fs: str, out: tuple[str, ...], segments: tuple[Segment, ...], chain: _Chain) -> None:
        """Match `segments` below the directory `fs`, whose output spelling is `out`."""
        if not segments:
            self._emit(fs, out)
            return

        segment, rest = segments[0], segments[1:]
        if segment.kind is SegmentKind.EMPTY:
            if self.cache.is_dir(fs):
                self._step(fs, out + ("",), rest, chain)
        elif segment.kind is SegmentKind.GLOBSTAR:
            self._globstar(fs, out, rest, chain)
        elif segment.kind is SegmentKind.LITERAL:
            child = os.path.join(fs, segment.value)
            if self.cache.exists(child):
                self._descend(child, out + (segment.value,), rest, chain)
        else:
            for entry in self._readdir(fs):
                if segment.match(entry.name):
                    self._descend(
                        os.path.join(fs, entry.name), out + (entry.name,), rest, chain, entry
                    )

    def _descend(
        self,
        child: str,
        out: tuple[str, ...],
        rest: tuple[Segment, ...],
        chain: _Chain,
        entry: Entry | None = None,
    ) -> None:
        if not rest:
            self._emit(child, out, entry.is_dir if entry else None)
            return
        is_dir = entry.is_dir if entry else self.cache.is_dir(child)
        if not is_dir:
            return
        if self.ignore and self.ignore.ignored("/".join(out), is_dir=True):
            return
        self._step(child, out, rest, chain)

    def _globstar(self, fs: str, out: tuple[str, ...], rest: tuple[Segment, ...], chain: _Chain) -> None:
        """Match `rest` at `fs` and at every directory below it."""
        # Zero directories. A bare cwd is never a result of its own.
        if rest:
            if out or rest[0].kind is not SegmentKind.EMPTY:
                self._step(fs, out, rest, chain)
        elif out:
            self._emit(fs, out, True)

        if self.options.follow:
            identity = self.cache.identity(fs)
            if identity is None or identity in chain:
                log.debug("Not descending into %s again (symlink loop)", fs)
                return
            chain = chain | {identity}

        for entry in self._readdir(fs):
            if entry.name.startswith(".") and not self.options.dot:
                continue
            child = os.path.join(fs, entry.name)
            child_out = out + (entry.name,)
            descend = self.options.follow or not entry.is_symlink
            if entry.is_dir and (descend or rest):
                if self.ignore and self.ignore.ignored("/".join(child_out), is_dir=True):
                    continue
                if descend:
                    self._globstar(child, child_out, rest, chain)
                else:
                    # Symlinked directory: `**` stops here, the rest still matches inside it.
                    self._step(child, child_out, rest, chain)
            elif not rest:
                self._emit(child, child_out, entry.is_dir)

    def _readdir(self, fs: str) -> tuple[Entry, ...]:
        try:
            return self.cache.readdir(fs)
        except OSError as e:
            if fs == self._root:
                raise WalkError(f"Cannot read glob root {fs}: {e.strerror or e}", fs) from e
            log.debug("Skipping unreadable directory %s: %s", fs, e)
            return ()

    def _emit(self, fs: str, out: tuple[str, ...], is_dir: bool | None = None) -> None:
        rel = "/".join(out)
        if not rel:
            return
        if is_dir is None:
            is_dir = self.cache.is_dir(fs)
        if self.options.nodir and is_dir:
            return
        if self.ignore and self.ignore.ignored(rel, is_dir):
            return

        result = self._format(fs, rel, is_dir)
        if result is None or result in self._found:
            return
        self._found[result] = None
        if self.matches is not None:
            self.matches.add(result)

    def _format(self, fs: str, rel: str, is_dir: bool) -> str | None:
        if self.options.realpath:
            result = self.cache.realpath(fs)
            if result is None:
                return None
        elif self.options.absolute and not self.alternative.is_absolute:
            cwd = self.cwd.replace(os.sep, "/")
            result = posixpath.normpath(posixpath.join(cwd, rel))
        else:
            result = rel

        # normpath and realpath drop the trailing slash of `dir/` patterns.
        if (self.alternative.dir_only or (self.options.mark and is_dir)) and not result.endswith("/"):
            result += "/"
        return result
