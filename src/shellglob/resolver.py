"""
`Glob`, the match orchestrator.

Construction normalizes and compiles the input patterns into one flat,
ordered list of alternatives. `process()` walks every alternative
concurrently and `process_sync()` walks them one after another; both merge
the per-alternative results the same way:

- With `nonull`, the literal glob of every alternative that matched nothing
  is added to the first result set.
- Without `nounique`, results are deduplicated across alternatives and kept
  in alternative order, whichever walk finishes first.
- Unless `nosort`, the output is sorted with `collation_key`.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from itertools import chain
from typing import Any

import anyio

from shellglob.cache import GlobCache
from shellglob.collation import collation_key
from shellglob.errors import ConfigurationError
from shellglob.ignore import IgnoreFilter
from shellglob.pattern import CompiledAlternative, compile_pattern
from shellglob.types import GlobOptions
from shellglob.walker import GlobWalker, MatchSet

log = logging.getLogger(__name__)


class Glob:
    """
    One or more glob patterns plus the options to match them with.

    `options` may be a `GlobOptions`, another `Glob` (whose options and cache
    are reused), or `None`; keyword `overrides` replace individual fields.
    `backslash_separator` says whether the host uses `\\` as its path
    separator; `None` detects it from `os.sep`.

    Raises `ConfigurationError` for invalid option combinations and
    `PatternError` for patterns that don't compile. Nothing on disk is read
    until `process()` or `process_sync()` is called.
    """

    def __init__(
        self,
        pattern: str | Sequence[str],
        options: GlobOptions | Glob | None = None,
        *,
        backslash_separator: bool | None = None,
        **overrides: Any,
    ) -> None:
        if isinstance(options, Glob):
            options = options.options
        elif options is None:
            options = GlobOptions()
        elif not isinstance(options, GlobOptions):
            raise ConfigurationError(
                f"Glob options must be GlobOptions or Glob, not {type(options).__name__}"
            )
        if overrides:
            try:
                options = options.replace(**overrides)
            except TypeError as e:
                raise ConfigurationError(str(e)) from e

        if backslash_separator is None:
            backslash_separator = os.sep == "\\"
        self.backslash_separator: bool = backslash_separator

        cwd = options.cwd
        if backslash_separator:
            cwd = cwd.replace("\\", "/")

        patterns = [pattern] if isinstance(pattern, str) else list(pattern)
        if options.no_escape:
            patterns = [_to_slashes(p) for p in patterns]

        if options.match_base:
            if options.noglobstar:
                raise ConfigurationError("Base name matching requires globstar")
            patterns = [_base_name_pattern(p) for p in patterns]

        self.cache: GlobCache = options.cache if options.cache is not None else GlobCache()
        self.options: GlobOptions = options.replace(
            cwd=cwd,
            cache=self.cache,
            windows_paths_no_escape=options.no_escape,
        )
        self.patterns: list[str] = patterns

        alternatives: list[CompiledAlternative] = []
        for i, p in enumerate(patterns):
            alternatives.extend(
                compile_pattern(
                    p,
                    self.options,
                    pattern_index=i,
                    start_index=len(alternatives),
                    drive_roots=backslash_separator,
                )
            )
        self.alternatives: list[CompiledAlternative] = alternatives
        self.ignore: IgnoreFilter = IgnoreFilter(self.options.ignore_patterns)
        log.debug(
            "Compiled %d pattern(s) into %d alternative(s)", len(patterns), len(alternatives)
        )

    async def process(self) -> list[str]:
        """Walk all alternatives concurrently and return the merged matches."""
        shared = self._new_match_set()
        results: list[list[str]] = [[] for _ in self.alternatives]
        failures: list[Exception] = []

        async def walk_one(alternative: CompiledAlternative) -> None:
            try:
                results[alternative.index] = await self._walker(alternative, shared).walk()
            except Exception as e:
                failures.append(e)
                tg.cancel_scope.cancel()

        async with anyio.create_task_group() as tg:
            for alternative in self.alternatives:
                tg.start_soon(walk_one, alternative)

        if failures:
            raise failures[0]
        return self._finish(results, self._nulls(results))

    def process_sync(self) -> list[str]:
        """Walk all alternatives in order, blocking, and return the merged matches."""
        shared = self._new_match_set()
        results = [self._walker(alternative, shared).walk_sync() for alternative in self.alternatives]
        return self._finish(results, self._nulls(results))

    def _new_match_set(self) -> MatchSet | None:
        return None if self.options.nounique else MatchSet()

    def _walker(self, alternative: CompiledAlternative, shared: MatchSet | None) -> GlobWalker:
        return GlobWalker(alternative, self.options, self.cache, shared, self.ignore)

    def _nulls(self, results: list[list[str]]) -> list[str]:
        """Literal globs of the alternatives that matched nothing, if `nonull` is set."""
        if not self.options.nonull:
            return []
        return [alt.glob for alt, found in zip(self.alternatives, results) if not found]

    def _finish(self, results: list[list[str]], nulls: list[str]) -> list[str]:
        if not results:
            return []
        if self.options.nounique:
            # The first set (with the nulls), then every set again, duplicates and all.
            first = list(dict.fromkeys(chain(results[0], nulls)))
            raw = first + first + list(chain.from_iterable(results[1:]))
        else:
            # Built in alternative order, not in the order walks finished.
            raw = list(dict.fromkeys(chain(*results, nulls)))
        return raw if self.options.nosort else sorted(raw, key=collation_key)


async def glob(
    pattern: str | Sequence[str], options: GlobOptions | Glob | None = None, **overrides: Any
) -> list[str]:
    """Match `pattern` and return the matching paths."""
    return await Glob(pattern, options, **overrides).process()


def glob_sync(
    pattern: str | Sequence[str], options: GlobOptions | Glob | None = None, **overrides: Any
) -> list[str]:
    """Blocking form of `glob()`."""
    return Glob(pattern, options, **overrides).process_sync()


def _to_slashes(pattern: str) -> str:
    return pattern.replace("\\", "/") if isinstance(pattern, str) else pattern


def _base_name_pattern(pattern: str) -> str:
    if isinstance(pattern, str) and "/" not in pattern:
        return f"**/{pattern}"
    return pattern
