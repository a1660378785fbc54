"""Configuration types for glob matching."""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from shellglob.cache import GlobCache


@dataclass(frozen=True)
class GlobOptions:
    """
    Options for a glob run. All flags default to off.

    `cwd=""` means the process working directory. `cache=None` gives every
    `Glob` a fresh `GlobCache`; pass one in to share directory reads across runs.
    `allow_windows_escape=False` is the legacy spelling of
    `windows_paths_no_escape=True`.
    """

    ignore: str | Sequence[str] | None = None
    follow: bool = False
    dot: bool = False
    mark: bool = False
    nodir: bool = False
    nounique: bool = False
    nosort: bool = False
    cwd: str = ""
    realpath: bool = False
    nonull: bool = False
    absolute: bool = False
    match_base: bool = False
    windows_paths_no_escape: bool = False
    allow_windows_escape: bool | None = None
    noglobstar: bool = False
    nocase: bool = False
    nobrace: bool = False
    noext: bool = False
    cache: GlobCache | None = field(default=None, compare=False, repr=False)

    @property
    def no_escape(self) -> bool:
        """Whether backslash is a path separator rather than an escape character."""
        return self.windows_paths_no_escape or self.allow_windows_escape is False

    @property
    def ignore_patterns(self) -> list[str]:
        """`ignore` as a list (a single string is one pattern)."""
        if self.ignore is None:
            return []
        if isinstance(self.ignore, str):
            return [self.ignore]
        return list(self.ignore)

    def replace(self, **changes: Any) -> GlobOptions:
        """Return a copy with the given fields changed."""
        return dataclasses.replace(self, **changes)
