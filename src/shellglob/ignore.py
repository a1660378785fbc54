"""`ignore` pattern handling using pathspec."""

from __future__ import annotations

import posixpath
from collections.abc import Iterable
from pathlib import Path

import pathspec


class IgnoreFilter:
    """
    Compiled `ignore` patterns, in gitignore syntax.

    Paths are tested relative to the glob's cwd (absolute paths lose their
    leading `/`). A directory is tested with a trailing `/`, so `build/`
    ignores the directory and everything below it.
    """

    def __init__(self, patterns: Iterable[str]) -> None:
        lines = [p for p in patterns if p.strip()]
        self._spec: pathspec.PathSpec | None = (
            pathspec.GitIgnoreSpec.from_lines(lines) if lines else None
        )

    def __bool__(self) -> bool:
        return self._spec is not None

    def ignored(self, path: str, is_dir: bool = False) -> bool:
        if self._spec is None:
            return False
        rel = _normalize(path)
        if not rel:
            return False
        return self._spec.match_file(rel + "/" if is_dir else rel)


def read_ignore_file(path: Path) -> list[str]:
    """
    Read gitignore-style patterns from a file, skipping blank lines and
    `#` comments. Raises `OSError` if the file can't be read.
    """
    lines = path.read_text(encoding="utf-8").splitlines()
    return [line for line in lines if line.strip() and not line.strip().startswith("#")]


def _normalize(path: str) -> str:
    path = posixpath.normpath(path)
    if path == ".":
        return ""
    return path.lstrip("/")
