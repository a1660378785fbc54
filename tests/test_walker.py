"""Tests for the traversal engine."""

from __future__ import annotations

import errno
from pathlib import Path

import pytest

from shellglob import GlobCache, GlobOptions, WalkError
from shellglob.cache import Entry
from shellglob.pattern import compile_pattern
from shellglob.walker import GlobWalker, MatchSet


def _walk(pattern: str, root: Path, **kwargs: object) -> list[str]:
    options = GlobOptions(cwd=str(root), **kwargs)  # pyright: ignore[reportArgumentType]
    (alternative,) = compile_pattern(pattern, options)
    return GlobWalker(alternative, options).walk_sync()


def test_wildcard_skips_dotfiles(tree: Path):
    assert _walk("*.md", tree) == ["b.md"]
    assert sorted(_walk("*.md", tree, dot=True)) == [".hidden.md", "b.md"]


def test_globstar_below_literal(tree: Path):
    assert sorted(_walk("src/**/*.ts", tree)) == [
        "src/deep/nested/file.ts",
        "src/glob.ts",
        "src/util.ts",
    ]


def test_globstar_stops_at_symlinked_directories_by_default(tree: Path):
    # `link/*.ts` still matches, but nothing below `link/deep`.
    assert sorted(_walk("**/*.ts", tree)) == [
        "link/glob.ts",
        "link/util.ts",
        "src/deep/nested/file.ts",
        "src/glob.ts",
        "src/util.ts",
    ]


def test_globstar_follow(tree: Path):
    assert sorted(_walk("**/*.ts", tree, follow=True)) == [
        "link/deep/nested/file.ts",
        "link/glob.ts",
        "link/util.ts",
        "src/deep/nested/file.ts",
        "src/glob.ts",
        "src/util.ts",
    ]


def test_symlink_still_matches_by_name(tree: Path):
    assert sorted(_walk("link/*.ts", tree)) == ["link/glob.ts", "link/util.ts"]


def test_trailing_globstar_includes_anchor(tree: Path):
    assert sorted(_walk("src/**", tree)) == [
        "src",
        "src/deep",
        "src/deep/nested",
        "src/deep/nested/file.ts",
        "src/glob.ts",
        "src/util.ts",
    ]


def test_mark_and_nodir(tree: Path):
    assert sorted(_walk("src/*", tree, mark=True)) == ["src/deep/", "src/glob.ts", "src/util.ts"]
    assert sorted(_walk("src/*", tree, nodir=True)) == ["src/glob.ts", "src/util.ts"]


def test_trailing_slash_matches_directories_only(tree: Path):
    assert sorted(_walk("*/", tree)) == ["link/", "src/"]


def test_globstar_trailing_slash_includes_symlinked_directories(tree: Path):
    assert sorted(_walk("**/", tree)) == ["link/", "src/", "src/deep/", "src/deep/nested/"]
    assert "link/" in _walk("**", tree, mark=True)


def test_consecutive_slashes_kept_in_results(tree: Path):
    assert _walk("src//glob.ts", tree) == ["src//glob.ts"]


def test_literal_miss_is_empty(tree: Path):
    assert _walk("missing/*.xyz", tree) == []
    assert _walk("a.txt/*", tree) == []


def test_absolute_option(tree: Path):
    assert _walk("src/glob.ts", tree, absolute=True) == [f"{tree}/src/glob.ts"]


def test_absolute_pattern(tree: Path):
    assert _walk(f"{tree}/*.md", tree) == [f"{tree}/b.md"]


def test_realpath_option(tree: Path):
    assert _walk("link/glob.ts", tree, realpath=True) == [str((tree / "src" / "glob.ts").resolve())]


def test_realpath_drops_dangling_links(tmp_path: Path):
    (tmp_path / "dangling").symlink_to(tmp_path / "nowhere")
    assert _walk("*", tmp_path) == ["dangling"]
    assert _walk("*", tmp_path, realpath=True) == []


def test_ignore_prunes_directories(tree: Path):
    assert sorted(_walk("src/**/*.ts", tree, ignore=["deep/"])) == ["src/glob.ts", "src/util.ts"]
    assert _walk("*", tree, ignore="*.txt", nodir=True) == ["b.md"]


def test_symlink_loop_terminates(tmp_path: Path):
    loop = tmp_path / "loop"
    loop.mkdir()
    (loop / "again").symlink_to(loop, target_is_directory=True)
    assert sorted(_walk("loop/**", tmp_path, follow=True)) == ["loop", "loop/again"]


def test_missing_root_is_fatal(tmp_path: Path):
    with pytest.raises(WalkError) as exc_info:
        _walk("*", tmp_path / "missing")
    assert exc_info.value.path == str(tmp_path / "missing")


class _DenyingCache(GlobCache):
    def __init__(self, denied: str) -> None:
        super().__init__()
        self.denied = denied

    def readdir(self, path: str) -> tuple[Entry, ...]:
        if path == self.denied:
            raise PermissionError(errno.EACCES, "Permission denied", path)
        return super().readdir(path)


def test_unreadable_subtree_is_skipped(tree: Path):
    options = GlobOptions(cwd=str(tree))
    (alternative,) = compile_pattern("src/**/*.ts", options)
    cache = _DenyingCache(str(tree / "src" / "deep"))
    assert sorted(GlobWalker(alternative, options, cache).walk_sync()) == [
        "src/glob.ts",
        "src/util.ts",
    ]


def test_unreadable_root_is_fatal(tree: Path):
    options = GlobOptions(cwd=str(tree))
    (alternative,) = compile_pattern("*.md", options)
    cache = _DenyingCache(str(tree))
    with pytest.raises(WalkError) as exc_info:
        GlobWalker(alternative, options, cache).walk_sync()
    assert isinstance(exc_info.value.__cause__, PermissionError)


def test_shared_match_set(tree: Path):
    options = GlobOptions(cwd=str(tree))
    shared = MatchSet()
    for pattern in ["src/*.ts", "src/glob.*"]:
        (alternative,) = compile_pattern(pattern, options)
        GlobWalker(alternative, options, matches=shared).walk_sync()
    assert sorted(shared) == ["src/glob.ts", "src/util.ts"]
    assert len(shared) == 2


@pytest.mark.anyio
async def test_async_walk_matches_sync(tree: Path):
    options = GlobOptions(cwd=str(tree))
    (alternative,) = compile_pattern("**/*.ts", options)
    walker = GlobWalker(alternative, options)
    assert await walker.walk() == walker.walk_sync()
