"""Tests for the Glob orchestrator (concurrent mode)."""

from __future__ import annotations

import os
import time
from pathlib import Path

import pytest

from shellglob import Glob, GlobCache, WalkError, glob

pytestmark = pytest.mark.anyio


async def test_concurrent_matches_sequential(tree: Path):
    patterns = ["**/*.ts", "*.{md,txt}", "src/*", "link/**"]
    g = Glob(patterns, cwd=str(tree), dot=True, mark=True)
    assert await g.process() == g.process_sync()


class _SlowCache(GlobCache):
    """Delays lookups of one path so its walk finishes last."""

    def __init__(self, slow: str) -> None:
        super().__init__()
        self.slow = slow

    def lstat(self, path: str) -> os.stat_result | None:
        if path == self.slow:
            time.sleep(0.3)
        return super().lstat(path)


async def test_concurrent_nosort_keeps_pattern_order(tree: Path):
    cache = _SlowCache(str(tree / "b.md"))
    g = Glob(["b.md", "a.txt"], cwd=str(tree), nosort=True, cache=cache)
    assert await g.process() == ["b.md", "a.txt"]
    assert g.process_sync() == ["b.md", "a.txt"]


async def test_glob_function(tmp_path: Path):
    (tmp_path / "README.md").write_text("# Readme")
    (tmp_path / "CHANGELOG.md").write_text("# Changes")
    assert await glob("*.md", cwd=str(tmp_path)) == ["CHANGELOG.md", "README.md"]


async def test_concurrent_dedup_and_nonull(tree: Path):
    result = await glob(["a.txt", "a.txt", "missing/*.xyz"], cwd=str(tree), nonull=True)
    assert result == ["a.txt", "missing/*.xyz"]


async def test_concurrent_nounique_has_same_multiset(tree: Path):
    g = Glob(["src/*.ts", "src/glob.*"], cwd=str(tree), nounique=True)
    assert sorted(await g.process()) == sorted(g.process_sync())


async def test_shared_cache_between_concurrent_walkers(tree: Path):
    cache = GlobCache()
    await glob(["src/**/*.ts", "src/**/*.md", "src/**"], cwd=str(tree), cache=cache)
    assert cache.hits > 0


async def test_root_failure_is_a_single_error(tmp_path: Path):
    with pytest.raises(WalkError):
        await glob(["*.md", "*.txt", "**"], cwd=str(tmp_path / "missing"))
