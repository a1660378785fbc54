from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


def make_tree(root: Path) -> None:
    """
    Create a small project tree:

        a.txt  b.md  .hidden.md
        src/glob.ts  src/util.ts  src/.secret/x.ts  src/deep/nested/file.ts
        link -> src
    """
    (root / "a.txt").write_text("a")
    (root / "b.md").write_text("# b")
    (root / ".hidden.md").write_text("# hidden")
    src = root / "src"
    (src / ".secret").mkdir(parents=True)
    (src / "glob.ts").write_text("glob")
    (src / "util.ts").write_text("util")
    (src / ".secret" / "x.ts").write_text("x")
    nested = src / "deep" / "nested"
    nested.mkdir(parents=True)
    (nested / "file.ts").write_text("file")
    (root / "link").symlink_to(src, target_is_directory=True)


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    make_tree(tmp_path)
    return tmp_path
