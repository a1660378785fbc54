"""
Shell-style globbing over a real filesystem tree: brace expansion, `**`
globstar, dot-file and base-name rules, with results merged, deduplicated
and sorted across every pattern and brace alternative.

Usage::

    from shellglob import Glob, GlobOptions, glob_sync

    paths = glob_sync(["src/**/*.py", "*.{md,toml}"], ignore=["build/"])

    options = GlobOptions(cwd="docs", mark=True, nonull=True)
    paths = await Glob("**/*.md", options).process()
"""

from shellglob.cache import GlobCache
from shellglob.errors import ConfigurationError, GlobError, PatternError, WalkError
from shellglob.pattern import escape, has_magic, unescape
from shellglob.resolver import Glob, glob, glob_sync
from shellglob.types import GlobOptions

__all__ = [
    "ConfigurationError",
    "Glob",
    "GlobCache",
    "GlobError",
    "GlobOptions",
    "PatternError",
    "WalkError",
    "escape",
    "glob",
    "glob_sync",
    "has_magic",
    "unescape",
]
