"""
Glob pattern compiler.

`compile_pattern()` turns one glob string into a list of `CompiledAlternative`
records, one per brace expansion. Each record carries the segment matchers
used for walking, the segment strings they were built from, and the literal
glob text of that alternative, so the three can never drift apart.

Patterns are never negated and never treated as comments: a leading `!` or `#`
is an ordinary character. Consecutive slashes are preserved as empty segments.
No filesystem access happens here.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

import bracex
from wcmatch import fnmatch

from shellglob.errors import PatternError
from shellglob.types import GlobOptions

MAX_PATTERN_LENGTH = 64 * 1024

GLOBSTAR = "**"

# Characters that make a segment a wildcard rather than a literal name.
_GLOB_CHARS = frozenset("*?[")

# Characters that open an extglob group when followed by `(`.
_EXTGLOB_CHARS = frozenset("@!+")

_ESCAPE_RE = re.compile(r"([*?\[\]{}()\\])")
_NO_ESCAPE_RE = re.compile(r"([*?\[\]()])")
_UNESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)

# `C:` and the like, an absolute root on hosts with drive letters.
_DRIVE_RE = re.compile(r"[A-Za-z]:")


class SegmentKind(Enum):
    EMPTY = "empty"
    LITERAL = "literal"
    MAGIC = "magic"
    GLOBSTAR = "globstar"


@dataclass(frozen=True)
class Segment:
    """
    One path segment of a compiled alternative.

    `text` is the segment as written. `value` is the unescaped name for
    `LITERAL` segments. `matcher` tests a directory entry name for `MAGIC`
    segments.
    """

    kind: SegmentKind
    text: str
    value: str = ""
    matcher: Callable[[str], bool] | None = field(default=None, compare=False, repr=False)

    def match(self, name: str) -> bool:
        if self.kind is SegmentKind.LITERAL:
            return name == self.value
        if self.matcher is not None:
            return self.matcher(name)
        return False


@dataclass(frozen=True)
class CompiledAlternative:
    """
    One brace expansion of an input pattern.

    `segments` and `parts` are aligned by position; `glob` is `parts` joined
    with `/`. `index` is the position among all alternatives of a run and
    `pattern_index` the position of the input pattern it came from. `root` is
    the directory an absolute alternative starts from (`/` or a drive root
    like `C:/`) and empty for relative ones.
    """

    segments: tuple[Segment, ...]
    parts: tuple[str, ...]
    glob: str
    index: int = 0
    pattern_index: int = 0
    root: str = ""

    @property
    def is_absolute(self) -> bool:
        return bool(self.root)

    @property
    def dir_only(self) -> bool:
        """True when the pattern ends with `/` and so only matches directories."""
        return len(self.segments) > 1 and self.segments[-1].kind is SegmentKind.EMPTY


def compile_pattern(
    pattern: str,
    options: GlobOptions | None = None,
    pattern_index: int = 0,
    start_index: int = 0,
    drive_roots: bool = False,
) -> list[CompiledAlternative]:
    """
    Compile `pattern` into its alternatives. `start_index` is the flat index
    given to the first alternative. With `drive_roots`, a leading `C:/` also
    makes a pattern absolute.
    """
    if not isinstance(pattern, str):
        raise PatternError(f"Glob pattern must be a string, not {type(pattern).__name__}", pattern)
    if len(pattern) > MAX_PATTERN_LENGTH:
        raise PatternError("Glob pattern is too long", pattern)

    options = options or GlobOptions()
    flags = _matcher_flags(options)

    alternatives: list[CompiledAlternative] = []
    for expanded in _expand_braces(pattern, options):
        parts = _split(expanded, options)
        segments = tuple(_compile_segment(part, options, flags) for part in parts)
        alternatives.append(
            CompiledAlternative(
                segments=segments,
                parts=parts,
                glob="/".join(parts),
                index=start_index + len(alternatives),
                pattern_index=pattern_index,
                root=_root_of(parts, drive_roots),
            )
        )
    return alternatives


def has_magic(pattern: str, options: GlobOptions | None = None) -> bool:
    """
    Check whether `pattern` needs a directory walk to resolve, i.e. it expands
    to several alternatives or has any wildcard or globstar segment.
    """
    alternatives = compile_pattern(pattern, options)
    if len(alternatives) > 1:
        return True
    return any(
        segment.kind in (SegmentKind.MAGIC, SegmentKind.GLOBSTAR)
        for alternative in alternatives
        for segment in alternative.segments
    )


def escape(text: str, no_escape: bool = False) -> str:
    """
    Escape glob magic characters so `text` matches only itself. With
    `no_escape` (backslash is a path separator), characters are wrapped in
    brackets instead.
    """
    if no_escape:
        return _NO_ESCAPE_RE.sub(r"[\1]", text)
    return _ESCAPE_RE.sub(r"\\\1", text)


def unescape(text: str, no_escape: bool = False) -> str:
    """Remove backslash escapes (or, with `no_escape`, single-character brackets)."""
    if no_escape:
        return re.sub(r"\[([^/])\]", r"\1", text)
    return _UNESCAPE_RE.sub(r"\1", text)


def _matcher_flags(options: GlobOptions) -> int:
    flags = fnmatch.FORCEUNIX
    if not options.noext:
        flags |= fnmatch.EXTMATCH
    if options.dot:
        flags |= fnmatch.DOTMATCH
    if options.nocase:
        flags |= fnmatch.IGNORECASE
    return flags


def _expand_braces(pattern: str, options: GlobOptions) -> list[str]:
    if options.nobrace:
        return [pattern]
    try:
        return bracex.expand(pattern, keep_escapes=True)
    except bracex.ExpansionLimitException as e:
        raise PatternError(f"Brace expansion limit exceeded: {pattern!r}", pattern) from e


def _split(expanded: str, options: GlobOptions) -> tuple[str, ...]:
    """Split on `/`, keeping empty segments and collapsing runs of `**`."""
    parts = expanded.split("/")
    if options.noglobstar:
        return tuple(parts)
    collapsed: list[str] = []
    for part in parts:
        if part == GLOBSTAR and collapsed and collapsed[-1] == GLOBSTAR:
            continue
        collapsed.append(part)
    return tuple(collapsed)


def _root_of(parts: tuple[str, ...], drive_roots: bool) -> str:
    if len(parts) < 2:
        return ""
    if parts[0] == "":
        return "/"
    if drive_roots and _DRIVE_RE.fullmatch(parts[0]):
        return parts[0] + "/"
    return ""


def _is_magic(text: str, extglob: bool) -> bool:
    escaped = False
    for i, c in enumerate(text):
        if escaped:
            escaped = False
        elif c == "\\":
            escaped = True
        elif c in _GLOB_CHARS:
            return True
        elif extglob and c in _EXTGLOB_CHARS and text[i + 1 : i + 2] == "(":
            return True
    return False


def _compile_segment(text: str, options: GlobOptions, flags: int) -> Segment:
    if not text:
        return Segment(SegmentKind.EMPTY, text)
    if text == GLOBSTAR and not options.noglobstar:
        return Segment(SegmentKind.GLOBSTAR, text)

    if not _is_magic(text, extglob=not options.noext):
        value = unescape(text)
        # Case-insensitive literals still need a directory read to find the real spelling.
        if not options.nocase or value.lower() == value.upper():
            return Segment(SegmentKind.LITERAL, text, value=value)

    try:
        compiled = fnmatch.compile(text, flags=flags)
    except ValueError as e:
        raise PatternError(f"Invalid glob segment {text!r}: {e}", text) from e
    return Segment(SegmentKind.MAGIC, text, matcher=compiled.match)
