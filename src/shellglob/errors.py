"""Exceptions raised by shellglob."""

from __future__ import annotations


class GlobError(Exception):
    """Base class for all shellglob errors."""


class ConfigurationError(GlobError, TypeError):
    """
    Invalid combination of options, detected when a `Glob` is constructed and
    before any pattern is compiled or any directory is read.
    """


class PatternError(GlobError, ValueError):
    """A glob pattern could not be compiled."""

    def __init__(self, message: str, pattern: object = None) -> None:
        super().__init__(message)
        self.pattern = pattern


class WalkError(GlobError):
    """The root directory of a pattern could not be read."""

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path
