"""
Config files for the shellglob command line.

The nearest `.shellglob.toml`, `shellglob.toml`, or `pyproject.toml` with a
`[tool.shellglob]` table, looking from the directory being globbed upward,
supplies defaults for the boolean options and `ignore`. Keys may sit at the
top level or in `[matching]`, `[traversal]` and `[output]` tables, spelled in
snake_case or kebab-case:

    [matching]
    dot = true
    match-base = true

    [traversal]
    ignore = ["node_modules/", "*.log"]

Problems never stop a run: a malformed file, an unknown key or section, or a
value of the wrong type is reported on stderr and skipped.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, TypeVar

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]


@dataclass
class ShellglobConfig:
    """
    Settings read from a config file. `None` means "not set", so a value
    equal to the built-in default still overrides an unset command-line flag.
    """

    # Matching
    dot: bool | None = None
    nocase: bool | None = None
    nobrace: bool | None = None
    noext: bool | None = None
    noglobstar: bool | None = None
    match_base: bool | None = None
    windows_paths_no_escape: bool | None = None
    # Traversal
    ignore: list[str] | None = None
    follow: bool | None = None
    # Output
    mark: bool | None = None
    nodir: bool | None = None
    nounique: bool | None = None
    nosort: bool | None = None
    nonull: bool | None = None
    realpath: bool | None = None
    absolute: bool | None = None

    def settings(self) -> dict[str, Any]:
        """The fields that were set, by name."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        return {name: value for name, value in values.items() if value is not None}


CONFIG_FILENAMES = (".shellglob.toml", "shellglob.toml", "pyproject.toml")

SECTIONS = ("matching", "traversal", "output")

_BOOL_KEYS = {f.name for f in fields(ShellglobConfig)} - {"ignore"}


def find_config_file(start_dir: Path) -> Path | None:
    """
    Return the first config file found in `start_dir` or its parents, or `None`.
    Within one directory the order is `CONFIG_FILENAMES`; a `pyproject.toml`
    only counts if it has a `[tool.shellglob]` table.
    """
    start = start_dir.resolve()
    for directory in (start, *start.parents):
        for filename in CONFIG_FILENAMES:
            candidate = directory / filename
            if not candidate.is_file():
                continue
            if filename != "pyproject.toml" or _shellglob_table(candidate) is not None:
                return candidate
    return None


def load_config(config_path: Path) -> ShellglobConfig:
    """Read and validate the settings in `config_path`."""
    if config_path.name == "pyproject.toml":
        table = _shellglob_table(config_path)
    else:
        table = _read_toml(config_path)
    if table is None:
        return ShellglobConfig()

    settings: dict[str, Any] = {}
    for key, value in _settings_items(table, config_path):
        name = key.replace("-", "_")
        try:
            settings[name] = _check_value(name, value)
        except (KeyError, TypeError) as e:
            _warn(config_path, f"{e.args[0]}; skipping {key!r}")
    return ShellglobConfig(**settings)


_T = TypeVar("_T")


def merge_cli_with_config(
    cli_opts: _T,
    config: ShellglobConfig | None,
    explicit_flags: set[str],
) -> _T:
    """
    Copy config settings onto `cli_opts`, except for the options named in
    `explicit_flags`, which were given on the command line and win.
    """
    if config is None:
        return cli_opts
    for name, value in config.settings().items():
        if name not in explicit_flags and hasattr(cli_opts, name):
            setattr(cli_opts, name, value)
    return cli_opts


def _read_toml(path: Path) -> dict[str, Any] | None:
    try:
        return tomllib.loads(path.read_text())
    except tomllib.TOMLDecodeError as e:
        _warn(path, f"ignoring malformed config file: {e}")
        return None


def _shellglob_table(path: Path) -> dict[str, Any] | None:
    """The `[tool.shellglob]` table of a `pyproject.toml`, if it has one."""
    try:
        data = tomllib.loads(path.read_text())
    except (tomllib.TOMLDecodeError, OSError):
        return None
    table = data.get("tool", {}).get("shellglob")
    return table if isinstance(table, dict) else None


def _settings_items(table: dict[str, Any], path: Path) -> Iterator[tuple[str, Any]]:
    """Yield `(key, value)` for top-level keys and keys of the known sections."""
    for key, value in table.items():
        if not isinstance(value, dict):
            yield key, value
        elif key in SECTIONS:
            yield from value.items()
        else:
            _warn(path, f"unrecognized config section [{key}]")


def _check_value(name: str, value: Any) -> Any:
    if name == "ignore":
        if isinstance(value, str):
            return [value]
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            return list(value)
        raise TypeError("ignore must be a string or a list of strings")
    if name not in _BOOL_KEYS:
        raise KeyError("unrecognized config key")
    if not isinstance(value, bool):
        raise TypeError(f"{name} must be true or false, not {value!r}")
    return value


def _warn(path: Path, message: str) -> None:
    print(f"Warning: {path}: {message}", file=sys.stderr)
