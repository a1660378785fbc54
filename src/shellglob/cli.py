#!/usr/bin/env python3
"""
shellglob: Shell-style globbing from the command line

Common usage:
  shellglob '**/*.py'
  shellglob --dot --mark 'src/**'
  shellglob --ignore 'node_modules/' '**/*.{js,ts}'
  shellglob --nonull 'missing/*.xyz'

Quote patterns so your shell does not expand them first.
Defaults can be set in `.shellglob.toml`, `shellglob.toml`, or `[tool.shellglob]`
in `pyproject.toml`, found from the --cwd directory upward. Every boolean flag
has a --no-FLAG form to turn off a config default.
"""

from __future__ import annotations

import argparse
import importlib.metadata
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import anyio

from shellglob.config import find_config_file, load_config, merge_cli_with_config
from shellglob.errors import GlobError
from shellglob.ignore import read_ignore_file
from shellglob.resolver import Glob
from shellglob.types import GlobOptions

# (flag, Options field, help) for every boolean glob option.
_BOOL_FLAGS: list[tuple[str, str, str]] = [
    ("--dot", "dot", "Let wildcards match names starting with '.'"),
    ("--follow", "follow", "Follow symlinked directories when expanding '**'"),
    ("--mark", "mark", "Append '/' to directory matches"),
    ("--nodir", "nodir", "Do not report directories"),
    ("--nounique", "nounique", "Do not deduplicate matches across patterns"),
    ("--nosort", "nosort", "Print matches in discovery order instead of sorting them"),
    ("--realpath", "realpath", "Print the canonical path of every match"),
    ("--nonull", "nonull", "Print a pattern itself when it matches nothing"),
    ("--absolute", "absolute", "Print absolute paths"),
    ("--match-base", "match_base", "Match patterns without '/' against base names at any depth"),
    (
        "--windows-paths-no-escape",
        "windows_paths_no_escape",
        "Treat '\\' as a path separator instead of an escape character",
    ),
    ("--noglobstar", "noglobstar", "Treat '**' like '*'"),
    ("--nocase", "nocase", "Match case-insensitively"),
    ("--nobrace", "nobrace", "Disable brace expansion"),
    ("--noext", "noext", "Disable extglob patterns like '+(a|b)'"),
]


@dataclass
class Options:
    """Command-line options for the shellglob tool."""

    patterns: list[str]
    cwd: str
    ignore: list[str]
    ignore_files: list[str]
    dot: bool
    follow: bool
    mark: bool
    nodir: bool
    nounique: bool
    nosort: bool
    realpath: bool
    nonull: bool
    absolute: bool
    match_base: bool
    windows_paths_no_escape: bool
    noglobstar: bool
    nocase: bool
    nobrace: bool
    noext: bool
    sync: bool
    print0: bool
    use_config: bool
    verbose: bool
    version: bool


def _parse_args(args: list[str] | None = None) -> tuple[Options, set[str]]:
    """
    Parse command-line arguments.

    Returns a tuple of (options, explicit_flags) where `explicit_flags` tracks
    which glob flags the user explicitly passed (for config merge precedence).
    """
    # Use the module's docstring as the description
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    description = doc_parts[0]
    epilog = "\n\n".join(doc_parts[1:])

    parser = argparse.ArgumentParser(
        prog="shellglob",
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "patterns",
        nargs="*",
        type=str,
        default=[],
        metavar="PATTERN",
        help="Glob patterns to match",
    )
    parser.add_argument(
        "--cwd",
        type=str,
        default="",
        metavar="DIR",
        help="Directory to match relative patterns in (default: current directory)",
    )
    parser.add_argument(
        "--ignore",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Exclude matches with this gitignore-style pattern. Can be repeated",
    )
    parser.add_argument(
        "--ignore-file",
        action="append",
        default=[],
        dest="ignore_files",
        metavar="FILE",
        help="Read ignore patterns from a gitignore-style file. Can be repeated",
    )
    # None by default, so flags given on the command line (either way) can be told apart
    for flag, dest, help_text in _BOOL_FLAGS:
        parser.add_argument(
            flag, action=argparse.BooleanOptionalAction, default=None, dest=dest, help=help_text
        )
    parser.add_argument(
        "--sync",
        action="store_true",
        help="Walk patterns one at a time instead of concurrently",
    )
    parser.add_argument(
        "-0",
        "--print0",
        action="store_true",
        help="Terminate each match with NUL instead of newline",
    )
    parser.add_argument(
        "--no-config",
        action="store_false",
        dest="use_config",
        help="Ignore config files",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output to stderr",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information and exit",
    )
    opts = parser.parse_args(args)

    explicit_flags: set[str] = {dest for _, dest, _ in _BOOL_FLAGS if getattr(opts, dest) is not None}
    if opts.ignore is not None:
        explicit_flags.add("ignore")

    bools = {dest: bool(getattr(opts, dest)) for _, dest, _ in _BOOL_FLAGS}
    return (
        Options(
            patterns=opts.patterns,
            cwd=opts.cwd,
            ignore=opts.ignore or [],
            ignore_files=opts.ignore_files,
            sync=opts.sync,
            print0=opts.print0,
            use_config=opts.use_config,
            verbose=opts.verbose,
            version=opts.version,
            **bools,
        ),
        explicit_flags,
    )


def _glob_options(options: Options) -> GlobOptions:
    """Build `GlobOptions`, reading any `--ignore-file` patterns."""
    ignore = list(options.ignore)
    for ignore_file in options.ignore_files:
        ignore.extend(read_ignore_file(Path(ignore_file)))
    return GlobOptions(
        ignore=ignore,
        cwd=options.cwd,
        dot=options.dot,
        follow=options.follow,
        mark=options.mark,
        nodir=options.nodir,
        nounique=options.nounique,
        nosort=options.nosort,
        realpath=options.realpath,
        nonull=options.nonull,
        absolute=options.absolute,
        match_base=options.match_base,
        windows_paths_no_escape=options.windows_paths_no_escape,
        noglobstar=options.noglobstar,
        nocase=options.nocase,
        nobrace=options.nobrace,
        noext=options.noext,
    )


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the shellglob CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code: 0 if anything matched, 1 if nothing matched, 2 for errors
    """
    options, explicit_flags = _parse_args(args)

    if options.version:
        try:
            version = importlib.metadata.version("shellglob")
            print(f"v{version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    if options.verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr
        )

    if not options.patterns:
        print(
            "Error: No pattern specified. Provide one or more glob patterns."
            " Use --help for more options.",
            file=sys.stderr,
        )
        return 1

    # Load and merge config file settings
    if options.use_config:
        config_path = find_config_file(Path(options.cwd or "."))
        if config_path:
            merge_cli_with_config(options, load_config(config_path), explicit_flags)

    try:
        matcher = Glob(options.patterns, _glob_options(options))
        results = matcher.process_sync() if options.sync else anyio.run(matcher.process)
    except GlobError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except (OSError, UnicodeDecodeError) as e:
        # Unreadable --ignore-file.
        print(f"Error: {e}", file=sys.stderr)
        return 2

    end = "\0" if options.print0 else "\n"
    for path in results:
        print(path, end=end)
    return 0 if results else 1


if __name__ == "__main__":
    sys.exit(main())
