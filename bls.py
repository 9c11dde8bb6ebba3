#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
bls.py – colour-coded directory lister
======================================

Lists one or more paths with a colour per entry type, the owning user and
group, and the permission bits in both symbolic and octal form.

Features
--------
* Accepts **multiple input paths** (defaults to the current working directory).
* `-r/--recursive` – descend depth-first into sub-directories. Symlinked
  directories are shown but never followed, so link loops cannot recurse.
* `-x/--hidden`    – include dot-entries.
* `--color WHEN`   – `always` (default), `auto` or `never`.
* `--no-header`    – drop the column header and the per-path banners.

Example output
--------------
```text
PERMS      OCT OWNER        GROUP        TYPE       NAME

Listing in: .
drwxr-xr-x 755 user         user         Directory  src
-rw-r--r-- 644 user         user         File         > README.md
```

Colours: directories blue, files green, executables bold green, symlinks
cyan, anything else (fifos, sockets, devices) yellow.

Exit status is 0 when everything was listed, 1 when any path or entry could
not be read, and 2 on a bad command line.
"""

from __future__ import annotations

import argparse
import grp
import os
import pwd
import stat
import sys
import textwrap
from collections import namedtuple
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.markup import escape
from rich.text import Text

__version__ = "1.0.0"

PROG = "bls"

# ────────────────────────────────────────────────────────────
# Errors
# ────────────────────────────────────────────────────────────


class BlsError(Exception):
    """Base class for everything bls reports to the user."""


class InvalidArgument(BlsError):
    """Unrecognised flag or malformed command line."""


class ListingError(BlsError):
    """A path or entry that could not be read."""

    reason = "cannot be read"

    def __init__(self, path: Path, cause: Optional[OSError] = None):
        self.path = path
        self.cause = cause
        super().__init__(str(path))

    def __str__(self) -> str:
        detail = self.cause.strerror if self.cause is not None and self.cause.strerror else self.reason
        return f"{printable(str(self.path))}: {detail}"


class PathNotFound(ListingError):
    reason = "no such file or directory"


class PermissionDenied(ListingError):
    reason = "permission denied"


class NotReadable(ListingError):
    pass


def listing_error(path: Path, exc: OSError) -> ListingError:
    """Map an OSError onto the matching ListingError subclass."""
    if isinstance(exc, FileNotFoundError):
        return PathNotFound(path, exc)
    if isinstance(exc, PermissionError):
        return PermissionDenied(path, exc)
    return NotReadable(path, exc)


# ────────────────────────────────────────────────────────────
# Data model
# ────────────────────────────────────────────────────────────

ListingConfig = namedtuple(
    "ListingConfig", "recursive show_hidden color header", defaults=(False, False, "always", True)
)

DirEntry = namedtuple("DirEntry", "name path kind owner group mode depth link_target")


class EntryKind(Enum):
    FILE = "file"
    EXECUTABLE = "executable"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    OTHER = "other"


KIND_STYLES = {
    EntryKind.DIRECTORY: "blue",
    EntryKind.FILE: "green",
    EntryKind.EXECUTABLE: "bold green",
    EntryKind.SYMLINK: "cyan",
    EntryKind.OTHER: "yellow",
}

KIND_LABELS = {
    EntryKind.DIRECTORY: "Directory",
    EntryKind.FILE: "File",
    EntryKind.EXECUTABLE: "Executable",
    EntryKind.SYMLINK: "Symlink",
    EntryKind.OTHER: "Other",
}

_EXEC_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH

# ────────────────────────────────────────────────────────────
# Metadata helpers
# ────────────────────────────────────────────────────────────


def classify(mode: int) -> EntryKind:
    """Return the EntryKind for an ``lstat`` mode."""
    if stat.S_ISLNK(mode):
        return EntryKind.SYMLINK
    if stat.S_ISDIR(mode):
        return EntryKind.DIRECTORY
    if stat.S_ISREG(mode):
        return EntryKind.EXECUTABLE if mode & _EXEC_BITS else EntryKind.FILE
    return EntryKind.OTHER


def owner_name(uid: int) -> str:
    """User name for *uid*, or the number itself when it has no passwd entry."""
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return str(uid)


def group_name(gid: int) -> str:
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        return str(gid)


def octal_perms(mode: int) -> str:
    """Return three-digit octal permission string (e.g. 755)."""
    return f"{mode & 0o777:o}".zfill(3)


def is_hidden(name: str) -> bool:
    return name.startswith(".")


def printable(text: str) -> str:
    """Show undecodable bytes in a file name as \\xNN escapes."""
    return os.fsencode(text).decode("utf-8", "backslashreplace")


def read_entry(path: Path, depth: int, name: Optional[str] = None) -> DirEntry:
    """
    Build a DirEntry for *path* without following symlinks.

    Raises a ListingError subclass when the entry cannot be stat'ed (it may
    have vanished since the directory was read).
    """
    try:
        st = path.lstat()
    except OSError as exc:
        raise listing_error(path, exc) from exc

    kind = classify(st.st_mode)
    link_target = None
    if kind is EntryKind.SYMLINK:
        try:
            link_target = os.readlink(path)
        except OSError:
            link_target = "?"

    return DirEntry(
        name=name if name is not None else path.name,
        path=path,
        kind=kind,
        owner=owner_name(st.st_uid),
        group=group_name(st.st_gid),
        mode=st.st_mode,
        depth=depth,
        link_target=link_target,
    )


# ────────────────────────────────────────────────────────────
# Directory traversal (depth-first)
# ────────────────────────────────────────────────────────────

ErrorHandler = Callable[[ListingError], None]


def iter_directory(
    directory: Path, config: ListingConfig, depth: int, on_error: ErrorHandler
) -> Iterator[DirEntry]:
    """
    Yield the entries of *directory* in OS order, each sub-directory's
    contents directly after its own line when ``config.recursive`` is set.

    Failures are passed to *on_error* and the walk carries on with the
    next sibling.
    """
    try:
        with os.scandir(directory) as it:
            names = [e.name for e in it if config.show_hidden or not is_hidden(e.name)]
    except OSError as exc:
        on_error(listing_error(directory, exc))
        return

    for name in names:
        path = directory / name
        try:
            entry = read_entry(path, depth)
        except ListingError as err:
            on_error(err)
            continue
        yield entry
        # lstat-based kind: symlinked directories are never descended into
        if config.recursive and entry.kind is EntryKind.DIRECTORY:
            yield from iter_directory(path, config, depth + 1, on_error)


def open_target(target: str) -> Tuple[Path, os.stat_result]:
    """Resolve a command-line target, raising ListingError if it is unusable."""
    path = Path(target).expanduser()
    try:
        st = path.lstat()
        if stat.S_ISLNK(st.st_mode):
            # a dangling or looping link named on the command line cannot be listed
            path.stat()
    except OSError as exc:
        raise listing_error(path, exc) from exc
    return path, st


def list_target(
    target: str, path: Path, st: os.stat_result, config: ListingConfig, on_error: ErrorHandler
) -> Iterator[DirEntry]:
    """
    Entries to show for one command-line target.

    A directory (or a symlink the user named that leads to one) lists its
    contents; anything else is a single line for the target itself.
    """
    if stat.S_ISDIR(st.st_mode) or (stat.S_ISLNK(st.st_mode) and path.is_dir()):
        yield from iter_directory(path, config, 0, on_error)
        return
    try:
        yield read_entry(path, 0, name=target)
    except ListingError as err:
        on_error(err)


# ────────────────────────────────────────────────────────────
# Formatting helpers
# ────────────────────────────────────────────────────────────

HEADER = f"{'PERMS':<10} {'OCT':<3} {'OWNER':<12} {'GROUP':<12} {'TYPE':<10} NAME"


def format_entry(entry: DirEntry) -> str:
    name = printable(entry.name)
    if entry.depth:
        name = f"{'  ' * entry.depth}> {name}"
    if entry.link_target is not None:
        name = f"{name} -> {printable(entry.link_target)}"
    return (
        f"{stat.filemode(entry.mode)} "
        f"{octal_perms(entry.mode)} "
        f"{printable(entry.owner):<12} {printable(entry.group):<12} {KIND_LABELS[entry.kind]:<10} {name}"
    )


def render_entry(entry: DirEntry, console: Console) -> None:
    console.print(Text(format_entry(entry), style=KIND_STYLES[entry.kind]), soft_wrap=True)


def render_listing(
    targets: Sequence[str], config: ListingConfig, console: Console, err_console: Console
) -> int:
    """
    List every target in order and return the number of failures.

    A failing target or entry is reported on *err_console* and skipped;
    it never stops the remaining work.
    """
    failures = 0
    listed = 0

    def report(err: ListingError) -> None:
        nonlocal failures
        failures += 1
        err_console.print(f"[red]ERROR[/] {escape(str(err))}")

    if config.header:
        console.print(Text(HEADER, style="bold"), soft_wrap=True)

    for target in targets:
        try:
            path, st = open_target(target)
        except ListingError as err:
            report(err)
            continue

        if config.header:
            console.print(Text(f"\nListing in: {printable(target)}"), soft_wrap=True)

        for entry in list_target(target, path, st, config, report):
            render_entry(entry, console)
            listed += 1

    if not listed and not failures:
        console.print("No files or directories found.")
    return failures


# ────────────────────────────────────────────────────────────
# Argument parsing & entry point
# ────────────────────────────────────────────────────────────


class _Parser(argparse.ArgumentParser):
    def error(self, message):
        raise InvalidArgument(message)


def build_parser() -> argparse.ArgumentParser:
    example_text = textwrap.dedent(
        """\
        Examples:
          bls                    # list current directory
          bls /etc /var          # list two directories
          bls -r -x ~/src        # recurse, dot-entries included
          bls --color never . | less
        """
    )

    parser = _Parser(
        prog=PROG,
        description="Lists files and directories with color-coded output.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=example_text,
    )
    parser.add_argument(
        "paths",
        nargs="*",
        default=[],
        metavar="PATH",
        help="Paths to list (default: current directory).",
    )
    parser.add_argument(
        "-r",
        "--recursive",
        action="store_true",
        help="List directories recursively.",
    )
    parser.add_argument(
        "-x",
        "--hidden",
        dest="show_hidden",
        action="store_true",
        help="Show hidden files.",
    )
    parser.add_argument(
        "--color",
        choices=["always", "auto", "never"],
        default="always",
        help="When to colour the output (default: %(default)s).",
    )
    parser.add_argument(
        "--no-header",
        dest="header",
        action="store_false",
        help="Omit the column header and the per-path banners.",
    )
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def resolve_arguments(argv: Optional[List[str]] = None) -> Tuple[ListingConfig, List[str]]:
    """
    Turn *argv* into a ListingConfig plus the ordered target paths.

    Flags and paths may be mixed in any order. Raises InvalidArgument for
    anything the parser does not recognise.
    """
    argv = argv if argv is not None else sys.argv[1:]
    args = build_parser().parse_intermixed_args(argv)
    config = ListingConfig(
        recursive=args.recursive,
        show_hidden=args.show_hidden,
        color=args.color,
        header=args.header,
    )
    return config, list(args.paths) or ["."]


def make_console(color: str, stderr: bool = False) -> Console:
    if color == "always":
        return Console(stderr=stderr, force_terminal=True, highlight=False)
    if color == "never":
        return Console(stderr=stderr, color_system=None, highlight=False)
    return Console(stderr=stderr, highlight=False)


def main(
    argv: Optional[List[str]] = None,
    console: Optional[Console] = None,
    err_console: Optional[Console] = None,
) -> int:
    try:
        config, targets = resolve_arguments(argv)
    except InvalidArgument as exc:
        err = err_console or make_console("auto", stderr=True)
        err.print(f"[red]ERROR[/] {escape(printable(str(exc)))}")
        err.print(f"Try '{PROG} --help' for more information.")
        return 2

    console = console or make_console(config.color)
    err_console = err_console or make_console(config.color, stderr=True)
    failures = render_listing(targets, config, console, err_console)
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
