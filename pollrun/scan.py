"""Poll-based change detection over watched directory trees.

One scan walks every watch root, filters paths by ignore substrings, and
diffs each entry's ``st_mtime_ns`` against a caller-owned timestamp table.
Per-entry stat failures are collected as warnings instead of aborting.
"""

from __future__ import annotations

import os
import stat
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field

# Path string -> last observed ``st_mtime_ns``. Keys are only ever added or
# updated; deleted files keep their entry.
FileTimestampTable = dict[str, int]
ChangeBatch = list[str]


@dataclass(frozen=True)
class ScanWarning:
    """A path skipped during a scan because its metadata could not be read."""

    path: str
    error: OSError

    def describe(self) -> str:
        reason = self.error.strerror or str(self.error)
        return f"skipping {self.path}: {reason}"


@dataclass
class ScanResult:
    """Changed paths (traversal order) and skipped-entry warnings for one scan."""

    batch: ChangeBatch = field(default_factory=list)
    warnings: list[ScanWarning] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.batch)

    def add_warning(self, path: str, error: OSError) -> None:
        self.warnings.append(ScanWarning(path=path, error=error))


def is_ignored(path: str, ignore_patterns: Iterable[str]) -> bool:
    """Return whether any ignore pattern occurs as a substring of ``path``."""
    return any(pattern in path for pattern in ignore_patterns)


def _sorted_entries(directory: str) -> list[os.DirEntry[str]]:
    with os.scandir(directory) as entries:
        return sorted(entries, key=lambda entry: entry.name)


def walk_entries(
    root: str,
    ignore_patterns: Iterable[str],
    on_error: Callable[[str, OSError], None],
) -> Iterator[tuple[str, int]]:
    """Yield ``(path, mtime_ns)`` for every non-ignored entry under ``root``.

    Paths are built by joining names onto ``root`` exactly as given, so ``"."``
    produces ``"./a.txt"``. The root directory itself is not yielded; a root
    that is a plain file is yielded as its only entry. Each directory's
    children are yielded together, sorted by name, before descending into its
    subdirectories in the same order. Symlinks are reported with their own
    ``lstat`` time and never followed.

    Ignored directories are not descended into: every descendant path starts
    with the directory path and would contain the same ignore substring.
    Unreadable entries and directories are reported through ``on_error`` and
    skipped.
    """
    patterns = tuple(ignore_patterns)
    if is_ignored(root, patterns):
        return
    try:
        root_stat = os.stat(root)
    except OSError as exc:
        on_error(root, exc)
        return
    if not stat.S_ISDIR(root_stat.st_mode):
        yield root, root_stat.st_mtime_ns
        return

    pending = [root]
    while pending:
        directory = pending.pop()
        try:
            entries = _sorted_entries(directory)
        except OSError as exc:
            on_error(directory, exc)
            continue

        subdirectories: list[str] = []
        for entry in entries:
            path = entry.path
            if is_ignored(path, patterns):
                continue
            try:
                entry_stat = entry.stat(follow_symlinks=False)
            except OSError as exc:
                on_error(path, exc)
                continue
            yield path, entry_stat.st_mtime_ns
            if stat.S_ISDIR(entry_stat.st_mode):
                subdirectories.append(path)
        pending.extend(reversed(subdirectories))


def scan_roots(
    watch_roots: Iterable[str],
    ignore_patterns: Iterable[str],
    timestamps: FileTimestampTable,
) -> ScanResult:
    """Walk all roots once and record new or advanced paths into ``timestamps``.

    A path is a change when it is absent from the table or its fresh mtime is
    strictly greater than the stored one. Equal or older readings are not
    changes and leave the table untouched.
    """
    patterns = tuple(ignore_patterns)
    result = ScanResult()
    for root in sorted(watch_roots):
        for path, mtime_ns in walk_entries(root, patterns, result.add_warning):
            previous = timestamps.get(path)
            if previous is not None and mtime_ns <= previous:
                continue
            timestamps[path] = mtime_ns
            result.batch.append(path)
    return result
