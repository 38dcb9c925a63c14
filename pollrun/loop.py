"""Polling watch loop.

Each iteration scans all watch roots, runs the command once if anything
changed, relays its output, then sleeps. The loop owns its timestamp table
and is driven by injected collaborators so tests can stub the filesystem
scan, the child process, and the sleep.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

from .logging_config import get_logger
from .process import CommandLaunchError, CommandResult, relay_output, run_command
from .scan import ChangeBatch, FileTimestampTable, ScanResult, scan_roots

DEFAULT_POLL_INTERVAL_SECONDS = 0.1
_BATCH_PREVIEW_PATHS = 5

logger = get_logger("loop")


@dataclass(frozen=True)
class LoopSettings:
    """Fully resolved inputs for ``WatchLoop``."""

    watch_roots: frozenset[str]
    ignore_patterns: frozenset[str]
    command: tuple[str, ...]
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    command_timeout_seconds: float | None = None

    def __post_init__(self) -> None:
        if not self.command:
            raise ValueError("command must not be empty")


def _preview(batch: ChangeBatch) -> str:
    shown = ", ".join(batch[:_BATCH_PREVIEW_PATHS])
    hidden = len(batch) - _BATCH_PREVIEW_PATHS
    return f"{shown} (+{hidden} more)" if hidden > 0 else shown


@dataclass
class WatchLoop:
    settings: LoopSettings
    run: Callable[[Sequence[str], float | None], CommandResult] = run_command
    relay: Callable[[CommandResult], None] = relay_output
    sleep: Callable[[float], None] = time.sleep
    scanner: Callable[[Iterable[str], Iterable[str], FileTimestampTable], ScanResult] = scan_roots
    timestamps: FileTimestampTable = field(default_factory=dict)

    def scan(self) -> ScanResult:
        """Walk every root once, updating ``timestamps`` and logging skipped entries."""
        result = self.scanner(self.settings.watch_roots, self.settings.ignore_patterns, self.timestamps)
        for warning in result.warnings:
            logger.warning(warning.describe())
        for path in result.batch:
            logger.debug("changed: %s", path)
        return result

    def execute(self) -> CommandResult | None:
        """Run the command synchronously and relay its output.

        Returns ``None`` when the command could not be launched; that failure
        is logged and the loop keeps polling.
        """
        command = self.settings.command
        try:
            result = self.run(command, self.settings.command_timeout_seconds)
        except CommandLaunchError as exc:
            logger.warning("%s", exc)
            return None

        if result.timed_out:
            logger.warning(
                "%s timed out after %ss and was killed",
                command[0],
                self.settings.command_timeout_seconds,
            )
        else:
            logger.info("%s exited with status %s", command[0], result.returncode)
        self.relay(result)
        return result

    def run_once(self) -> ChangeBatch:
        """Scan once and fire the command if the change batch is non-empty."""
        result = self.scan()
        if result.changed:
            logger.info("%d changed path(s): %s", len(result.batch), _preview(result.batch))
            self.execute()
        return result.batch

    def run_forever(self, max_iterations: int | None = None) -> None:
        """Poll until the process is terminated.

        ``max_iterations`` bounds the loop for tests; production callers leave
        it unset.
        """
        iterations = 0
        while max_iterations is None or iterations < max_iterations:
            self.run_once()
            iterations += 1
            self.sleep(self.settings.poll_interval_seconds)
