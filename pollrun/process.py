"""Child-process execution and output relay.

``run_command`` runs the watched command to completion with captured output.
``relay_output`` copies stdout always and stderr only for failed runs, so
successful runs stay quiet.
"""

from __future__ import annotations

import os
import signal
import subprocess
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from typing import BinaryIO


class CommandLaunchError(Exception):
    """The command executable could not be found or spawned."""

    def __init__(self, program: str, error: OSError) -> None:
        self.program = program
        self.error = error
        reason = error.strerror or str(error)
        super().__init__(f"failed to launch {program}: {reason}")


@dataclass(frozen=True)
class CommandResult:
    """Captured output and exit status of one command run.

    ``returncode`` is ``None`` when the run was killed after a timeout.
    """

    stdout: bytes
    stderr: bytes
    returncode: int | None
    timed_out: bool = False

    @property
    def succeeded(self) -> bool:
        return not self.timed_out and self.returncode == 0


def _kill_child(proc: subprocess.Popen, own_group: bool) -> None:
    """Kill ``proc`` and, when it leads its own session, everything it spawned."""
    if not own_group:
        proc.kill()
        return
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


def run_command(command: Sequence[str], timeout: float | None = None) -> CommandResult:
    """Run ``command[0]`` with ``command[1:]`` and wait for it to exit.

    The child inherits the environment and working directory. With no
    ``timeout`` the call blocks for as long as the child runs. With a timeout
    on POSIX the child starts in its own session, so an expired timeout kills
    the whole process group (``sh -c`` pipelines included). Whatever was
    written so far is returned as a failed result.
    """
    if not command:
        raise ValueError("command must not be empty")
    program, *args = command
    own_group = timeout is not None and os.name == "posix"
    try:
        proc = subprocess.Popen(
            [program, *args],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            start_new_session=own_group,
        )
    except OSError as exc:
        raise CommandLaunchError(program, exc) from exc

    with proc:
        try:
            stdout, stderr = proc.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            _kill_child(proc, own_group)
            stdout, stderr = proc.communicate()
            return CommandResult(stdout=stdout or b"", stderr=stderr or b"", returncode=None, timed_out=True)
        except BaseException:
            # Ctrl-C never reaches a child in its own session.
            _kill_child(proc, own_group)
            raise
    return CommandResult(stdout=stdout, stderr=stderr, returncode=proc.returncode)


def _binary_stream(stream: BinaryIO | None, fallback) -> BinaryIO:
    if stream is not None:
        return stream
    return getattr(fallback, "buffer", fallback)


def relay_output(
    result: CommandResult,
    stdout: BinaryIO | None = None,
    stderr: BinaryIO | None = None,
) -> None:
    """Write captured output to the given binary streams (default: process stdio)."""
    out = _binary_stream(stdout, sys.stdout)
    out.write(result.stdout)
    out.flush()
    if result.succeeded:
        return
    err = _binary_stream(stderr, sys.stderr)
    err.write(result.stderr)
    err.flush()
