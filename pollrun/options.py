"""Command-line token resolution for pollrun.

Turns raw argv tokens into an immutable ``WatchOptions`` value.
Parsing is pure: problems surface as ``UsageError``/``HelpRequested`` and the
CLI front door decides how to print and exit.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_WATCH_ROOT = "."
DEFAULT_IGNORE_PATTERNS = frozenset({"node_modules", "target", ".git"})

USAGE = """\
Usage: pollrun [options] <command> [args...]
Options:
  -h, --help             Show this help message
  -w, --watch=PATH       Watch a directory (repeatable, default: .)
  -i, --ignore=PATTERN   Ignore paths containing PATTERN (repeatable)
  -n, --interval=MS      Polling interval in milliseconds (default: 100)
  -t, --timeout=SECONDS  Kill the command and its subprocesses after SECONDS
                         (default: no timeout)
  -v, --verbose          Log changes and command runs to stderr (-vv for debug)
  --                     Treat every following token as the command
"""

_HELP_TOKENS = ("-h", "--help")
_VERBOSE_TOKENS = ("-v", "--verbose")
_WATCH_PREFIXES = ("-w=", "--watch=")
_IGNORE_PREFIXES = ("-i=", "--ignore=")
_INTERVAL_PREFIXES = ("-n=", "--interval=")
_TIMEOUT_PREFIXES = ("-t=", "--timeout=")


class UsageError(Exception):
    """Malformed command line; the message is shown after ``Error: ``."""


class HelpRequested(Exception):
    """Raised when a help flag appears before the command."""


@dataclass(frozen=True)
class WatchOptions:
    """Resolved watch roots, ignore substrings, command, and tunables.

    ``poll_interval_ms`` and ``command_timeout_seconds`` are ``None`` when the
    command line did not set them so lower-precedence sources can fill in.
    """

    watch_roots: frozenset[str]
    ignore_patterns: frozenset[str]
    command: tuple[str, ...]
    poll_interval_ms: float | None = None
    command_timeout_seconds: float | None = None
    verbosity: int = 0
    unknown_options: tuple[str, ...] = ()


def _option_value(token: str) -> str:
    """Return the text after the first ``=`` or raise for an empty value."""
    _flag, _sep, value = token.partition("=")
    if not value:
        raise UsageError(f"Missing argument for {token}")
    return value


def _positive_number(token: str) -> float:
    """Parse a strictly positive numeric option value."""
    raw = _option_value(token)
    try:
        parsed = float(raw)
    except ValueError as exc:
        raise UsageError(f"Invalid value for {token}") from exc
    if not parsed > 0 or parsed == float("inf"):
        raise UsageError(f"Invalid value for {token}")
    return parsed


def parse_arguments(tokens: list[str] | tuple[str, ...]) -> WatchOptions:
    """Resolve argv tokens (program name excluded) into ``WatchOptions``.

    Tokens are consumed left to right. The first token that does not start
    with ``-`` begins the command, and from then on every token belongs to it.
    A help flag anywhere before the command wins over every other token, so
    the whole option prefix is scanned for one before any error is raised.
    """
    option_tokens: list[str] = []
    command: list[str] = []
    for index, token in enumerate(tokens):
        if token == "--":
            command.extend(tokens[index + 1 :])
            break
        if not token.startswith("-"):
            command.extend(tokens[index:])
            break
        option_tokens.append(token)

    if any(token in _HELP_TOKENS for token in option_tokens):
        raise HelpRequested()

    watch_roots: set[str] = set()
    ignore_patterns: set[str] = set()
    poll_interval_ms: float | None = None
    command_timeout_seconds: float | None = None
    verbosity = 0
    unknown: list[str] = []
    for token in option_tokens:
        if token.startswith(_WATCH_PREFIXES):
            watch_roots.add(_option_value(token))
        elif token.startswith(_IGNORE_PREFIXES):
            ignore_patterns.add(_option_value(token))
        elif token.startswith(_INTERVAL_PREFIXES):
            poll_interval_ms = _positive_number(token)
        elif token.startswith(_TIMEOUT_PREFIXES):
            command_timeout_seconds = _positive_number(token)
        elif token in _VERBOSE_TOKENS:
            verbosity += 1
        elif token == "-vv":
            verbosity += 2
        else:
            unknown.append(token)

    if not command:
        raise UsageError("No command provided")

    if not watch_roots:
        watch_roots.add(DEFAULT_WATCH_ROOT)

    return WatchOptions(
        watch_roots=frozenset(watch_roots),
        ignore_patterns=frozenset(ignore_patterns | DEFAULT_IGNORE_PATTERNS),
        command=tuple(command),
        poll_interval_ms=poll_interval_ms,
        command_timeout_seconds=command_timeout_seconds,
        verbosity=verbosity,
        unknown_options=tuple(unknown),
    )
