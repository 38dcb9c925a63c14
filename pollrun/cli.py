"""Command-line front door for pollrun.

Resolves argv tokens and config-file defaults into loop settings, configures
logging, then hands control to the polling loop, which only returns when the
process is interrupted.
"""

from __future__ import annotations

import sys

from . import config
from .logging_config import get_logger, level_for_verbosity, setup_logging
from .loop import DEFAULT_POLL_INTERVAL_SECONDS, LoopSettings, WatchLoop
from .options import HelpRequested, USAGE, UsageError, WatchOptions, parse_arguments

logger = get_logger("cli")


def resolve_settings(options: WatchOptions) -> LoopSettings:
    """Layer CLI options over config-file values over built-in defaults."""
    if options.poll_interval_ms is not None:
        poll_interval_seconds = options.poll_interval_ms / 1000.0
    else:
        poll_interval_seconds = config.load_poll_interval_seconds() or DEFAULT_POLL_INTERVAL_SECONDS

    timeout = options.command_timeout_seconds
    if timeout is None:
        timeout = config.load_command_timeout_seconds()

    return LoopSettings(
        watch_roots=options.watch_roots,
        ignore_patterns=options.ignore_patterns | config.load_extra_ignore_patterns(),
        command=options.command,
        poll_interval_seconds=poll_interval_seconds,
        command_timeout_seconds=timeout,
    )


def main(argv: list[str] | None = None) -> None:
    """Parse ``argv`` (default ``sys.argv[1:]``) and watch until interrupted.

    Help exits 0 after printing usage to stdout; usage errors print
    ``Error: ...`` to stderr and exit 1.
    """
    tokens = sys.argv[1:] if argv is None else argv
    try:
        options = parse_arguments(tokens)
    except HelpRequested:
        sys.stdout.write(USAGE)
        raise SystemExit(0)
    except UsageError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)

    setup_logging(level_for_verbosity(options.verbosity))
    for token in options.unknown_options:
        logger.warning("ignoring unknown option %s", token)

    settings = resolve_settings(options)
    logger.info(
        "watching %s (ignoring %s) every %sms",
        ", ".join(sorted(settings.watch_roots)),
        ", ".join(sorted(settings.ignore_patterns)),
        round(settings.poll_interval_seconds * 1000, 3),
    )

    try:
        WatchLoop(settings).run_forever()
    except KeyboardInterrupt:
        raise SystemExit(130)


if __name__ == "__main__":
    main()
