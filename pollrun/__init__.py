"""Public package surface for pollrun.

Exports ``main`` for programmatic CLI invocation.
The watch loop lives in ``pollrun.loop`` and change detection in ``pollrun.scan``.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = ["main"]
