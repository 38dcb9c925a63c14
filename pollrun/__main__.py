"""Module entrypoint for ``python -m pollrun``.

This keeps module-mode execution behavior identical to the console script.
All argument parsing and loop setup happen in ``pollrun.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
