"""Module entrypoint for ``python -m seeker``.

All argument parsing and service setup happen in ``seeker.cli``.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
