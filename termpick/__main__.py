"""Module entrypoint for ``python -m termpick``.

All argument parsing and runtime setup happen in ``termpick.cli``.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
