"""Module entrypoint for ``python -m mudkip``.

This keeps module-mode execution behavior identical to the console script.
All argument parsing and runtime setup happen in ``mudkip.cli``.
"""

import sys

from .cli import main


if __name__ == "__main__":
    sys.exit(main())
