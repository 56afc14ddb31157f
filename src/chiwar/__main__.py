"""Entry point for running the chiwar CLI with ``python -m chiwar``."""

import sys

from chiwar.cli.app import main

if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        sys.exit(130)
