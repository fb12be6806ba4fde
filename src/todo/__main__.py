"""Run the todo CLI with ``python -m src.todo``."""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
