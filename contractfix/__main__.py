"""Entry point for running contractfix as a module."""

import sys

from contractfix.cli_entry import main

if __name__ == "__main__":
    sys.exit(main())
