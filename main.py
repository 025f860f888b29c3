"""Main entry point for the load-test harness."""

import sys

from loadtest.cli import main

if __name__ == "__main__":
    sys.exit(main())
