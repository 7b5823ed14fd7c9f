#!/usr/bin/env python3
"""openclaw-migrate - Module entry point."""
import sys

from openclaw_migrate.cli import main

if __name__ == "__main__":
    sys.exit(main())
