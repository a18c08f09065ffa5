"""CLI entry point for printing the PLEX value tables."""

from __future__ import annotations

import sys

from eve_value.report import main

if __name__ == "__main__":  # pragma: no cover - thin wrapper
    sys.exit(main())
