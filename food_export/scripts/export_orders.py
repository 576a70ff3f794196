"""CLI entry point for downloading the Wolt order history."""

from __future__ import annotations

from food_export.exporter import main

if __name__ == "__main__":  # pragma: no cover - thin wrapper
    main()
