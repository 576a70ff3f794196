"""CLI entry point for printing order statistics."""

from __future__ import annotations

from food_export.stats.report import main

if __name__ == "__main__":  # pragma: no cover - thin wrapper
    main()
