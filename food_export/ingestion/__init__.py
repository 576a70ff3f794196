"""Order-history ingestion helpers."""
