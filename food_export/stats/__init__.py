"""Statistics reporting over exported orders."""
