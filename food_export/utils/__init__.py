"""Shared helpers for :mod:`food_export`."""
