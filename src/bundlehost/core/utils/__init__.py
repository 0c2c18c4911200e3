"""Shared helpers for bundlehost core."""
