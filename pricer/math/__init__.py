"""Numeric helpers for venue pricing."""
