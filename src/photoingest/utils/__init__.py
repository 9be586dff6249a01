"""Utility helpers shared across photoingest modules."""
