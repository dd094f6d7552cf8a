"""Command-line interface for SQLTemplate."""
