"""Command-line interface for maxdir."""
