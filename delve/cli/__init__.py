"""Command-line interface for Delve."""
