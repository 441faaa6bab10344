"""Command line interface for flimfit."""
