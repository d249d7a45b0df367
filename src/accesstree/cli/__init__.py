"""Command-line interface for accesstree."""
