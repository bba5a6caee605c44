"""Command-line interface for the content hub migration tool."""
