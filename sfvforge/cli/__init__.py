"""Command-line interface for sfvforge."""
