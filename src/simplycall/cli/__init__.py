"""Command line entry point (typer)."""
