"""Typer sub-applications for the subfeed CLI."""
