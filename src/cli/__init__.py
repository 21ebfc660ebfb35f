"""Typer CLI for the adaptive tutor."""
