"""Command-line interface."""

from saasfactory.cli.app import app, main

__all__ = ["app", "main"]
