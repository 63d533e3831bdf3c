"""Command-line interface module for XML Tag Shape."""

from .main import main

__all__ = ["main"]
