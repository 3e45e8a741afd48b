"""Command line interface (``python -m project_dashboard.cli``)."""

from .main import main

__all__ = ["main"]
