"""Logging setup and refresh error log."""
