"""Project dashboard core: spreadsheet rows -> normalized projects -> summary views."""

__version__ = "0.1.0"
