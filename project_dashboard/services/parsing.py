from __future__ import annotations

import re
from datetime import date

"""Locale-specific cell parsers (Spanish dates, EUR amounts).

Every parser here degrades to a default instead of raising, so one bad
cell never aborts a refresh.
"""

__all__ = [
    "SPANISH_MONTHS",
    "parse_spanish_date",
    "parse_amount",
]

SPANISH_MONTHS: dict[str, int] = {
    "ene": 1, "feb": 2, "mar": 3, "abr": 4, "may": 5, "jun": 6,
    "jul": 7, "ago": 8, "sep": 9, "oct": 10, "nov": 11, "dic": 12,
}

# Leading numeric prefix, e.g. "1234.56abc" -> "1234.56"
_NUMBER_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_WHITESPACE = re.compile(r"\s+")


def parse_spanish_date(value: str | None, *, year: int) -> date | None:
    """Parse ``DD-mon`` (e.g. ``05-mar``) into a date of ``year``.

    The sheet never carries a year, so the caller supplies the current one.
    Returns None for empty input, a segment count other than two, an unknown
    month abbreviation, a non-numeric day or a day the month does not have.
    """
    if not value or not value.strip():
        return None
    parts = value.strip().lower().split("-")
    if len(parts) != 2:
        return None
    month = SPANISH_MONTHS.get(parts[1].strip())
    if month is None:
        return None
    m = _LEADING_INT.match(parts[0])
    if m is None:
        return None
    try:
        return date(year, month, int(m.group(1)))
    except ValueError:
        return None


def parse_amount(value: str | None, *, currency_symbol: str = "€") -> float:
    """Parse a Spanish-formatted amount such as ``1.234,56€`` -> 1234.56.

    Strips the currency symbol and whitespace, drops ``.`` thousands
    separators, turns the ``,`` decimal separator into ``.`` and reads the
    leading number. Empty or unparseable input -> 0.0.
    """
    if not value:
        return 0.0
    cleaned = str(value)
    if currency_symbol:
        cleaned = cleaned.replace(currency_symbol, "")
    cleaned = _WHITESPACE.sub("", cleaned).replace(".", "").replace(",", ".")
    m = _NUMBER_PREFIX.match(cleaned)
    if m is None:
        return 0.0
    amount = float(m.group(0))
    if amount != amount or amount in (float("inf"), float("-inf")):  # NaN / inf
        return 0.0
    return amount
