from __future__ import annotations

from ..models.config_models import DashboardSettings

"""Presentation-neutral formatters for amounts, percentages and month keys.

The pipeline itself only produces numbers; these helpers are used by the
CLI report and are available to any consumer that wants the dashboard's
Spanish formatting (``1.234 €``, ``marzo de 2025``).
"""

__all__ = [
    "SPANISH_MONTH_NAMES",
    "format_currency",
    "format_currency_compact",
    "format_month_key",
    "format_percent",
]

SPANISH_MONTH_NAMES = (
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
)


def _group_thousands(value: int, sep: str) -> str:
    return f"{value:,}".replace(",", sep)


def format_currency(amount: float, settings: DashboardSettings | None = None) -> str:
    """Whole-unit currency string, e.g. ``-1.234 €`` for es-ES."""
    settings = settings or DashboardSettings()
    rounded = int(round(amount))
    sign = "-" if rounded < 0 else ""
    if settings.date_locale.lower().startswith("es"):
        return f"{sign}{_group_thousands(abs(rounded), '.')} {settings.currency_symbol}"
    return f"{sign}{settings.currency_symbol}{_group_thousands(abs(rounded), ',')}"


def format_currency_compact(amount: float, settings: DashboardSettings | None = None) -> str:
    """Short form used in dense cards: ``1,2 M €``, ``350 mil €``."""
    settings = settings or DashboardSettings()
    sign = "-" if amount < 0 else ""
    value = abs(amount)
    if value >= 1_000_000:
        text = f"{value / 1_000_000:.1f}".replace(".", ",").removesuffix(",0") + " M"
    elif value >= 1_000:
        text = f"{value / 1_000:.0f} mil"
    else:
        text = f"{value:.0f}"
    return f"{sign}{text} {settings.currency_symbol}"


def format_percent(value: float) -> str:
    return f"{round(value):.0f}%"


def format_month_key(month_key: str) -> str:
    """``"2025-03"`` -> ``"marzo de 2025"``; unknown input is returned as-is."""
    try:
        year, month = (int(part) for part in month_key.split("-"))
    except ValueError:
        return month_key
    if not 1 <= month <= 12:
        return month_key
    return f"{SPANISH_MONTH_NAMES[month - 1]} de {year}"
