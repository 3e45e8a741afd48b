from __future__ import annotations

from dataclasses import dataclass

"""Settings dataclass consumed by the pipeline core.

These values come from config/dashboard.yml (see config.loader) but the
core only ever sees this frozen view, so it can run with defaults when no
file exists (tests, library use).
"""

DEFAULT_CRITICAL_DAYS_THRESHOLD = 7
DEFAULT_REFRESH_INTERVAL_SECONDS = 300  # 5 minutes


@dataclass(frozen=True)
class DashboardSettings:
    """Core-facing configuration.

    critical_days_threshold: an "En curso" project ending within this many
        days (inclusive) is critical
    refresh_interval_seconds: cadence of the auto refresh loop
    date_locale / currency / currency_symbol: formatting locale, also used to
        strip the symbol from amount cells
    """
    critical_days_threshold: int = DEFAULT_CRITICAL_DAYS_THRESHOLD
    refresh_interval_seconds: int = DEFAULT_REFRESH_INTERVAL_SECONDS
    date_locale: str = "es-ES"
    currency: str = "EUR"
    currency_symbol: str = "€"
