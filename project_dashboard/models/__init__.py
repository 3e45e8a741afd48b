"""Domain models for the project dashboard pipeline.

Raw sheet rows, the normalized Project record and the aggregate records
handed to the presentation layer.
"""

from .aggregates import (
    ClientProfitability,
    DashboardKpis,
    DashboardSummary,
    MonthlyForecast,
    StatusShare,
    TeamWorkload,
    TypeBreakdown,
)
from .config_models import DashboardSettings
from .project import Project
from .raw_row import EmptySheetError, HeaderIndex, RawRow, build_raw_rows

__all__ = [
    # Configuration models
    "DashboardSettings",
    # Input models
    "EmptySheetError",
    "HeaderIndex",
    "RawRow",
    "build_raw_rows",
    # Normalized record
    "Project",
    # Aggregates
    "ClientProfitability",
    "DashboardKpis",
    "DashboardSummary",
    "MonthlyForecast",
    "StatusShare",
    "TeamWorkload",
    "TypeBreakdown",
]
