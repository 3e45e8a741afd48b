from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from .project import Project

"""Aggregate records produced by the aggregation engine.

All records are plain, frozen data recomputed on every refresh. The
presentation layer formats them; nothing here carries markup.
"""

__all__ = [
    "TeamWorkload",
    "TypeBreakdown",
    "StatusShare",
    "MonthlyForecast",
    "ClientProfitability",
    "DashboardKpis",
    "DashboardSummary",
    "HEALTHY_MARGIN_PERCENT",
]

# 利益率がこの値以上なら healthy
HEALTHY_MARGIN_PERCENT = 20.0


@dataclass(frozen=True)
class TeamWorkload:
    """Per-person workload, weighted by forecast billing."""
    person: str
    count: int
    billing: float
    progress_sum: float
    workload_percent: float  # billing / total filtered billing * 100

    @property
    def average_progress(self) -> float:
        return self.progress_sum / self.count if self.count else 0.0


@dataclass(frozen=True)
class TypeBreakdown:
    project_type: str
    count: int
    billing: float
    weight_percent: float


@dataclass(frozen=True)
class StatusShare:
    status: str
    count: int
    percent: float


@dataclass(frozen=True)
class MonthlyForecast:
    """Billing/cost/margin of the projects ending in one month."""
    month: str  # YYYY-MM
    count: int
    billing: float
    cost: float

    @property
    def margin(self) -> float:
        return self.billing - self.cost

    @property
    def margin_percent(self) -> float:
        return self.margin / self.billing * 100 if self.billing > 0 else 0.0

    @property
    def healthy(self) -> bool:
        return self.margin_percent >= HEALTHY_MARGIN_PERCENT


@dataclass(frozen=True)
class ClientProfitability:
    client: str
    count: int
    billing: float
    margin: float

    @property
    def margin_percent(self) -> float:
        return self.margin / self.billing * 100 if self.billing > 0 else 0.0

    @property
    def margin_band(self) -> str:
        """Display band for coloring: healthy / positive / negative."""
        pct = self.margin_percent
        if pct >= HEALTHY_MARGIN_PERCENT:
            return "healthy"
        if pct > 0:
            return "positive"
        return "negative"


@dataclass(frozen=True)
class DashboardKpis:
    active_projects: int
    total_billing: float
    critical_projects: int


@dataclass(frozen=True)
class DashboardSummary:
    """Bundle of every summary view computed over one filtered sequence."""
    kpis: DashboardKpis
    team: list[TeamWorkload] = field(default_factory=list)
    types: list[TypeBreakdown] = field(default_factory=list)
    statuses: list[StatusShare] = field(default_factory=list)
    monthly: list[MonthlyForecast] = field(default_factory=list)
    clients: list[ClientProfitability] = field(default_factory=list)
    critical: list[Project] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly view including derived properties."""
        return {
            "kpis": asdict(self.kpis),
            "team": [
                {**asdict(t), "average_progress": t.average_progress} for t in self.team
            ],
            "types": [asdict(t) for t in self.types],
            "statuses": [asdict(s) for s in self.statuses],
            "monthly": [
                {
                    **asdict(m),
                    "margin": m.margin,
                    "margin_percent": m.margin_percent,
                    "healthy": m.healthy,
                }
                for m in self.monthly
            ],
            "clients": [
                {
                    **asdict(c),
                    "margin_percent": c.margin_percent,
                    "margin_band": c.margin_band,
                }
                for c in self.clients
            ],
            "critical": [p.to_dict() for p in self.critical],
        }
