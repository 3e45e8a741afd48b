from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from ..models.aggregates import (
    ClientProfitability,
    DashboardKpis,
    DashboardSummary,
    MonthlyForecast,
    StatusShare,
    TeamWorkload,
    TypeBreakdown,
)
from ..models.project import Project

"""Aggregation engine.

Every function takes the *filtered* project sequence and returns new
aggregate records; projects are never mutated. Grouping keys fall back to
fixed literal labels. Sorting is stable, so ties keep first-seen order.
"""

__all__ = [
    "UNASSIGNED_LABEL",
    "OTHER_TYPE_LABEL",
    "OTHER_CLIENT_LABEL",
    "team_workload",
    "type_breakdown",
    "status_distribution",
    "monthly_forecast",
    "client_profitability",
    "critical_projects",
    "dashboard_kpis",
    "summarize",
]

UNASSIGNED_LABEL = "Sin Asignar"
OTHER_TYPE_LABEL = "OTROS"
OTHER_CLIENT_LABEL = "Otros"
NO_STATUS_LABEL = "N/A"


def _total_billing(projects: Sequence[Project]) -> float:
    return sum(p.facturacion for p in projects)


def _share(part: float, total: float) -> float:
    return part / total * 100 if total > 0 else 0.0


def _person_key(assignee: str) -> str:
    tokens = (assignee or "").split()
    return tokens[0].upper() if tokens else UNASSIGNED_LABEL


def _status_key(status: str) -> str:
    s = (status or NO_STATUS_LABEL).lower()
    return s[:1].upper() + s[1:]


def team_workload(projects: Sequence[Project]) -> list[TeamWorkload]:
    """Workload per person (first name token), share measured by billing."""
    total = _total_billing(projects)
    groups: dict[str, list[float]] = {}  # person -> [count, billing, progress]
    for p in projects:
        acc = groups.setdefault(_person_key(p.assignee), [0, 0.0, 0.0])
        acc[0] += 1
        acc[1] += p.facturacion
        acc[2] += p.progress
    return [
        TeamWorkload(
            person=person,
            count=int(acc[0]),
            billing=acc[1],
            progress_sum=acc[2],
            workload_percent=_share(acc[1], total),
        )
        for person, acc in sorted(groups.items())
    ]


def type_breakdown(projects: Sequence[Project]) -> list[TypeBreakdown]:
    total = _total_billing(projects)
    groups: dict[str, list[float]] = {}  # type -> [count, billing]
    for p in projects:
        key = (p.type or "").upper() or OTHER_TYPE_LABEL
        acc = groups.setdefault(key, [0, 0.0])
        acc[0] += 1
        acc[1] += p.facturacion
    rows = [
        TypeBreakdown(
            project_type=key,
            count=int(acc[0]),
            billing=acc[1],
            weight_percent=_share(acc[1], total),
        )
        for key, acc in groups.items()
    ]
    return sorted(rows, key=lambda r: r.billing, reverse=True)


def status_distribution(projects: Sequence[Project]) -> list[StatusShare]:
    counts: dict[str, int] = {}
    for p in projects:
        key = _status_key(p.status)
        counts[key] = counts.get(key, 0) + 1
    total = len(projects)
    rows = [
        StatusShare(status=key, count=n, percent=_share(n, total))
        for key, n in counts.items()
    ]
    return sorted(rows, key=lambda r: r.count, reverse=True)


def monthly_forecast(projects: Sequence[Project]) -> list[MonthlyForecast]:
    """Billing and cost per end month (projects without ``fin`` are skipped)."""
    groups: dict[str, list[float]] = {}  # YYYY-MM -> [count, billing, cost]
    for p in projects:
        if p.fin is None:
            continue
        acc = groups.setdefault(f"{p.fin.year:04d}-{p.fin.month:02d}", [0, 0.0, 0.0])
        acc[0] += 1
        acc[1] += p.facturacion
        acc[2] += p.total_cost
    return [
        MonthlyForecast(month=key, count=int(acc[0]), billing=acc[1], cost=acc[2])
        for key, acc in sorted(groups.items())
    ]


def client_profitability(projects: Sequence[Project]) -> list[ClientProfitability]:
    groups: dict[str, list[float]] = {}  # client -> [count, billing, margin]
    for p in projects:
        key = (p.client or "").strip() or OTHER_CLIENT_LABEL
        acc = groups.setdefault(key, [0, 0.0, 0.0])
        acc[0] += 1
        acc[1] += p.facturacion
        acc[2] += p.margin
    rows = [
        ClientProfitability(client=key, count=int(acc[0]), billing=acc[1], margin=acc[2])
        for key, acc in groups.items()
    ]
    return sorted(rows, key=lambda r: r.billing, reverse=True)


def critical_projects(projects: Sequence[Project]) -> list[Project]:
    """Critical subset ordered by end date; projects without ``fin`` go last."""
    critical = [p for p in projects if p.is_critical]
    return sorted(critical, key=lambda p: (p.fin is None, p.fin or date.min))


def dashboard_kpis(projects: Sequence[Project]) -> DashboardKpis:
    return DashboardKpis(
        active_projects=sum(1 for p in projects if p.is_active),
        total_billing=_total_billing(projects),
        critical_projects=sum(1 for p in projects if p.is_critical),
    )


def summarize(projects: Sequence[Project]) -> DashboardSummary:
    """Compute every summary view over one filtered sequence."""
    return DashboardSummary(
        kpis=dashboard_kpis(projects),
        team=team_workload(projects),
        types=type_breakdown(projects),
        statuses=status_distribution(projects),
        monthly=monthly_forecast(projects),
        clients=client_profitability(projects),
        critical=critical_projects(projects),
    )
