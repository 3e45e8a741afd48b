from __future__ import annotations

from ..models.config_models import DashboardSettings
from .aggregation import UNASSIGNED_LABEL
from .formatting import format_currency, format_currency_compact, format_month_key, format_percent
from .refresh import DashboardState

"""SUMMARY line and plain-text report rendering for the CLI.

SUMMARY line format:
SUMMARY projects={total} filtered={filtered} active={active} critical={critical} billing={billing}

``billing`` is the filtered total with two decimals and no thousands
separator, so the line stays machine-parsable.
"""

__all__ = [
    "render_summary_line",
    "render_report",
]


def render_summary_line(state: DashboardState) -> str:
    """Render the SUMMARY line for one state.

    Examples:
        >>> render_summary_line(DashboardState.empty())
        'SUMMARY projects=0 filtered=0 active=0 critical=0 billing=0.00'
    """
    kpis = state.summary.kpis
    return (
        f"SUMMARY projects={len(state.projects)} "
        f"filtered={len(state.filtered)} "
        f"active={kpis.active_projects} "
        f"critical={kpis.critical_projects} "
        f"billing={kpis.total_billing:.2f}"
    )


def render_report(state: DashboardState, settings: DashboardSettings | None = None) -> str:
    """Plain-text rendition of every summary view (no markup)."""
    settings = settings or DashboardSettings()
    s = state.summary
    lines: list[str] = []

    lines.append("EQUIPO: CARGA DE TRABAJO")
    for t in s.team:
        lines.append(
            f"  {t.person:<16} proyectos={t.count:<3} fact={format_currency(t.billing, settings):>14} "
            f"carga={format_percent(t.workload_percent):>5} ejecucion={format_percent(t.average_progress):>5}"
        )

    lines.append("TIPO DE PROYECTO")
    for ty in s.types:
        lines.append(
            f"  {ty.project_type:<16} {format_currency(ty.billing, settings):>14} "
            f"peso={format_percent(ty.weight_percent):>5}"
        )

    lines.append("ESTADO")
    for st in s.statuses:
        lines.append(f"  {st.status:<16} {st.count:>4} {format_percent(st.percent):>5}")

    lines.append("PREVISION MENSUAL")
    for m in s.monthly:
        flag = "ok" if m.healthy else "bajo"
        lines.append(
            f"  {format_month_key(m.month):<20} proyectos={m.count:<3} "
            f"fact={format_currency(m.billing, settings):>14} costes={format_currency(m.cost, settings):>14} "
            f"margen={format_currency(m.margin, settings):>14} {format_percent(m.margin_percent):>5} {flag}"
        )

    lines.append("RENTABILIDAD POR CLIENTE")
    for c in s.clients:
        lines.append(
            f"  {c.client:<20} proyectos={c.count:<3} fact={format_currency(c.billing, settings):>14} "
            f"margen={format_currency(c.margin, settings):>14} {format_percent(c.margin_percent):>5} {c.margin_band}"
        )

    lines.append("CRITICOS")
    if not s.critical:
        lines.append("  (ninguno)")
    for p in s.critical:
        fin = p.fin.isoformat() if p.fin else "sin fecha"
        lines.append(
            f"  #{p.id} {p.client} - {p.brand} fin={fin} responsable={p.assignee or UNASSIGNED_LABEL} "
            f"fact={format_currency_compact(p.facturacion, settings)}"
        )
    return "\n".join(lines)
