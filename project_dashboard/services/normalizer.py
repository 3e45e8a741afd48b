from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import date

from ..models.config_models import DashboardSettings
from ..models.project import Project
from ..models.raw_row import RawRow
from .parsing import parse_amount, parse_spanish_date
from .progress import ProgressTracker

"""Record normalizer: one RawRow -> one Project.

Pure transform. The caller passes ``today`` so that a whole refresh uses
one clock value and normalizing the same row twice yields the same
Project. No step raises: each field falls back to a default (None, 0.0,
"N/A", "") so a malformed row never aborts the batch.
"""

__all__ = [
    "STATUS_KEYWORDS",
    "URGENT_KEYWORDS",
    "TYPE_COLUMN_INDEX",
    "PRESENTATION_COLUMN_INDEX",
    "PRESENTATION_SCAN_END",
    "canonical_status",
    "extract_type",
    "extract_presentation",
    "compute_progress",
    "is_critical",
    "normalize_project",
    "normalize_rows",
]

# Ordered: first match wins ("curso" beats "pendiente" in the same text)
STATUS_KEYWORDS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile("curso"), "En curso"),
    (re.compile("completado"), "Completado"),
    (re.compile("pendiente"), "Pendiente"),
    (re.compile("producci[oó]n"), "Producción"),
    (re.compile("diseño"), "Diseño"),
)
STATUS_IN_PROGRESS = "En curso"
STATUS_DEFAULT = "N/A"

URGENT_KEYWORDS = ("urgente", "crítico", "problema", "incidencia")

TYPE_COLUMN_INDEX = 5  # column F
TYPE_FALLBACK_HEADERS = ("Tipo", "Tipo de proyecto")
TYPE_DEFAULT = "OTROS"

PRESENTATION_COLUMN_INDEX = 16  # column Q
PRESENTATION_SCAN_END = 25  # inclusive
PRESENTATION_MARKERS = ("http", "<iframe")

# Sheet header names
H_STATUS = "Status"
H_PREVIOS = "Previos"
H_DISENO = "Diseño"
H_PRODUCCION = ("Producción", "Produccion")
H_EJECUCION = "Ejecución"
H_FIN = "Fin"
H_FACTURACION = "Previsión facturación"
H_COSTES = "Costes asociados a proyecto"
H_ESTRUCTURA = "Coste estructura"
H_CLIENTE = "Cliente"
H_MARCA = "Marca"
H_PUNTO_VENTA = "PUNTO VENTA"
H_OBSERVACIONES = "Observaciones"
H_ASSIGNEE = "PROJECT"


def canonical_status(raw: str | None) -> str:
    text = (raw or "").strip()
    lowered = text.lower()
    for pattern, label in STATUS_KEYWORDS:
        if pattern.search(lowered):
            return label
    return text or STATUS_DEFAULT


def extract_type(row: RawRow) -> str:
    positional = row.by_position(TYPE_COLUMN_INDEX)
    if positional and positional.strip():
        return positional.strip()
    return row.first_header(*TYPE_FALLBACK_HEADERS) or TYPE_DEFAULT


def extract_presentation(row: RawRow) -> str:
    """Presentation link or embed markup from the trailing columns."""
    fixed = row.by_position(PRESENTATION_COLUMN_INDEX)
    if fixed:
        return fixed
    for idx in range(PRESENTATION_COLUMN_INDEX, PRESENTATION_SCAN_END + 1):
        cell = row.by_position(idx)
        if cell and any(marker in cell for marker in PRESENTATION_MARKERS):
            return cell
    return ""


def compute_progress(dates: Sequence[date | None], today: date) -> float:
    """Percentage of lifecycle dates already reached (independent of status)."""
    if not dates:
        return 0.0
    reached = sum(1 for d in dates if d is not None and d <= today)
    return reached / len(dates) * 100


def is_critical(
    status: str,
    fin: date | None,
    notes: str,
    *,
    today: date,
    threshold_days: int,
) -> bool:
    near_deadline = False
    if fin is not None and status == STATUS_IN_PROGRESS:
        days_left = (fin - today).days
        near_deadline = 0 <= days_left <= threshold_days
    lowered = (notes or "").lower()
    has_urgent_note = any(kw in lowered for kw in URGENT_KEYWORDS)
    return near_deadline or has_urgent_note


def normalize_project(
    row: RawRow,
    index: int,
    *,
    today: date,
    settings: DashboardSettings | None = None,
) -> Project:
    """Map one RawRow at ordinal ``index`` to a Project.

    Args:
        row: raw sheet row (header + positional access)
        index: 0-based position of the row in the fetch, becomes ``Project.id``
        today: reference date for the year of parsed dates, progress and deadlines
        settings: threshold and currency symbol (defaults when omitted)

    Returns:
        New immutable Project; the RawRow is left untouched
    """
    settings = settings or DashboardSettings()
    year = today.year
    symbol = settings.currency_symbol

    status = canonical_status(row.by_header(H_STATUS))

    previos_text = row.by_header(H_PREVIOS)
    fin_text = row.by_header(H_FIN)
    previos = parse_spanish_date(previos_text, year=year)
    diseno = parse_spanish_date(row.by_header(H_DISENO), year=year)
    produccion = parse_spanish_date(row.first_header(*H_PRODUCCION), year=year)
    ejecucion = parse_spanish_date(row.by_header(H_EJECUCION), year=year)
    fin = parse_spanish_date(fin_text, year=year)

    facturacion = parse_amount(row.by_header(H_FACTURACION), currency_symbol=symbol)
    costes = parse_amount(row.by_header(H_COSTES), currency_symbol=symbol)
    estructura = parse_amount(row.by_header(H_ESTRUCTURA), currency_symbol=symbol)
    total_cost = costes + estructura
    margin = facturacion - total_cost
    margin_percent = margin / facturacion * 100 if facturacion > 0 else 0.0

    notes = row.by_header(H_OBSERVACIONES)

    return Project(
        id=str(index),
        status=status,
        type=extract_type(row),
        previos=previos,
        diseno=diseno,
        produccion=produccion,
        ejecucion=ejecucion,
        fin=fin,
        facturacion=facturacion,
        costes=costes,
        estructura=estructura,
        total_cost=total_cost,
        margin=margin,
        margin_percent=margin_percent,
        progress=compute_progress((previos, diseno, produccion, ejecucion, fin), today),
        is_critical=is_critical(
            status, fin, notes, today=today, threshold_days=settings.critical_days_threshold
        ),
        presentation_content=extract_presentation(row),
        client=row.by_header(H_CLIENTE),
        brand=row.by_header(H_MARCA),
        point_of_sale=row.by_header(H_PUNTO_VENTA),
        assignee=row.by_header(H_ASSIGNEE),
        notes=notes,
        previos_text=previos_text,
        fin_text=fin_text,
    )


def normalize_rows(
    rows: Sequence[RawRow],
    *,
    today: date,
    settings: DashboardSettings | None = None,
) -> list[Project]:
    """Normalize a whole fetch; one Project per row, ids aligned with positions."""
    projects: list[Project] = []
    critical = 0
    with ProgressTracker(len(rows)) as progress:
        for idx, row in enumerate(rows):
            project = normalize_project(row, idx, today=today, settings=settings)
            projects.append(project)
            critical += project.is_critical
            progress.advance()
            progress.set_postfix(critical=critical)
    return projects
