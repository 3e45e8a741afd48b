from __future__ import annotations

from datetime import date
from unittest.mock import patch

import pytest

from project_dashboard.models.config_models import DashboardSettings
from project_dashboard.models.raw_row import HeaderIndex, RawRow, build_raw_rows
from project_dashboard.services.normalizer import (
    canonical_status,
    compute_progress,
    extract_presentation,
    extract_type,
    is_critical,
    normalize_project,
    normalize_rows,
)

"""Unit tests for the record normalizer."""


def _row(values: dict[str, str]) -> RawRow:
    names = list(values)
    return RawRow(cells=tuple(values[n] for n in names), headers=HeaderIndex.from_header_row(names))


def _positional(cells: dict[int, str], width: int = 26) -> RawRow:
    out = [""] * width
    for idx, value in cells.items():
        out[idx] = value
    return RawRow(cells=tuple(out), headers=HeaderIndex())


# --- status ---------------------------------------------------------------

@pytest.mark.parametrize(
    "raw,expected",
    [
        ("en curso", "En curso"),
        ("EN CURSO", "En curso"),
        ("Recurso pendiente", "En curso"),  # curso checked before pendiente
        ("completado", "Completado"),
        ("Pendiente", "Pendiente"),
        ("en producción", "Producción"),
        ("produccion", "Producción"),
        ("Diseño gráfico", "Diseño"),
        ("  Cancelado  ", "Cancelado"),
        ("", "N/A"),
        ("   ", "N/A"),
        (None, "N/A"),
    ],
)
def test_canonical_status(raw, expected):
    assert canonical_status(raw) == expected


# --- type -----------------------------------------------------------------

def test_extract_type_prefers_position_5():
    headers = HeaderIndex.from_header_row(["a", "b", "c", "d", "e", "col F", "Tipo"])
    row = RawRow(cells=("", "", "", "", "", " Retail ", "Evento"), headers=headers)
    assert extract_type(row) == "Retail"


def test_extract_type_falls_back_to_named_columns():
    assert extract_type(_row({"Tipo": "Evento"})) == "Evento"
    assert extract_type(_row({"Tipo de proyecto": "Stand"})) == "Stand"


def test_extract_type_blank_position_falls_back():
    headers = HeaderIndex.from_header_row(["a", "b", "c", "d", "e", "f", "Tipo"])
    row = RawRow(cells=("", "", "", "", "", "   ", "Evento"), headers=headers)
    assert extract_type(row) == "Evento"


def test_extract_type_default():
    assert extract_type(_row({"Status": "x"})) == "OTROS"


# --- presentation ---------------------------------------------------------

def test_presentation_fixed_column_wins_even_without_marker():
    assert extract_presentation(_positional({16: "ver carpeta", 18: "https://a"})) == "ver carpeta"


def test_presentation_scans_16_to_25():
    assert extract_presentation(_positional({20: "https://canva.com/x"})) == "https://canva.com/x"
    assert extract_presentation(_positional({25: "<iframe src='y'>"})) == "<iframe src='y'>"


def test_presentation_ignores_cells_outside_range_or_without_marker():
    assert extract_presentation(_positional({15: "https://a", 19: "texto"})) == ""
    assert extract_presentation(_positional({26: "https://a"}, width=27)) == ""


def test_presentation_short_row():
    assert extract_presentation(RawRow(cells=("a",), headers=HeaderIndex())) == ""


# --- progress / criticality -----------------------------------------------

def test_compute_progress_counts_reached_dates(today):
    dates = (date(2025, 1, 1), today, None, date(2025, 3, 11), date(2025, 12, 1))
    assert compute_progress(dates, today) == pytest.approx(40.0)


def test_compute_progress_bounds(today):
    assert compute_progress((None,) * 5, today) == 0.0
    assert compute_progress((date(2025, 1, 1),) * 5, today) == 100.0


@pytest.mark.parametrize(
    "fin_offset,expected",
    [(0, True), (7, True), (8, False), (-1, False)],
)
def test_is_critical_deadline_window(today, fin_offset, expected):
    from datetime import timedelta

    fin = today + timedelta(days=fin_offset)
    assert is_critical("En curso", fin, "", today=today, threshold_days=7) is expected


def test_is_critical_deadline_requires_en_curso(today):
    assert is_critical("Pendiente", today, "", today=today, threshold_days=7) is False


def test_is_critical_keywords_case_insensitive(today):
    assert is_critical("Completado", None, "Hay un PROBLEMA", today=today, threshold_days=7) is True
    assert is_critical("N/A", None, "Crítico para cliente", today=today, threshold_days=7) is True
    assert is_critical("N/A", None, "todo bien", today=today, threshold_days=7) is False


def test_is_critical_threshold_is_configurable(today):
    from datetime import timedelta

    fin = today + timedelta(days=10)
    assert is_critical("En curso", fin, "", today=today, threshold_days=10) is True
    assert is_critical("En curso", fin, "", today=today, threshold_days=7) is False


# --- full record ----------------------------------------------------------

def test_scenario_ordinal_three(today):
    row = _row({
        "Status": "en curso",
        "Previos": "01-ene",
        "Fin": "10-ene",
        "Previsión facturación": "1.000,00€",
        "Costes asociados a proyecto": "200,00€",
        "Coste estructura": "100,00€",
        "Observaciones": "urgente revisión",
    })
    p = normalize_project(row, 3, today=today)
    assert p.id == "3"
    assert p.status == "En curso"
    assert p.facturacion == pytest.approx(1000.0)
    assert p.total_cost == pytest.approx(300.0)
    assert p.margin == pytest.approx(700.0)
    assert p.margin_percent == pytest.approx(70.0)
    assert p.is_critical is True  # fin already passed, keyword match
    assert p.previos == date(2025, 1, 1)
    assert p.fin == date(2025, 1, 10)
    assert p.progress == pytest.approx(40.0)


def test_margin_is_exact_including_negative(today):
    row = _row({
        "Previsión facturación": "100",
        "Costes asociados a proyecto": "150",
        "Coste estructura": "25,5",
    })
    p = normalize_project(row, 0, today=today)
    assert p.margin == p.facturacion - (p.costes + p.estructura)
    assert p.margin == pytest.approx(-75.5)
    assert p.margin_percent == pytest.approx(-75.5)


def test_margin_percent_zero_without_billing(today):
    p = normalize_project(_row({"Costes asociados a proyecto": "50"}), 0, today=today)
    assert p.margin == pytest.approx(-50.0)
    assert p.margin_percent == 0.0


def test_empty_row_yields_defaults(today):
    p = normalize_project(RawRow(cells=(), headers=HeaderIndex()), 7, today=today)
    assert p.id == "7"
    assert p.status == "N/A"
    assert p.type == "OTROS"
    assert p.lifecycle_dates == (None,) * 5
    assert (p.facturacion, p.costes, p.estructura) == (0.0, 0.0, 0.0)
    assert p.progress == 0.0
    assert p.is_critical is False
    assert p.presentation_content == ""
    assert p.client == p.assignee == p.notes == ""


def test_passthrough_fields_are_verbatim(sample_grid, today):
    _, rows = build_raw_rows(sample_grid)
    p = normalize_project(rows[0], 0, today=today)
    assert p.client == "Acme"
    assert p.brand == "Nike"
    assert p.point_of_sale == "BCN Diagonal"
    assert p.assignee == "Laura Gómez"
    assert p.type == "Retail"
    assert p.produccion == date(2025, 3, 1)  # "Produccion" header
    assert p.presentation_content == "https://canva.com/design/abc"
    assert p.fin_text == "14-mar"


def test_produccion_accented_header_preferred(today):
    row = _row({"Producción": "02-mar", "Produccion": "03-mar"})
    assert normalize_project(row, 0, today=today).produccion == date(2025, 3, 2)


def test_custom_currency_symbol(today):
    row = _row({"Previsión facturación": "£1.200,00"})
    settings = DashboardSettings(currency_symbol="£")
    assert normalize_project(row, 0, today=today, settings=settings).facturacion == pytest.approx(1200.0)


def test_normalize_is_idempotent(sample_grid, today):
    _, rows = build_raw_rows(sample_grid)
    first = normalize_project(rows[1], 1, today=today)
    second = normalize_project(rows[1], 1, today=today)
    assert first == second


def test_normalize_does_not_touch_raw_row(sample_grid, today):
    _, rows = build_raw_rows(sample_grid)
    before = rows[0].cells
    normalize_project(rows[0], 0, today=today)
    assert rows[0].cells == before


def test_normalize_rows_ids_follow_position(sample_grid, today):
    _, rows = build_raw_rows(sample_grid)
    with patch("project_dashboard.services.progress.is_tty_enabled", return_value=False):
        projects = normalize_rows(rows, today=today)
    assert [p.id for p in projects] == ["0", "1", "2", "3"]


def test_normalize_rows_advances_progress_bar(sample_grid, today):
    _, rows = build_raw_rows(sample_grid)
    with patch("project_dashboard.services.progress.is_tty_enabled", return_value=True), \
         patch("project_dashboard.services.progress.tqdm") as mock_tqdm:
        normalize_rows(rows, today=today)
    pbar = mock_tqdm.return_value
    assert pbar.update.call_count == len(rows)
    pbar.close.assert_called_once()
    # 進捗バーに critical 件数を表示
    pbar.set_postfix.assert_called_with(critical=2)
