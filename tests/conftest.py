# Shared pytest fixtures
from __future__ import annotations
import tempfile
from datetime import date
from pathlib import Path

import pytest

from project_dashboard.logging.init import reset_logging

HEADERS = [
    "Cliente",                       # 0
    "Marca",                         # 1
    "PROJECT",                       # 2
    "PUNTO VENTA",                   # 3
    "Status",                        # 4
    "Tipo",                          # 5
    "Previos",                       # 6
    "Diseño",                        # 7
    "Produccion",                    # 8
    "Ejecución",                     # 9
    "Fin",                           # 10
    "Previsión facturación",         # 11
    "Costes asociados a proyecto",   # 12
    "Coste estructura",              # 13
    "Observaciones",                 # 14
    "Notas internas",                # 15
    "Presentación",                  # 16
]

ROWS = [
    # 0: en curso, ends in 4 days -> critical by deadline
    ["Acme", "Nike", "Laura Gómez", "BCN Diagonal", "en curso", "Retail",
     "01-ene", "15-feb", "01-mar", "05-mar", "14-mar",
     "1.000,00€", "200,00€", "100,00€", "", "", "https://canva.com/design/abc"],
    # 1: pending, negative margin, critical by keyword
    ["Acme", "Adidas", "Marc Puig", "", "Pendiente de aprobación", "evento",
     "10-mar", "", "", "", "20-abr",
     "1.500,00 €", "1.500,00€", "200,00€", "Incidencia con proveedor", "", ""],
    # 2: almost empty row
    ["Globex", "", "", "", "", "", "", "", "", "", "", "", "", "", "", "", ""],
    # 3: completed, no client, presentation found by scanning column 17
    ["", "Puma", "laura", "", "Completado", "retail",
     "01-ene", "02-ene", "03-ene", "04-ene", "05-feb",
     "2.000€", "500€", "", "", "", "", "<iframe src='https://x'></iframe>"],
]


@pytest.fixture(autouse=True)
def _fresh_logging():
    # handler は setup 時点の sys.stdout を掴むのでテスト毎にリセット
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def today() -> date:
    return date(2025, 3, 10)


@pytest.fixture()
def sample_grid() -> list[list[str]]:
    return [list(HEADERS)] + [list(r) for r in ROWS]


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("DASHBOARD_CONFIG", raising=False)
        monkeypatch.delenv("DASHBOARD_SOURCE", raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_path: ./data/proyectos.csv
critical_days_threshold: 7
refresh_interval_seconds: 300
date_locale: es-ES
currency: EUR
currency_symbol: "€"
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "dashboard.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def write_csv(temp_workdir: Path, sample_grid: list[list[str]]) -> Path:
    import csv

    # sheet exports are rectangular: pad every row to the widest one
    width = max(len(r) for r in sample_grid)
    path = temp_workdir / "data" / "proyectos.csv"
    with path.open("w", encoding="utf-8", newline="") as f:
        csv.writer(f).writerows(r + [""] * (width - len(r)) for r in sample_grid)
    return path


class StaticSource:
    """Row source returning a fixed grid (or raising)."""

    def __init__(self, grid=None, error: Exception | None = None) -> None:
        self.grid = grid
        self.error = error
        self.calls = 0

    def fetch(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.grid

    def describe(self) -> str:
        return "static"


@pytest.fixture()
def static_source(sample_grid) -> StaticSource:
    return StaticSource(sample_grid)


@pytest.fixture()
def make_source():
    """Factory: make_source(grid=None, error=None) -> StaticSource."""
    return StaticSource
