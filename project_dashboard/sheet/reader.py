from __future__ import annotations

from datetime import date
from pathlib import Path

import pandas as pd

from ..models.raw_row import EmptySheetError
from ..services.parsing import SPANISH_MONTHS

"""Spreadsheet export reader.

Reads a local export of the project sheet (.xlsx / .xls / .csv) into the
same shape the online sheet API returns: a 2-D list of strings whose first
row holds the headers.

CSV cells are read as text and passed through untouched. Excel cells keep
their types on read and are rendered back into the sheet's Spanish display
form (`1234,56`, `05-mar`), so typed workbooks and text exports reach the
normalizer in the same shape.
"""

__all__ = [
    "SourceNotFoundError",
    "UnsupportedSourceError",
    "FileRowSource",
    "read_sheet_grid",
]

EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}
CSV_SUFFIXES = {".csv"}


class SourceNotFoundError(FileNotFoundError):
    """Raised when the configured export file does not exist."""


class UnsupportedSourceError(Exception):
    """Raised for file types the reader cannot parse."""


# 月番号 -> "ene".. ("05-mar" 形式に戻すため)
_MONTH_ABBR = {number: abbr for abbr, number in SPANISH_MONTHS.items()}


def _cell_text(value: object) -> str:
    """Render one typed cell the way the sheet displays it.

    Strings pass through; numbers use the Spanish decimal comma and dates
    become ``DD-mon``, so the normalizer parses every source the same way.
    """
    if isinstance(value, str):
        return value
    if value is None or pd.isna(value):
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, date):  # datetime / pd.Timestamp included
        return f"{value.day:02d}-{_MONTH_ABBR[value.month]}"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return f"{value:.2f}".replace(".", ",")
    return str(value)


def _frame_to_grid(df: pd.DataFrame) -> list[list[str]]:
    # 末尾の完全空行は落とす
    grid = [[_cell_text(v) for v in row] for row in df.itertuples(index=False, name=None)]
    while grid and all(not cell.strip() for cell in grid[-1]):
        grid.pop()
    return grid


def read_sheet_grid(path: Path, sheet_name: str | None = None) -> list[list[str]]:
    """Read an export file into a header-first grid of strings.

    Parameters
    ----------
    path: export file path
    sheet_name: Excel sheet to read (None -> first sheet); ignored for CSV

    Raises
    ------
    SourceNotFoundError: file does not exist
    UnsupportedSourceError: unknown suffix
    EmptySheetError: file holds no rows
    """
    if not path.exists():
        raise SourceNotFoundError(f"source file not found: {path}")
    suffix = path.suffix.lower()
    if suffix in EXCEL_SUFFIXES:
        df = pd.read_excel(
            path,
            sheet_name=sheet_name if sheet_name else 0,
            header=None,
            dtype=object,
            keep_default_na=False,
        )
    elif suffix in CSV_SUFFIXES:
        try:
            df = pd.read_csv(path, header=None, dtype=str, keep_default_na=False)
        except pd.errors.EmptyDataError as e:
            raise EmptySheetError(f"no data found in {path.name}") from e
    else:
        raise UnsupportedSourceError(f"unsupported source type: {path.suffix}")

    grid = _frame_to_grid(df)
    if not grid:
        raise EmptySheetError(f"no data found in {path.name}")
    return grid


class FileRowSource:
    """Row source over a local spreadsheet export.

    Each ``fetch()`` re-reads the file, so an auto refresh loop picks up
    edits saved between refreshes.
    """

    def __init__(self, path: Path | str, sheet_name: str | None = None) -> None:
        self.path = Path(path)
        self.sheet_name = sheet_name

    def fetch(self) -> list[list[str]]:
        return read_sheet_grid(self.path, self.sheet_name)

    def describe(self) -> str:
        if self.sheet_name:
            return f"{self.path.name}!{self.sheet_name}"
        return self.path.name
