from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

"""RawRow model: one spreadsheet data row as delivered by the row source.

A fetch delivers a 2-D grid of strings whose first row holds the header
names. Every data row is exposed through two access paths over the same
ordered cells:

- by_header(name): lookup through the header mapping of that fetch
- by_position(index): the raw column position, independent of headers

Some business fields (project type, presentation link) are read by
position while the rest are read by header name, so both paths live on
the same object.
"""

__all__ = [
    "EmptySheetError",
    "HeaderIndex",
    "RawRow",
    "build_raw_rows",
]


class EmptySheetError(Exception):
    """Raised when a fetch returns no rows at all (not even a header row)."""


@dataclass(frozen=True)
class HeaderIndex:
    """Header name -> column index mapping shared by all rows of one fetch."""
    columns: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_header_row(cls, header_cells: Sequence[Any]) -> HeaderIndex:
        columns: dict[str, int] = {}
        for idx, name in enumerate(header_cells):
            # 同名ヘッダは後勝ち (last column wins)
            columns[_cell_to_str(name).strip()] = idx
        return cls(columns=columns)

    def index_of(self, name: str) -> int | None:
        return self.columns.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.columns

    def __len__(self) -> int:
        return len(self.columns)


@dataclass(frozen=True)
class RawRow:
    """Ordered string cells of one data row plus the header mapping of its fetch."""
    cells: tuple[str, ...]
    headers: HeaderIndex

    def by_header(self, name: str) -> str:
        """Return the cell under header ``name`` (case-sensitive), or ``""``."""
        idx = self.headers.index_of(name)
        if idx is None or idx >= len(self.cells):
            return ""
        return self.cells[idx] or ""

    def by_position(self, index: int) -> str | None:
        """Return the raw cell at ``index``, or ``None`` when the row is shorter."""
        if index < 0 or index >= len(self.cells):
            return None
        return self.cells[index]

    def first_header(self, *names: str) -> str:
        """Return the first non-empty value among several candidate headers."""
        for name in names:
            value = self.by_header(name)
            if value:
                return value
        return ""


def _cell_to_str(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def build_raw_rows(grid: Sequence[Sequence[Any]]) -> tuple[HeaderIndex, list[RawRow]]:
    """Split a fetched grid into its header mapping and data rows.

    Args:
        grid: 2-D array, first row = header names, remaining rows = data

    Returns:
        tuple: (HeaderIndex, list of RawRow in sheet order)

    Raises:
        EmptySheetError: grid has no rows
    """
    if not grid:
        raise EmptySheetError("no data found in sheet")
    headers = HeaderIndex.from_header_row(grid[0])
    rows = [
        RawRow(cells=tuple(_cell_to_str(c) for c in (raw or ())), headers=headers)
        for raw in grid[1:]
    ]
    return headers, rows
