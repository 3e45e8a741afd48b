from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Any

"""Project domain model.

One Project is derived from one RawRow per refresh and is never mutated
afterwards. The ``id`` is the 0-based position of the row in the fetch it
came from; it is not stable if the upstream row order changes.
"""

__all__ = [
    "Project",
    "INACTIVE_STATUSES",
]

INACTIVE_STATUSES = frozenset({"completado", "cancelado"})


@dataclass(frozen=True)
class Project:
    """Normalized project record with derived business metrics."""
    id: str  # 行位置 (0-based)
    status: str  # En curso / Completado / Pendiente / Producción / Diseño / raw / N/A
    type: str

    # Lifecycle dates (current calendar year assumed)
    previos: date | None = None
    diseno: date | None = None
    produccion: date | None = None
    ejecucion: date | None = None
    fin: date | None = None

    # Amounts
    facturacion: float = 0.0
    costes: float = 0.0
    estructura: float = 0.0

    # Derived
    total_cost: float = 0.0
    margin: float = 0.0
    margin_percent: float = 0.0
    progress: float = 0.0
    is_critical: bool = False

    presentation_content: str = ""

    # Passthrough text
    client: str = ""
    brand: str = ""
    point_of_sale: str = ""
    assignee: str = ""
    notes: str = ""
    previos_text: str = ""
    fin_text: str = ""

    @property
    def lifecycle_dates(self) -> tuple[date | None, ...]:
        return (self.previos, self.diseno, self.produccion, self.ejecucion, self.fin)

    @property
    def is_active(self) -> bool:
        return self.status.lower() not in INACTIVE_STATUSES

    def days_until_end(self, today: date) -> int | None:
        """Whole days from ``today`` to ``fin`` (negative when overdue)."""
        if self.fin is None:
            return None
        return (self.fin - today).days

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, date):
                data[key] = value.isoformat()
        return data
