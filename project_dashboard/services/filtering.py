from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from ..models.project import Project

"""Filter predicate applied before every aggregation."""

__all__ = [
    "ProjectFilter",
    "apply_filter",
]


@dataclass(frozen=True)
class ProjectFilter:
    """Optional criteria; an empty criterion always matches.

    person: case-insensitive substring of the assigned person
    client: case-insensitive substring of the client name
    status: canonical status, compared case-insensitively
    """
    person: str = ""
    client: str = ""
    status: str = ""

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> ProjectFilter:
        raw = raw or {}

        def _text(key: str) -> str:
            value = raw.get(key)
            return str(value).strip() if value is not None else ""

        return cls(person=_text("person"), client=_text("client"), status=_text("status"))

    @property
    def is_empty(self) -> bool:
        return not (self.person or self.client or self.status)

    def matches(self, project: Project) -> bool:
        if self.person and self.person.lower() not in project.assignee.lower():
            return False
        if self.client and self.client.lower() not in project.client.lower():
            return False
        if self.status and self.status.lower() != project.status.lower():
            return False
        return True


def apply_filter(projects: Iterable[Project], flt: ProjectFilter | None = None) -> list[Project]:
    """Order-preserving subsequence of ``projects`` matching every criterion."""
    if flt is None or flt.is_empty:
        return list(projects)
    return [p for p in projects if flt.matches(p)]
