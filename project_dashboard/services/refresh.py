from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from typing import Any, Protocol

from ..logging.error_log import ErrorLogBuffer
from ..models.aggregates import DashboardKpis, DashboardSummary
from ..models.config_models import DashboardSettings
from ..models.error_record import ErrorRecord
from ..models.project import Project
from ..models.raw_row import EmptySheetError, build_raw_rows
from .aggregation import summarize
from .filtering import ProjectFilter, apply_filter
from .normalizer import normalize_rows

logger = logging.getLogger(__name__)

"""Refresh orchestration.

One refresh = fetch -> raw rows -> normalize -> filter -> aggregate, run
synchronously over the whole batch. The result is a new DashboardState;
the previous state is never modified. If the fetch fails or returns no
data, RefreshError is raised and the caller simply keeps showing the
state it already has.
"""

__all__ = [
    "ProcessingError",
    "RefreshError",
    "RowSource",
    "DashboardState",
    "refresh",
    "reapply_filter",
    "AutoRefresher",
]


class ProcessingError(Exception):
    """Base exception for pipeline errors."""
    pass


class RefreshError(ProcessingError):
    """A refresh could not produce a new state (fetch failed or returned nothing)."""

    def __init__(self, message: str, *, stage: str = "fetch", error_type: str = "FETCH_FAILED") -> None:
        super().__init__(message)
        self.stage = stage
        self.error_type = error_type


class RowSource(Protocol):
    """Anything that can hand over the sheet as a header-first grid of strings."""

    def fetch(self) -> list[list[str]]: ...


def _empty_summary() -> DashboardSummary:
    return DashboardSummary(kpis=DashboardKpis(active_projects=0, total_billing=0.0, critical_projects=0))


@dataclass(frozen=True)
class DashboardState:
    """Value holder owned by the caller; replaced wholesale on every refresh."""
    projects: tuple[Project, ...] = ()
    filtered: tuple[Project, ...] = ()
    summary: DashboardSummary = field(default_factory=_empty_summary)
    active_filter: ProjectFilter = field(default_factory=ProjectFilter)
    refreshed_at: datetime | None = None

    @classmethod
    def empty(cls) -> DashboardState:
        return cls()

    def find(self, project_id: str) -> Project | None:
        """Look a project up by positional id (stale if the sheet order changed)."""
        for p in self.projects:
            if p.id == project_id:
                return p
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "refreshed_at": self.refreshed_at.isoformat() if self.refreshed_at else None,
            "filter": {
                "person": self.active_filter.person,
                "client": self.active_filter.client,
                "status": self.active_filter.status,
            },
            "total_projects": len(self.projects),
            "filtered_projects": [p.to_dict() for p in self.filtered],
            "summary": self.summary.to_dict(),
        }


def _source_name(source: RowSource) -> str:
    describe = getattr(source, "describe", None)
    return describe() if callable(describe) else type(source).__name__


def refresh(
    source: RowSource,
    state: DashboardState | None = None,
    *,
    settings: DashboardSettings | None = None,
    flt: ProjectFilter | None = None,
    today: date | None = None,
) -> DashboardState:
    """Fetch and rebuild the whole dashboard state.

    Args:
        source: row source collaborator
        state: current state; only its filter is reused when ``flt`` is None
        settings: threshold / currency settings
        flt: filter to apply (defaults to the state's active filter)
        today: reference date for the whole pass (defaults to the local date)

    Returns:
        New DashboardState

    Raises:
        RefreshError: fetch raised or returned no data; nothing was applied
    """
    settings = settings or DashboardSettings()
    active_filter = flt if flt is not None else (state.active_filter if state else ProjectFilter())
    today = today or date.today()

    try:
        grid = source.fetch()
        if not grid:
            raise EmptySheetError("no data found in sheet")
        _, rows = build_raw_rows(grid)
    except EmptySheetError as e:
        raise RefreshError(str(e), error_type="EMPTY_SHEET") from e
    except FileNotFoundError as e:
        raise RefreshError(str(e), error_type="SOURCE_NOT_FOUND") from e
    except Exception as e:
        raise RefreshError(f"fetch failed: {e}") from e

    logger.debug(f"fetched rows={len(rows)} from {_source_name(source)}")
    projects = tuple(normalize_rows(rows, today=today, settings=settings))
    filtered = tuple(apply_filter(projects, active_filter))
    return DashboardState(
        projects=projects,
        filtered=filtered,
        summary=summarize(filtered),
        active_filter=active_filter,
        refreshed_at=datetime.now(UTC),
    )


def reapply_filter(state: DashboardState, flt: ProjectFilter) -> DashboardState:
    """Recompute the filtered view and summaries without refetching."""
    filtered = tuple(apply_filter(state.projects, flt))
    return replace(state, filtered=filtered, summary=summarize(filtered), active_filter=flt)


class AutoRefresher:
    """Refresh loop on a fixed cadence.

    A failed refresh is logged, recorded in the error log and leaves the
    last good state in place. The loop is blocking and single-threaded; a
    refresh in flight is never cancelled.
    """

    def __init__(
        self,
        source: RowSource,
        *,
        settings: DashboardSettings | None = None,
        flt: ProjectFilter | None = None,
        error_log: ErrorLogBuffer | None = None,
        on_refresh: Callable[[DashboardState], None] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.source = source
        self.settings = settings or DashboardSettings()
        self.flt = flt or ProjectFilter()
        self.error_log = error_log
        self.on_refresh = on_refresh
        self._sleep = sleep
        self.state = DashboardState(active_filter=self.flt)
        self.failures = 0

    def refresh_once(self) -> bool:
        """Run one refresh; returns True when the state was replaced."""
        try:
            new_state = refresh(self.source, self.state, settings=self.settings, flt=self.flt)
        except RefreshError as e:
            self.failures += 1
            logger.error(f"refresh failed ({e.error_type}): {e}")
            if self.error_log is not None:
                self.error_log.append(
                    ErrorRecord.create(_source_name(self.source), e.stage, e.error_type, str(e))
                )
            return False
        self.state = new_state
        logger.info(
            f"refreshed projects={len(new_state.projects)} filtered={len(new_state.filtered)}"
        )
        if self.on_refresh is not None:
            self.on_refresh(new_state)
        return True

    def run(self, iterations: int | None = None) -> DashboardState:
        """Refresh now and then every ``refresh_interval_seconds``.

        Args:
            iterations: stop after this many refreshes (None -> run until interrupted)
        """
        count = 0
        try:
            while True:
                self.refresh_once()
                count += 1
                if iterations is not None and count >= iterations:
                    break
                self._sleep(self.settings.refresh_interval_seconds)
        except KeyboardInterrupt:
            logger.info("auto refresh stopped")
        finally:
            if self.error_log is not None:
                self.error_log.flush()
        return self.state
