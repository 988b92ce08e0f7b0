"""Schedule import pipeline: CellGrid -> (Plan, advisories).

Pure: no I/O and no persistence. The caller persists the result with exactly one
PlanRepository.upsert call, or drops it.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from fleetplan.domain.Grid import CellGrid
from fleetplan.domain.Plan import Plan
from fleetplan.domain.errors import Advisory, ScheduleTooLargeError
from fleetplan.logic.importing.header_locator import locate
from fleetplan.logic.importing.interval_parser import build_intervals
from fleetplan.logic.importing.plan_normalizer import normalize
from fleetplan.logic.importing.row_classifier import classify_rows
from fleetplan.logic.importing.settings import ImportSettings

logger = logging.getLogger(__name__)

__all__ = ["ImportResult", "check_bounds", "import_schedule"]


class ImportResult:
    def __init__(self, plan: Plan, warnings: List[Advisory]):
        self.plan = plan
        self.warnings = list(warnings)

    def summary(self) -> Dict[str, Any]:
        return {
            "intervalsCount": len(self.plan.intervals),
            "activitiesCount": len(self.plan.activities),
            "warnings": [str(w) for w in self.warnings],
        }


def check_bounds(n_rows: int, n_cols: int, settings: ImportSettings):
    if n_rows > settings.max_rows:
        raise ScheduleTooLargeError(f"Sheet has {n_rows} rows, limit is {settings.max_rows}", row=n_rows)
    if n_cols > settings.max_cols:
        raise ScheduleTooLargeError(f"Sheet has {n_cols} columns, limit is {settings.max_cols}", column=n_cols)


def import_schedule(grid: CellGrid, vehicle_type: str = "", name: str = "",
                    settings: Optional[ImportSettings] = None, description: str = "") -> ImportResult:
    settings = settings or ImportSettings()
    check_bounds(grid.n_rows, grid.n_cols, settings)

    header = locate(grid, settings.header_scan_rows, settings.header_scan_cols,
                    first_col=settings.first_interval_column)
    intervals, warnings = build_intervals(header, settings.convention)
    rows, labels, row_warnings = classify_rows(grid, header.km_row + 1, intervals, settings)
    warnings.extend(row_warnings)
    plan, plan_warnings = normalize(intervals, rows, vehicle_type, name,
                                    category_labels=labels, description=description)
    warnings.extend(plan_warnings)

    for w in warnings:
        logger.warning("Import advisory for '%s': %s", name or vehicle_type, w)
    return ImportResult(plan, warnings)
