"""Header block detection.

The interval header is two adjacent rows: thresholds in hours on top, kilometers right
below ("500 Horas" / "20.000 Kilómetros"). The row pair is searched for in the top-left
window only; once found, interval columns are collected across the whole (bounded) grid.
"""
from __future__ import annotations
import logging
import re
from typing import Any, List, NamedTuple

from fleetplan.domain.Grid import CellGrid, cell_to_text
from fleetplan.domain.errors import ScheduleHeaderNotFound
from fleetplan.logic.importing.interval_parser import HOURS_UNIT, KM_UNIT
from fleetplan.utilities.constants import FIRST_INTERVAL_COLUMN

logger = logging.getLogger(__name__)

__all__ = ["HeaderCandidate", "HeaderBlock", "is_hours_like", "is_km_like", "locate"]

_HOURS_LIKE = re.compile(rf'\d[\d.,\s]*{HOURS_UNIT}[\s.:;,]*')
_KM_LIKE = re.compile(rf'\d[\d.,\s]*{KM_UNIT}[\s.:;,]*')


class HeaderCandidate(NamedTuple):
    column: int
    hours_token: Any
    km_token: Any


class HeaderBlock(NamedTuple):
    hours_row: int
    km_row: int
    candidates: List[HeaderCandidate]


def is_hours_like(token: Any) -> bool:
    return bool(_HOURS_LIKE.fullmatch(cell_to_text(token).lower()))


def is_km_like(token: Any) -> bool:
    return bool(_KM_LIKE.fullmatch(cell_to_text(token).lower()))


def locate(grid: CellGrid, max_scan_rows: int, max_scan_cols: int,
           first_col: int = FIRST_INTERVAL_COLUMN) -> HeaderBlock:
    """Find the first hours/kilometers row pair inside the window.

    Only the row pair search is bounded by the window. Candidates are every column from
    first_col to the last grid column holding a non-empty token in either header row, in
    column order. Whether the tokens are numeric is left to the parser.
    """
    last_row = min(max_scan_rows, grid.n_rows)
    last_col = min(max_scan_cols, grid.n_cols)
    for row in range(1, last_row):
        paired = any(
            is_hours_like(grid.cell(row, col)) and is_km_like(grid.cell(row + 1, col))
            for col in range(first_col, last_col + 1)
        )
        if not paired:
            continue
        candidates = []
        for col in range(first_col, grid.n_cols + 1):
            hours_token = grid.cell(row, col)
            km_token = grid.cell(row + 1, col)
            if cell_to_text(hours_token) or cell_to_text(km_token):
                candidates.append(HeaderCandidate(col, hours_token, km_token))
        logger.debug("Header rows %d/%d with %d candidate columns", row, row + 1, len(candidates))
        return HeaderBlock(row, row + 1, candidates)
    raise ScheduleHeaderNotFound(
        f"No hours/kilometers header rows found in the first {last_row} rows and {last_col} columns")
