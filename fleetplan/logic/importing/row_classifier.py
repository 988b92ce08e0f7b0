"""Activity row classification.

Rows below the header block are one of:
  - category header: bare letters in the code column ("A"), optional label in the description
  - activity row: "A.1" style code with a non-empty description
  - anything else is skipped

The current category travels as an explicit fold value (ClassifierState); classify_row
never reads or writes anything outside its arguments.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, List, NamedTuple, Sequence, Tuple

from fleetplan.domain.Activity import ACTIVITY_CODE_PATTERN, CATEGORY_CODE_PATTERN, code_prefix
from fleetplan.domain.Grid import CellGrid, cell_to_text
from fleetplan.domain.errors import (
    Advisory, ACTIVITY_BEFORE_CATEGORY, AMBIGUOUS_MARK, CATEGORY_MISMATCH, SKIPPED_MALFORMED_ROW,
)
from fleetplan.logic.importing.interval_parser import ParsedInterval
from fleetplan.logic.importing.mark_interpreter import normalize_token, read_mark
from fleetplan.logic.importing.settings import ImportSettings

logger = logging.getLogger(__name__)

__all__ = ["CATEGORY", "ACTIVITY", "SKIP", "ClassifierState", "ClassifiedRow", "classify_row", "classify_rows"]

CATEGORY = "category"
ACTIVITY = "activity"
SKIP = "skip"


class ClassifierState(NamedTuple):
    category: str = ""
    label: str = ""
    seen_header: bool = False


class ClassifiedRow(NamedTuple):
    row: int
    code: str
    description: str
    category: str
    marks: Tuple[bool, ...]


def classify_row(code_token: Any, description_token: Any, state: ClassifierState) -> Tuple[str, ClassifierState]:
    """One fold step: (row kind, next state)."""
    code = cell_to_text(code_token).upper()
    description = cell_to_text(description_token)
    if CATEGORY_CODE_PATTERN.fullmatch(code):
        return CATEGORY, ClassifierState(code, description, True)
    if ACTIVITY_CODE_PATTERN.fullmatch(code) and description:
        return ACTIVITY, state
    return SKIP, state


def _read_marks(grid: CellGrid, row: int, code: str, intervals: Sequence[ParsedInterval],
                settings: ImportSettings, warnings: List[Advisory]) -> Tuple[bool, ...]:
    marks = []
    for interval in intervals:
        token = grid.cell(row, interval.column)
        applies, recognized = read_mark(token, settings.vocabulary)
        if not recognized:
            warnings.append(Advisory(
                AMBIGUOUS_MARK,
                f"Unrecognized mark {normalize_token(token)!r} for {code} treated as applies",
                row=row, column=interval.column))
        marks.append(applies)
    return tuple(marks)


def classify_rows(grid: CellGrid, start_row: int, intervals: Sequence[ParsedInterval],
                  settings: ImportSettings) -> Tuple[List[ClassifiedRow], Dict[str, str], List[Advisory]]:
    """Walk the activity table from start_row.

    Stops after settings.blank_run_limit consecutive fully blank rows or at the last row.
    Returns (activity rows, category labels, advisories).
    """
    rows: List[ClassifiedRow] = []
    labels: Dict[str, str] = {}
    warnings: List[Advisory] = []
    state = ClassifierState()
    blank_run = 0
    last_row = min(grid.n_rows, settings.max_rows)

    for row in range(start_row, last_row + 1):
        if grid.is_blank_row(row):
            blank_run += 1
            if blank_run >= settings.blank_run_limit:
                logger.debug("End of activity table after %d blank rows (row %d)", blank_run, row)
                break
            continue
        blank_run = 0

        code_token = grid.cell(row, settings.code_column)
        description_token = grid.cell(row, settings.description_column)
        kind, state = classify_row(code_token, description_token, state)

        if kind == CATEGORY:
            if state.label and state.category not in labels:
                labels[state.category] = state.label
            continue

        code = cell_to_text(code_token).upper()
        if kind == SKIP:
            if '.' in code:
                warnings.append(Advisory(
                    SKIPPED_MALFORMED_ROW,
                    f"Row with code {code!r} skipped (expected letters.digits and a description)",
                    row=row, column=settings.code_column))
            continue

        prefix = code_prefix(code)
        if state.seen_header:
            category = state.category
            if prefix != category:
                warnings.append(Advisory(
                    CATEGORY_MISMATCH,
                    f"Activity {code} listed under category {category}",
                    row=row, column=settings.code_column))
        else:
            category = prefix
            warnings.append(Advisory(
                ACTIVITY_BEFORE_CATEGORY,
                f"Activity {code} appears before any category header; category {prefix} taken from its code",
                row=row, column=settings.code_column))

        marks = _read_marks(grid, row, code, intervals, settings, warnings)
        rows.append(ClassifiedRow(row, code, cell_to_text(description_token), category, marks))

    return rows, labels, warnings
