"""Workbook -> CellGrid adapter (openpyxl).

Sheet choice: preferred sheet names first, then a sheet whose name contains one of the
hints, then the first sheet. Reading stops one row/column past the configured bounds so
an oversized sheet fails fast instead of being loaded whole.
"""
import io
import logging
import zipfile
from pathlib import Path
from typing import BinaryIO, Optional, Sequence, Union

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from fleetplan.domain.Grid import CellGrid, cell_to_text
from fleetplan.domain.errors import EmptyScheduleError, UnreadableWorkbookError
from fleetplan.logic.importing.pipeline import check_bounds
from fleetplan.logic.importing.settings import ImportSettings
from fleetplan.utilities.constants import PREFERRED_SHEETS, SHEET_NAME_HINTS

logger = logging.getLogger(__name__)

Source = Union[str, Path, bytes, BinaryIO]


def pick_sheet(workbook, preferred: Sequence[str] = PREFERRED_SHEETS, hints: Sequence[str] = SHEET_NAME_HINTS):
    names = list(workbook.sheetnames)
    if not names:
        raise EmptyScheduleError("The workbook has no worksheets")
    for wanted in preferred:
        if wanted in names:
            return workbook[wanted]
    for name in names:
        lowered = name.lower()
        if any(h in lowered for h in hints):
            return workbook[name]
    return workbook[names[0]]


def _trim(rows):
    """Drop trailing empty rows and trailing empty columns."""
    while rows and all(cell_to_text(v) == "" for v in rows[-1]):
        rows.pop()
    n_cols = 0
    for values in rows:
        for idx in range(len(values), 0, -1):
            if cell_to_text(values[idx - 1]) != "":
                n_cols = max(n_cols, idx)
                break
    return [tuple(values[:n_cols]) for values in rows], n_cols


def load_grid(source: Source, settings: Optional[ImportSettings] = None, sheet_name: Optional[str] = None) -> CellGrid:
    settings = settings or ImportSettings()
    if isinstance(source, bytes):
        source = io.BytesIO(source)
    try:
        workbook = openpyxl.load_workbook(source, data_only=True, read_only=True)
    except (InvalidFileException, zipfile.BadZipFile, OSError, KeyError, ValueError) as e:
        logger.error(f"Cannot open workbook: {e}")
        raise UnreadableWorkbookError("The file is not a readable Excel workbook") from e

    try:
        if sheet_name is not None:
            if sheet_name not in workbook.sheetnames:
                raise EmptyScheduleError(f"Worksheet '{sheet_name}' not found")
            worksheet = workbook[sheet_name]
        else:
            worksheet = pick_sheet(workbook)
        logger.info(f"Reading worksheet '{worksheet.title}'")
        rows = [
            list(values)
            for values in worksheet.iter_rows(max_row=settings.max_rows + 1,
                                              max_col=settings.max_cols + 1,
                                              values_only=True)
        ]
    finally:
        workbook.close()

    rows, n_cols = _trim(rows)
    check_bounds(len(rows), n_cols, settings)
    return CellGrid(rows, n_rows=len(rows), n_cols=n_cols)


__all__ = ['pick_sheet', 'load_grid']
