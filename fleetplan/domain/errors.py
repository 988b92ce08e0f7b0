"""Error taxonomy for schedule import and matrix editing.

Fatal errors are exceptions and abort the operation that raised them:
  - structural: ScheduleHeaderNotFound, EmptyScheduleError, ScheduleTooLargeError
  - validation: DuplicateActivityCodeError, NonMonotonicIntervalsError, UnknownReferenceError

Advisories are plain values collected next to a successful result.
"""
from __future__ import annotations
from typing import Any, Dict, Optional

# --- Advisory kinds ---
CATEGORY_MISMATCH = "CategoryMismatchWarning"
UNUSED_ACTIVITY = "WarnUnusedActivity"
AMBIGUOUS_MARK = "AmbiguousMarkNormalizedToApplies"
DISCARDED_INTERVAL_COLUMN = "DiscardedInvalidIntervalColumn"
ACTIVITY_BEFORE_CATEGORY = "ActivityBeforeCategoryHeader"
SKIPPED_MALFORMED_ROW = "SkippedMalformedRow"


def _where(row: Optional[int], column: Optional[int]) -> str:
    parts = []
    if row is not None:
        parts.append(f"row {row}")
    if column is not None:
        parts.append(f"column {column}")
    return ", ".join(parts)


class ScheduleError(Exception):
    code = "ScheduleError"

    def __init__(self, message: str, row: Optional[int] = None, column: Optional[int] = None):
        self.message = message
        self.row = row
        self.column = column
        where = _where(row, column)
        super().__init__(f"{message} ({where})" if where else message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "code": self.code,
            "row": self.row,
            "column": self.column,
        }


class StructuralScheduleError(ScheduleError):
    """The grid cannot be read as a schedule at all; nothing is persisted."""


class ScheduleValidationError(ScheduleError):
    """The grid was read but its content breaks a plan invariant."""


class ScheduleHeaderNotFound(StructuralScheduleError):
    code = "ScheduleHeaderNotFound"


class EmptyScheduleError(StructuralScheduleError):
    code = "EmptyScheduleError"


class ScheduleTooLargeError(StructuralScheduleError):
    code = "ScheduleTooLargeError"


class UnreadableWorkbookError(StructuralScheduleError):
    code = "UnreadableWorkbookError"


class DuplicateActivityCodeError(ScheduleValidationError):
    code = "DuplicateActivityCodeError"

    def __init__(self, activity_code: str, first_row: Optional[int], row: Optional[int]):
        self.activity_code = activity_code
        self.first_row = first_row
        seen = f" (first seen at row {first_row})" if first_row is not None else ""
        super().__init__(f"Activity code '{activity_code}' appears more than once{seen}", row=row)


class NonMonotonicIntervalsError(ScheduleValidationError):
    code = "NonMonotonicIntervalsError"


class UnknownReferenceError(ScheduleValidationError):
    code = "UnknownReferenceError"


class PlanNotFoundError(ScheduleError):
    code = "PlanNotFoundError"


class PlanStateError(ScheduleError):
    code = "PlanStateError"


class Advisory:
    """Non-fatal data-quality note raised during import."""

    def __init__(self, kind: str, message: str, row: Optional[int] = None, column: Optional[int] = None):
        self.kind = kind
        self.message = message
        self.row = row
        self.column = column

    def __str__(self) -> str:
        where = _where(self.row, self.column)
        suffix = f" ({where})" if where else ""
        return f"{self.kind}: {self.message}{suffix}"

    __repr__ = __str__

    def __eq__(self, other):
        if not isinstance(other, Advisory):
            return NotImplemented
        return (self.kind, self.message, self.row, self.column) == \
            (other.kind, other.message, other.row, other.column)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "row": self.row, "column": self.column}


__all__ = [
    'ScheduleError', 'StructuralScheduleError', 'ScheduleValidationError',
    'ScheduleHeaderNotFound', 'EmptyScheduleError', 'ScheduleTooLargeError', 'UnreadableWorkbookError',
    'DuplicateActivityCodeError', 'NonMonotonicIntervalsError', 'UnknownReferenceError',
    'PlanNotFoundError', 'PlanStateError', 'Advisory',
    'CATEGORY_MISMATCH', 'UNUSED_ACTIVITY', 'AMBIGUOUS_MARK', 'DISCARDED_INTERVAL_COLUMN',
    'ACTIVITY_BEFORE_CATEGORY', 'SKIPPED_MALFORMED_ROW',
]
