"""Plans defined field by field instead of read from a worksheet.

The definition is turned into the same ParsedInterval / ClassifiedRow values the workbook
import produces, so it goes through the same checks (strictly increasing thresholds,
unique codes, at least one interval and one activity) in normalize().
Matrix entries name an activity by code and an interval by its 1-based position.
"""
from __future__ import annotations
import logging
from decimal import Decimal
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from fleetplan.domain.Activity import ACTIVITY_CODE_PATTERN, code_prefix
from fleetplan.domain.errors import Advisory, CATEGORY_MISMATCH, UnknownReferenceError
from fleetplan.logic.importing.interval_parser import ParsedInterval, check_increasing
from fleetplan.logic.importing.pipeline import ImportResult
from fleetplan.logic.importing.plan_normalizer import normalize
from fleetplan.logic.importing.row_classifier import ClassifiedRow

logger = logging.getLogger(__name__)

__all__ = ["IntervalSpec", "ActivitySpec", "build_plan"]


class IntervalSpec(NamedTuple):
    hours: Decimal
    kilometers: Decimal


class ActivitySpec(NamedTuple):
    code: str
    description: str
    category: str = ""


def _parsed_intervals(intervals: Sequence[IntervalSpec]) -> List[ParsedInterval]:
    parsed = []
    for order, spec in enumerate(intervals, start=1):
        hours, kilometers = Decimal(spec.hours), Decimal(spec.kilometers)
        if hours < 0 or kilometers < 0:
            raise ValueError(f"I{order}: thresholds cannot be negative")
        parsed.append(ParsedInterval(None, hours, kilometers, order))
    check_increasing(parsed)
    return parsed


def build_plan(intervals: Sequence[IntervalSpec], activities: Sequence[ActivitySpec],
               applies_at: Iterable[Tuple[str, int]] = (),
               vehicle_type: str = "", name: str = "", description: str = "",
               category_labels: Optional[Dict[str, str]] = None) -> ImportResult:
    """Build a plan from a definition; applies_at holds (activity code, interval position) pairs."""
    parsed = _parsed_intervals(intervals)

    codes = []
    for spec in activities:
        code = spec.code.strip().upper()
        if not ACTIVITY_CODE_PATTERN.fullmatch(code):
            raise ValueError(f"Invalid activity code {spec.code!r}, expected letters.digits")
        codes.append(code)

    marked = set()
    for code, position in applies_at:
        code = (code or "").strip().upper()
        if code not in codes:
            raise UnknownReferenceError(f"Matrix entry references unknown activity '{code}'")
        if not 1 <= position <= len(parsed):
            raise UnknownReferenceError(f"Matrix entry for {code} references unknown interval I{position}")
        marked.add((code, position))

    warnings: List[Advisory] = []
    rows = []
    for code, spec in zip(codes, activities):
        prefix = code_prefix(code)
        category = (spec.category or "").strip().upper() or prefix
        if category != prefix:
            warnings.append(Advisory(CATEGORY_MISMATCH, f"Activity {code} listed under category {category}"))
        marks = tuple((code, i.sequence_order) in marked for i in parsed)
        rows.append(ClassifiedRow(None, code, spec.description.strip(), category, marks))

    labels = {k.strip().upper(): v for k, v in (category_labels or {}).items()}
    plan, plan_warnings = normalize(parsed, rows, vehicle_type, name,
                                    category_labels=labels, description=description)
    warnings.extend(plan_warnings)
    logger.info("Built plan '%s' from a definition: %d intervals, %d activities",
                name, len(plan.intervals), len(plan.activities))
    return ImportResult(plan, warnings)
