"""Plan assembly and validation.

Builds the Plan aggregate from parsed intervals and classified activity rows. Only
marks that apply become matrix entries.
"""
from __future__ import annotations
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from fleetplan.domain.Activity import Activity
from fleetplan.domain.Interval import Interval
from fleetplan.domain.Plan import Plan, new_id
from fleetplan.domain.errors import Advisory, DuplicateActivityCodeError, EmptyScheduleError, UNUSED_ACTIVITY
from fleetplan.logic.importing.interval_parser import ParsedInterval
from fleetplan.logic.importing.row_classifier import ClassifiedRow

logger = logging.getLogger(__name__)

__all__ = ["normalize"]


def normalize(intervals: Sequence[ParsedInterval], rows: Sequence[ClassifiedRow],
              vehicle_type: str = "", name: str = "",
              category_labels: Optional[Dict[str, str]] = None,
              description: str = "") -> Tuple[Plan, List[Advisory]]:
    if not intervals:
        raise EmptyScheduleError("No valid interval columns: every header column was discarded")
    if not rows:
        raise EmptyScheduleError("No activity rows found below the interval header")

    warnings: List[Advisory] = []
    first_seen: Dict[str, int] = {}
    for r in rows:
        if r.code in first_seen:
            raise DuplicateActivityCodeError(r.code, first_seen[r.code], r.row)
        first_seen[r.code] = r.row

    domain_intervals = [
        Interval(new_id(), p.hours, p.kilometers, p.sequence_order, column=p.column)
        for p in intervals
    ]
    activities = []
    matrix = set()
    for order, r in enumerate(rows, start=1):
        activity = Activity(new_id(), r.code, r.description, r.category, order, row=r.row)
        activities.append(activity)
        for interval, applies in zip(domain_intervals, r.marks):
            if applies:
                matrix.add((activity.id, interval.id))
        if not any(r.marks):
            warnings.append(Advisory(UNUSED_ACTIVITY, f"Activity {r.code} applies at no interval", row=r.row))

    plan = Plan(new_id(), vehicle_type, name, domain_intervals, activities, matrix,
                description=description, category_labels=category_labels)
    logger.info("Normalized plan '%s': %d intervals, %d activities, %d marks",
                name, len(domain_intervals), len(activities), len(matrix))
    return plan, warnings
