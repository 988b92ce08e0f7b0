"""Next preventive maintenance for a vehicle, from its meters and the last completed service.

An interval is due once either meter has run past its threshold since the last service,
and upcoming when what is left is within `upcoming_ratio` of the threshold. Activities
applying at due intervals feed the preventive work order.
"""
from __future__ import annotations
from decimal import Decimal
from typing import Any, Dict, List, Union

from fleetplan.domain.Plan import Plan
from fleetplan.utilities.constants import NEXT_INTERVALS_LIMIT, UPCOMING_RATIO

__all__ = ["compute_next_maintenance"]

Number = Union[int, float, Decimal, str]


def _dec(value: Number) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def compute_next_maintenance(plan: Plan, odometer: Number, hourmeter: Number,
                             last_odometer: Number = 0, last_hourmeter: Number = 0,
                             *, upcoming_ratio: Number = UPCOMING_RATIO,
                             limit: int = NEXT_INTERVALS_LIMIT) -> Dict[str, Any]:
    km_run = _dec(odometer) - _dec(last_odometer)
    hours_run = _dec(hourmeter) - _dec(last_hourmeter)
    ratio = _dec(upcoming_ratio)

    next_intervals: List[Dict[str, Any]] = []
    due_interval_ids = []
    for interval in plan.intervals:
        km_left = interval.kilometers - km_run
        hours_left = interval.hours - hours_run
        if km_left <= 0 or hours_left <= 0:
            due_interval_ids.append(interval.id)
            next_intervals.append({
                "interval_id": interval.id,
                "label": interval.label,
                "km_until_next": 0.0,
                "hours_until_next": 0.0,
                "is_due": True,
                "is_upcoming": False,
            })
        elif km_left <= interval.kilometers * ratio or hours_left <= interval.hours * ratio:
            next_intervals.append({
                "interval_id": interval.id,
                "label": interval.label,
                "km_until_next": float(km_left),
                "hours_until_next": float(hours_left),
                "is_due": False,
                "is_upcoming": True,
            })

    # Unique activities in plan order
    applicable = [
        activity for activity in plan.activities
        if any(plan.applies(activity.id, iid) for iid in due_interval_ids)
    ]
    return {
        "plan_id": plan.id,
        "next_intervals": next_intervals[:limit],
        "applicable_activities": [a.to_dict() for a in applicable],
    }
