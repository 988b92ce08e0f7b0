"""Dense grid view of a plan's applicability matrix, and single-cell edits.

Dense grid layout:
  columns -> intervals in sequence order
  rows    -> activities grouped by category (categories in first-seen order)
Pairs missing from the sparse matrix render as False.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, List, NamedTuple, Optional, Set, Tuple

from fleetplan.domain.Activity import Activity
from fleetplan.domain.Interval import Interval
from fleetplan.domain.Plan import Plan
from fleetplan.domain.errors import UnknownReferenceError

logger = logging.getLogger(__name__)

__all__ = ["DenseRow", "CategoryGroup", "DenseGrid", "CellDiff", "to_dense_grid", "to_sparse", "apply_edit"]


class DenseRow(NamedTuple):
    activity: Activity
    cells: Tuple[bool, ...]


class CategoryGroup(NamedTuple):
    category: str
    label: str
    rows: List[DenseRow]


class DenseGrid:
    def __init__(self, plan_id: str, intervals: List[Interval], groups: List[CategoryGroup]):
        self.plan_id = plan_id
        self.intervals = intervals
        self.groups = groups

    def rows(self) -> List[DenseRow]:
        return [row for group in self.groups for row in group.rows]

    def value(self, activity_id: str, interval_id: str) -> bool:
        col = next((i for i, interval in enumerate(self.intervals) if interval.id == interval_id), None)
        if col is None:
            raise UnknownReferenceError(f"Interval '{interval_id}' is not a column of this grid")
        row = next((r for r in self.rows() if r.activity.id == activity_id), None)
        if row is None:
            raise UnknownReferenceError(f"Activity '{activity_id}' is not a row of this grid")
        return row.cells[col]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "plan_id": self.plan_id,
            "intervals": [
                {"id": i.id, "label": i.label, "hours": str(i.hours), "kilometers": str(i.kilometers),
                 "sequence_order": i.sequence_order}
                for i in self.intervals
            ],
            "categories": [
                {
                    "category": g.category,
                    "label": g.label,
                    "rows": [
                        {"activity_id": r.activity.id, "code": r.activity.code,
                         "description": r.activity.description, "cells": list(r.cells)}
                        for r in g.rows
                    ],
                }
                for g in self.groups
            ],
        }


class CellDiff(NamedTuple):
    activity_id: str
    interval_id: str
    old_value: bool
    new_value: bool

    @property
    def changed(self) -> bool:
        return self.old_value != self.new_value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "activityId": self.activity_id,
            "intervalId": self.interval_id,
            "oldValue": self.old_value,
            "newValue": self.new_value,
        }


def _matches(activity: Activity, term: str) -> bool:
    return (term in activity.code.lower()
            or term in activity.description.lower()
            or term in (activity.category or "").lower())


def to_dense_grid(plan: Plan, category: Optional[str] = None, search: Optional[str] = None) -> DenseGrid:
    """Render the plan as a dense grid, optionally filtered by category and/or search text."""
    intervals = list(plan.intervals)
    term = (search or "").strip().lower()
    groups: Dict[str, CategoryGroup] = {}
    for activity in plan.activities:
        if category and activity.category != category:
            continue
        if term and not _matches(activity, term):
            continue
        cells = tuple(plan.applies(activity.id, interval.id) for interval in intervals)
        if activity.category not in groups:
            label = plan.category_labels.get(activity.category, "")
            groups[activity.category] = CategoryGroup(activity.category, label, [])
        groups[activity.category].rows.append(DenseRow(activity, cells))
    return DenseGrid(plan.id, intervals, list(groups.values()))


def to_sparse(grid: DenseGrid) -> Set[Tuple[str, str]]:
    """Inverse of to_dense_grid: the set of (activity_id, interval_id) pairs that apply."""
    pairs = set()
    for row in grid.rows():
        for interval, applies in zip(grid.intervals, row.cells):
            if applies:
                pairs.add((row.activity.id, interval.id))
    return pairs


def apply_edit(plan: Plan, activity_id: str, interval_id: str, new_value: bool) -> CellDiff:
    """Set one matrix cell. Raises UnknownReferenceError for ids outside the plan."""
    plan.activity(activity_id)
    plan.interval(interval_id)
    key = (activity_id, interval_id)
    old_value = key in plan.matrix
    if new_value:
        plan.matrix.add(key)
    else:
        plan.matrix.discard(key)
    diff = CellDiff(activity_id, interval_id, old_value, bool(new_value))
    if diff.changed:
        logger.info("Plan %s cell %s x %s: %s -> %s", plan.id, activity_id, interval_id, old_value, diff.new_value)
    return diff
