"""Plan aggregate: ordered intervals, category-grouped activities and the sparse applicability matrix.

The matrix is a set of (activity_id, interval_id) pairs; a pair is present only when the
activity applies at that interval. Absent pairs mean "not applicable".
"""
from typing import Dict, Iterable, List, Optional, Set, Tuple
from uuid import uuid4

from fleetplan.domain.Activity import Activity
from fleetplan.domain.Interval import Interval
from fleetplan.domain.errors import UnknownReferenceError

MatrixKey = Tuple[str, str]


def new_id() -> str:
    return uuid4().hex


class Plan:
    def __init__(self, id: str, vehicle_type: str, name: str, intervals: Iterable[Interval],
                 activities: Iterable[Activity], matrix: Optional[Iterable[MatrixKey]] = None,
                 is_active: bool = True, description: str = "",
                 category_labels: Optional[Dict[str, str]] = None):
        self.id = id
        self.vehicle_type = vehicle_type
        self.name = name
        self.is_active = is_active
        self.description = description
        # Structure is fixed for the lifetime of a revision
        self.intervals: Tuple[Interval, ...] = tuple(sorted(intervals, key=lambda i: i.sequence_order))
        self.activities: Tuple[Activity, ...] = tuple(sorted(activities, key=lambda a: a.sequence_order))
        self.category_labels: Dict[str, str] = dict(category_labels or {})
        self._intervals_by_id = {i.id: i for i in self.intervals}
        self._activities_by_id = {a.id: a for a in self.activities}
        self.matrix: Set[MatrixKey] = set(matrix or ())
        self.validate_references()

    def __str__(self) -> str:
        return (f"Plan {self.name} ({self.vehicle_type}) - {len(self.intervals)} intervals, "
                f"{len(self.activities)} activities, {len(self.matrix)} marks")

    __repr__ = __str__

    # --- Lookups ------------------------------------------------------------
    def interval(self, interval_id: str) -> Interval:
        try:
            return self._intervals_by_id[interval_id]
        except KeyError:
            raise UnknownReferenceError(f"Interval '{interval_id}' does not belong to plan {self.id}")

    def activity(self, activity_id: str) -> Activity:
        try:
            return self._activities_by_id[activity_id]
        except KeyError:
            raise UnknownReferenceError(f"Activity '{activity_id}' does not belong to plan {self.id}")

    def activity_by_code(self, code: str) -> Optional[Activity]:
        wanted = (code or "").strip().upper()
        for activity in self.activities:
            if activity.code == wanted:
                return activity
        return None

    def has_interval(self, interval_id: str) -> bool:
        return interval_id in self._intervals_by_id

    def has_activity(self, activity_id: str) -> bool:
        return activity_id in self._activities_by_id

    def applies(self, activity_id: str, interval_id: str) -> bool:
        return (activity_id, interval_id) in self.matrix

    def categories(self) -> List[str]:
        """Categories in first-seen order."""
        seen: List[str] = []
        for activity in self.activities:
            if activity.category not in seen:
                seen.append(activity.category)
        return seen

    def validate_references(self):
        for activity_id, interval_id in self.matrix:
            if activity_id not in self._activities_by_id:
                raise UnknownReferenceError(f"Matrix entry references unknown activity '{activity_id}'")
            if interval_id not in self._intervals_by_id:
                raise UnknownReferenceError(f"Matrix entry references unknown interval '{interval_id}'")

    # --- Copies ---------------------------------------------------------------
    def with_identity(self, plan_id: str, vehicle_type: str, name: str) -> "Plan":
        """Same content under another identity (ids of intervals/activities kept)."""
        return Plan(plan_id, vehicle_type, name, self.intervals, self.activities, self.matrix,
                    is_active=self.is_active, description=self.description,
                    category_labels=self.category_labels)

    def clone(self, plan_id: str, name: str) -> "Plan":
        """Deep copy with fresh interval/activity ids; the matrix is remapped onto them."""
        interval_ids = {i.id: new_id() for i in self.intervals}
        activity_ids = {a.id: new_id() for a in self.activities}
        intervals = [Interval(interval_ids[i.id], i.hours, i.kilometers, i.sequence_order, i.column)
                     for i in self.intervals]
        activities = [Activity(activity_ids[a.id], a.code, a.description, a.category, a.sequence_order, a.row)
                      for a in self.activities]
        matrix = {(activity_ids[a], interval_ids[i]) for a, i in self.matrix}
        return Plan(plan_id, self.vehicle_type, name, intervals, activities, matrix,
                    is_active=False, description=self.description,
                    category_labels=self.category_labels)

    # --- Persistence ------------------------------------------------------------
    @staticmethod
    def from_dict(data):
        return Plan(
            id=data["id"],
            vehicle_type=data.get("vehicle_type", ""),
            name=data.get("name", ""),
            intervals=[Interval.from_dict(i) for i in data.get("intervals", [])],
            activities=[Activity.from_dict(a) for a in data.get("activities", [])],
            matrix=[(m["activity_id"], m["interval_id"]) for m in data.get("matrix", [])],
            is_active=bool(data.get("is_active", True)),
            description=data.get("description", ""),
            category_labels=data.get("category_labels") or {},
        )

    def to_dict(self):
        order_a = {a.id: a.sequence_order for a in self.activities}
        order_i = {i.id: i.sequence_order for i in self.intervals}
        entries = sorted(self.matrix, key=lambda k: (order_a[k[0]], order_i[k[1]]))
        return {
            "id": self.id,
            "vehicle_type": self.vehicle_type,
            "name": self.name,
            "is_active": self.is_active,
            "description": self.description,
            "category_labels": dict(self.category_labels),
            "intervals": [i.to_dict() for i in self.intervals],
            "activities": [a.to_dict() for a in self.activities],
            "matrix": [{"activity_id": a, "interval_id": i, "applies": True} for a, i in entries],
        }
