"""JSON-file store for maintenance plans.

Store layout: {"plans": {plan_id: plan_dict}}. A plan's identity is (vehicle_type, name);
re-importing under an existing identity replaces intervals, activities and matrix but keeps
the plan id. Every write goes to a temp file that is moved over the store, so a failed
write leaves the previous revision untouched. Writers are serialized with a process lock;
concurrent edits of the same cell resolve last-write-wins.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from threading import Lock
from typing import List, Optional

from fleetplan.domain.Plan import Plan, new_id
from fleetplan.domain.errors import PlanNotFoundError, PlanStateError
from fleetplan.infra.paths import PLAN_STORE_FILE
from fleetplan.logic.matrix.matrix_view import CellDiff, apply_edit
from fleetplan.utilities.backup import BackupManager

logger = logging.getLogger(__name__)

_lock = Lock()


def _identity_matches(data: dict, vehicle_type: str, name: str) -> bool:
    return (data.get("vehicle_type") or "").strip().lower() == (vehicle_type or "").strip().lower() \
        and (data.get("name") or "").strip().lower() == (name or "").strip().lower()


class PlanRepository:
    def __init__(self, store_file: Optional[Path] = None, backup_manager: Optional[BackupManager] = None):
        self.store_file = Path(store_file) if store_file else PLAN_STORE_FILE
        self.backup_manager = backup_manager

    # --- Store I/O ----------------------------------------------------------
    def _load(self) -> dict:
        if not self.store_file.exists():
            return {"plans": {}}
        with open(self.store_file, "r", encoding="utf-8") as f:
            try:
                store = json.load(f) or {}
            except json.JSONDecodeError as e:
                logger.error(f"Plan store is not valid JSON: {self.store_file}: {e}")
                raise
        store.setdefault("plans", {})
        return store

    def _write(self, store: dict) -> None:
        self.store_file.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.store_file.parent), prefix=".plans_", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                json.dump(store, tmp, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.store_file)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    def _get_locked(self, store: dict, plan_id: str) -> Plan:
        data = store["plans"].get(plan_id)
        if data is None:
            raise PlanNotFoundError(f"Maintenance plan '{plan_id}' not found")
        return Plan.from_dict(data)

    # --- Import contract --------------------------------------------------------
    def upsert(self, plan: Plan, vehicle_type: str, name: str) -> str:
        """Store a full plan revision under (vehicle_type, name) and return the plan id."""
        plan.validate_references()
        with _lock:
            store = self._load()
            existing_id = next((pid for pid, data in store["plans"].items()
                                if _identity_matches(data, vehicle_type, name)), None)
            plan_id = existing_id or plan.id
            revision = plan.with_identity(plan_id, vehicle_type, name)
            if existing_id is not None:
                revision.is_active = bool(store["plans"][existing_id].get("is_active", True))
                if self.backup_manager is not None:
                    self.backup_manager.create_backup()
            store["plans"][plan_id] = revision.to_dict()
            self._write(store)
        logger.info(f"{'Replaced' if existing_id else 'Created'} plan {plan_id} ({vehicle_type} / {name})")
        return plan_id

    # --- Queries -------------------------------------------------------------------
    def get(self, plan_id: str) -> Plan:
        return self._get_locked(self._load(), plan_id)

    def find_by_identity(self, vehicle_type: str, name: str) -> Optional[Plan]:
        for data in self._load()["plans"].values():
            if _identity_matches(data, vehicle_type, name):
                return Plan.from_dict(data)
        return None

    def list_plans(self, vehicle_type: Optional[str] = None, active_only: bool = False) -> List[Plan]:
        plans = [Plan.from_dict(d) for d in self._load()["plans"].values()]
        if vehicle_type:
            plans = [p for p in plans if (p.vehicle_type or "").lower() == vehicle_type.lower()]
        if active_only:
            plans = [p for p in plans if p.is_active]
        return sorted(plans, key=lambda p: ((p.vehicle_type or "").lower(), p.name.lower()))

    # --- Matrix editing ----------------------------------------------------------------
    def set_matrix_cell(self, plan_id: str, activity_id: str, interval_id: str, applies: bool) -> CellDiff:
        with _lock:
            store = self._load()
            plan = self._get_locked(store, plan_id)
            diff = apply_edit(plan, activity_id, interval_id, applies)
            if diff.changed:
                store["plans"][plan_id] = plan.to_dict()
                self._write(store)
        return diff

    # --- Lifecycle -------------------------------------------------------------------------
    def _set_active(self, plan_id: str, active: bool) -> Plan:
        with _lock:
            store = self._load()
            plan = self._get_locked(store, plan_id)
            plan.is_active = active
            store["plans"][plan_id] = plan.to_dict()
            self._write(store)
        logger.info(f"Plan {plan_id} {'activated' if active else 'deactivated'}")
        return plan

    def activate(self, plan_id: str) -> Plan:
        return self._set_active(plan_id, True)

    def deactivate(self, plan_id: str) -> Plan:
        return self._set_active(plan_id, False)

    def update_metadata(self, plan_id: str, name: Optional[str] = None, vehicle_type: Optional[str] = None,
                        description: Optional[str] = None, is_active: Optional[bool] = None) -> Plan:
        """Change a plan's name, vehicle type, description or active flag.

        Intervals, activities and the matrix are left as they are. Renaming onto the
        identity of another plan is refused.
        """
        with _lock:
            store = self._load()
            plan = self._get_locked(store, plan_id)
            if name is not None:
                if not name.strip():
                    raise PlanStateError("Plan name cannot be blank")
                plan.name = name.strip()
            if vehicle_type is not None:
                plan.vehicle_type = vehicle_type.strip()
            if description is not None:
                plan.description = description
            if is_active is not None:
                plan.is_active = is_active
            clash = next((pid for pid, d in store["plans"].items()
                          if pid != plan_id and _identity_matches(d, plan.vehicle_type, plan.name)), None)
            if clash is not None:
                raise PlanStateError(f"A plan named '{plan.name}' already exists for "
                                     f"{plan.vehicle_type or 'all vehicles'}")
            store["plans"][plan_id] = plan.to_dict()
            self._write(store)
        logger.info(f"Plan {plan_id} metadata updated ({plan.vehicle_type} / {plan.name})")
        return plan

    def duplicate(self, plan_id: str, new_name: Optional[str] = None) -> Plan:
        """Copy a plan (inactive) with fresh interval/activity ids."""
        with _lock:
            store = self._load()
            original = self._get_locked(store, plan_id)
            name = (new_name or "").strip() or f"{original.name} (Copy)"
            if any(_identity_matches(d, original.vehicle_type, name) for d in store["plans"].values()):
                raise PlanStateError(f"A plan named '{name}' already exists for {original.vehicle_type or 'all vehicles'}")
            copy = original.clone(new_id(), name)
            store["plans"][copy.id] = copy.to_dict()
            self._write(store)
        logger.info(f"Plan {plan_id} duplicated as {copy.id} ({name})")
        return copy

    def delete(self, plan_id: str) -> None:
        with _lock:
            store = self._load()
            plan = self._get_locked(store, plan_id)
            if plan.is_active:
                raise PlanStateError("Cannot delete an active plan. Deactivate it first.")
            del store["plans"][plan_id]
            self._write(store)
        logger.info(f"Plan {plan_id} deleted")
