from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from pydantic import ValidationError
from typing import Optional
import logging

from fleetplan.domain.Plan import Plan
from fleetplan.domain.errors import ScheduleError, UnreadableWorkbookError
from fleetplan.events.event_helpers import publish_import_failed, publish_plan_imported
from fleetplan.infra.Plan_Repository import PlanRepository
from fleetplan.infra.grid_reader import load_grid
from fleetplan.infra.paths import BACKUP_DIR, PLAN_STORE_FILE
from fleetplan.logic.importing.pipeline import import_schedule
from fleetplan.logic.importing.plan_builder import ActivitySpec, IntervalSpec, build_plan
from fleetplan.logic.scheduling.next_maintenance import compute_next_maintenance
from fleetplan.utilities.backup import BackupManager
from fleetplan.utilities.config import BACKUP_ON_IMPORT, load_import_settings
from fleetplan.utilities.validators import (
    DuplicatePlanInput, ImportInput, NextMaintenanceQuery, PlanCreateInput, PlanUpdateInput,
)

router = APIRouter(prefix="/api/maintenance/plans", tags=["maintenance-plans"])
logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = (".xlsx", ".xlsm")


def get_plan_repository() -> PlanRepository:
    backups = BackupManager(PLAN_STORE_FILE, BACKUP_DIR) if BACKUP_ON_IMPORT else None
    return PlanRepository(PLAN_STORE_FILE, backup_manager=backups)


def get_import_settings():
    return load_import_settings()


def plan_summary(plan: Plan) -> dict:
    return {
        "id": plan.id,
        "name": plan.name,
        "vehicle_type": plan.vehicle_type,
        "description": plan.description,
        "is_active": plan.is_active,
        "intervals_count": len(plan.intervals),
        "activities_count": len(plan.activities),
        "categories": plan.categories(),
    }


def _validation_error(e: ValidationError) -> HTTPException:
    detail = [{"loc": list(err.get("loc", ())), "msg": err.get("msg", "")} for err in e.errors()]
    return HTTPException(status_code=422, detail=detail)


# -------------------- Import --------------------
@router.post("/import")
async def import_plan(file: UploadFile = File(...),
                      vehicle_type: str = Form(...),
                      name: Optional[str] = Form(None),
                      description: str = Form(""),
                      repo: PlanRepository = Depends(get_plan_repository),
                      settings=Depends(get_import_settings)):
    try:
        params = ImportInput(vehicle_type=vehicle_type, name=name, description=description)
    except ValidationError as e:
        raise _validation_error(e)

    try:
        if not (file.filename or "").lower().endswith(ALLOWED_EXTENSIONS):
            raise UnreadableWorkbookError(f"Only {', '.join(ALLOWED_EXTENSIONS)} workbooks can be imported")
        content = await file.read()
        if not content:
            raise UnreadableWorkbookError("The uploaded file is empty")
        grid = load_grid(content, settings)
        result = import_schedule(grid, params.vehicle_type, params.plan_name(), settings, params.description)
    except ScheduleError as e:
        logger.warning("Import of '%s' for %s failed: %s", file.filename, params.vehicle_type, e)
        publish_import_failed(params.vehicle_type, e.to_dict())
        raise

    # Single persistence call for the whole revision
    plan_id = repo.upsert(result.plan, params.vehicle_type, params.plan_name())
    summary = result.summary()
    publish_plan_imported(plan_id, params.vehicle_type, params.plan_name(), summary)
    logger.info("Imported '%s' as plan %s: %s", file.filename, plan_id, summary)
    return {"planId": plan_id, **summary}


# -------------------- CRUD / lifecycle --------------------
@router.get("")
def list_plans(vehicle_type: Optional[str] = Query(default=None),
               active_only: bool = Query(default=False),
               repo: PlanRepository = Depends(get_plan_repository)):
    plans = repo.list_plans(vehicle_type=vehicle_type, active_only=active_only)
    return {"count": len(plans), "plans": [plan_summary(p) for p in plans]}


@router.post("")
def create_plan(payload: PlanCreateInput, repo: PlanRepository = Depends(get_plan_repository)):
    """Create (or replace, by vehicle type and name) a plan from a JSON definition."""
    intervals = [IntervalSpec(i.hours, i.kilometers) for i in payload.intervals]
    activities = [ActivitySpec(a.code, a.description, a.category) for a in payload.activities]
    applies_at = [(m.activity_code, m.interval) for m in payload.matrix if m.applies]
    try:
        result = build_plan(intervals, activities, applies_at, payload.vehicle_type, payload.plan_name(),
                            payload.description, payload.category_labels)
    except ScheduleError as e:
        logger.warning("Manual plan for %s rejected: %s", payload.vehicle_type, e)
        publish_import_failed(payload.vehicle_type, e.to_dict())
        raise

    plan_id = repo.upsert(result.plan, payload.vehicle_type, payload.plan_name())
    summary = result.summary()
    publish_plan_imported(plan_id, payload.vehicle_type, payload.plan_name(), summary)
    return {"planId": plan_id, **summary}


@router.patch("/{plan_id}")
def update_plan(plan_id: str, payload: PlanUpdateInput, repo: PlanRepository = Depends(get_plan_repository)):
    plan = repo.update_metadata(plan_id, **payload.model_dump(exclude_unset=True))
    return plan_summary(plan)


@router.get("/{plan_id}")
def get_plan(plan_id: str, repo: PlanRepository = Depends(get_plan_repository)):
    return repo.get(plan_id).to_dict()


@router.delete("/{plan_id}")
def delete_plan(plan_id: str, repo: PlanRepository = Depends(get_plan_repository)):
    repo.delete(plan_id)
    return {"status": "deleted", "id": plan_id}


@router.post("/{plan_id}/activate")
def activate_plan(plan_id: str, repo: PlanRepository = Depends(get_plan_repository)):
    return plan_summary(repo.activate(plan_id))


@router.post("/{plan_id}/deactivate")
def deactivate_plan(plan_id: str, repo: PlanRepository = Depends(get_plan_repository)):
    return plan_summary(repo.deactivate(plan_id))


@router.post("/{plan_id}/duplicate")
def duplicate_plan(plan_id: str, payload: Optional[DuplicatePlanInput] = None,
                   repo: PlanRepository = Depends(get_plan_repository)):
    copy = repo.duplicate(plan_id, payload.name if payload else None)
    return plan_summary(copy)


@router.get("/{plan_id}/next-maintenance")
def next_maintenance(plan_id: str,
                     odometer: float = Query(...),
                     hourmeter: float = Query(...),
                     last_odometer: float = Query(default=0),
                     last_hourmeter: float = Query(default=0),
                     repo: PlanRepository = Depends(get_plan_repository)):
    try:
        q = NextMaintenanceQuery(odometer=odometer, hourmeter=hourmeter,
                                 last_odometer=last_odometer, last_hourmeter=last_hourmeter)
    except ValidationError as e:
        raise _validation_error(e)
    plan = repo.get(plan_id)
    return compute_next_maintenance(plan, q.odometer, q.hourmeter, q.last_odometer, q.last_hourmeter)
