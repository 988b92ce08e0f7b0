from fastapi import APIRouter, Depends, Query
from typing import Optional

from fleetplan.api.routes.plans import get_plan_repository
from fleetplan.events.event_helpers import publish_matrix_edited
from fleetplan.infra.Plan_Repository import PlanRepository
from fleetplan.logic.matrix.matrix_view import to_dense_grid
from fleetplan.utilities.validators import MatrixEditInput

router = APIRouter(prefix="/api/maintenance/plans", tags=["maintenance-matrix"])


@router.get("/{plan_id}/matrix")
def get_matrix(plan_id: str,
               category: Optional[str] = Query(default=None),
               search: Optional[str] = Query(default=None),
               repo: PlanRepository = Depends(get_plan_repository)):
    """Dense, category-grouped grid for the matrix editor."""
    plan = repo.get(plan_id)
    return to_dense_grid(plan, category=category, search=search).to_dict()


@router.patch("/{plan_id}/matrix")
def edit_matrix_cell(plan_id: str, edit: MatrixEditInput,
                     repo: PlanRepository = Depends(get_plan_repository)):
    """Toggle one cell; returns {activityId, intervalId, oldValue, newValue}."""
    diff = repo.set_matrix_cell(plan_id, edit.activity_id, edit.interval_id, edit.applies)
    if diff.changed:
        publish_matrix_edited(plan_id, diff.to_dict())
    return diff.to_dict()
