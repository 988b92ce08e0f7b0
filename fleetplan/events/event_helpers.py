"""Event helper utilities.

Helpers for publishing maintenance plan events on the global event bus.

Quick import:
    from fleetplan.events.event_helpers import (
        publish_plan_imported, publish_import_failed, publish_matrix_edited
    )
"""
from __future__ import annotations
from typing import Any, Dict
from .Event_Bus import (
    publish,
    PLAN_IMPORTED, PLAN_IMPORT_FAILED, PLAN_MATRIX_EDITED,
)

__all__ = [
    'publish_plan_imported', 'publish_import_failed', 'publish_matrix_edited',
    'PLAN_IMPORTED', 'PLAN_IMPORT_FAILED', 'PLAN_MATRIX_EDITED',
]


def publish_plan_imported(plan_id: str, vehicle_type: str, name: str, summary: Dict[str, Any]):
    """Publish a plan.imported event."""
    publish(PLAN_IMPORTED, {
        'plan_id': plan_id,
        'vehicle_type': vehicle_type,
        'name': name,
        'summary': summary,
    })


def publish_import_failed(vehicle_type: str, error: Dict[str, Any]):
    """Publish a plan.import_failed event (error as returned by ScheduleError.to_dict)."""
    publish(PLAN_IMPORT_FAILED, {
        'vehicle_type': vehicle_type,
        'error': error,
    })


def publish_matrix_edited(plan_id: str, diff: Dict[str, Any]):
    publish(PLAN_MATRIX_EDITED, {
        'plan_id': plan_id,
        'diff': diff,
    })
