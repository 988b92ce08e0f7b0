"""Web-facing observers for maintenance plan events.

Subscribes to the GLOBAL_EVENT_BUS for plan.imported, plan.import_failed and
plan.matrix_edited, and keeps a small in-memory ring buffer of recent events that the
web layer polls (GET /api/events?since=<cursor>) to show notifications.

Design:
  * Each event gets an auto-increment integer id (cursor); clients ask only for newer ones.
  * A Lock guards the buffer (per-process; fine for non-critical notifications).
  * MAX_EVENTS caps memory.
"""
from __future__ import annotations
from typing import List, Dict, Any
from threading import Lock
from datetime import datetime, timezone

from .Event_Bus import (
    GLOBAL_EVENT_BUS, PLAN_IMPORTED, PLAN_IMPORT_FAILED, PLAN_MATRIX_EDITED
)

_lock = Lock()
_events: List[Dict[str, Any]] = []
_next_id = 1
MAX_EVENTS = 300
_started = False


def _record(event_name: str, payload: Any):  # signature expected by EventBus
    global _next_id
    with _lock:
        evt = {
            'id': _next_id,
            'type': event_name,
            'ts': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
        }
        if isinstance(payload, dict):
            for k in ('plan_id', 'vehicle_type', 'name'):
                if k in payload:
                    evt[k] = payload[k]
            summary = payload.get('summary')
            if isinstance(summary, dict):
                evt['intervals'] = summary.get('intervalsCount')
                evt['activities'] = summary.get('activitiesCount')
                evt['warnings'] = len(summary.get('warnings') or [])
            if 'error' in payload:
                evt['error'] = payload['error']
            if 'diff' in payload:
                evt['diff'] = payload['diff']
        _events.append(evt)
        _next_id += 1
        # Trim buffer
        if len(_events) > MAX_EVENTS:
            del _events[: len(_events) - MAX_EVENTS]


_OBSERVED = (PLAN_IMPORTED, PLAN_IMPORT_FAILED, PLAN_MATRIX_EDITED)


def start():
    """Idempotent start: subscribe observers once."""
    global _started
    if _started:
        return
    for event_name in _OBSERVED:
        GLOBAL_EVENT_BUS.subscribe(event_name, _record)
    _started = True


def stop():
    """Unsubscribe the observers; buffered events stay readable."""
    global _started
    for event_name in _OBSERVED:
        GLOBAL_EVENT_BUS.unsubscribe(event_name, _record)
    _started = False


def get_events(since: int | None = None) -> Dict[str, Any]:
    """Return events newer than 'since' (exclusive), plus next_cursor for the next poll."""
    with _lock:
        if since is None:
            data = list(_events)
        else:
            data = [e for e in _events if e['id'] > since]
        next_cursor = _events[-1]['id'] if _events else since or 0
    return {'events': data, 'next_cursor': next_cursor}


__all__ = ['start', 'stop', 'get_events']
