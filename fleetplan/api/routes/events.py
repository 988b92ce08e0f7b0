from fastapi import APIRouter, Query
from typing import Optional

from fleetplan.events.web_observers import get_events

router = APIRouter()


@router.get("/api/events")
def recent_events(since: Optional[int] = Query(default=None)):
    """Plan notifications newer than the 'since' cursor."""
    return get_events(since)
