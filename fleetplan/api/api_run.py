from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging

from fleetplan.domain.errors import PlanNotFoundError, PlanStateError, ScheduleError
from fleetplan.events.web_observers import start as start_event_observers, stop as stop_event_observers

# Routers
from fleetplan.api.routes import events, matrix, plans

# Logging
logger = logging.getLogger("fleetplan_app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Register event bus subscribers for web notifications while the app runs."""
    start_event_observers()
    logger.info("Web observers for plan events started")
    yield
    stop_event_observers()


# Initialize FastAPI app
app = FastAPI(title="Fleet Maintenance Plan API", lifespan=lifespan)

# Include routers
app.include_router(plans.router)
app.include_router(matrix.router)
app.include_router(events.router)


@app.exception_handler(ScheduleError)
async def schedule_error_handler(request: Request, exc: ScheduleError):
    """Fatal import/edit errors -> client error with message and row/column context."""
    if isinstance(exc, PlanNotFoundError):
        status = 404
    elif isinstance(exc, PlanStateError):
        status = 409
    else:
        status = 400
    logger.warning("%s %s -> %d %s", request.method, request.url.path, status, exc)
    return JSONResponse(status_code=status, content=exc.to_dict())


@app.get("/health")
def health():
    return {"status": "ok"}
