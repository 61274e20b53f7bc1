"""
Behavior Tracker Backend: Health Check Route
============================================

What:  Liveness probe for load balancers and container orchestrators.
How:   Runs a trivial query through the injected DatabaseClient.

Responses:
    200 {status: "ok",    database: "connected",    time, version}
    503 {status: "error", database: "disconnected", time, version, detail?}

`detail` (the driver's message) is omitted in production.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from tracker import __version__
from tracker.config import settings
from tracker.database import DatabaseClient, get_db_client
from tracker.exceptions import DatabaseError
from tracker.schemas.responses import HealthResponse
from tracker.timestamps import to_iso, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    response_model_exclude_none=True,
    responses={503: {"model": HealthResponse, "description": "Database unreachable"}},
)
async def health_check(db: DatabaseClient = Depends(get_db_client)):
    try:
        await db.ping()
    except DatabaseError as exc:
        logger.warning("Health check: database unreachable: %s", exc.context.get("detail"))
        body = HealthResponse(
            status="error",
            database="disconnected",
            time=to_iso(utcnow()),
            version=__version__,
            detail=None if settings.is_production else exc.context.get("detail"),
        )
        return JSONResponse(status_code=503, content=body.model_dump(exclude_none=True))

    return HealthResponse(
        status="ok",
        database="connected",
        time=to_iso(utcnow()),
        version=__version__,
    )
