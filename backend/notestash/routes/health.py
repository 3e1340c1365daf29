"""
NoteStash Backend: Health Check Route
======================================

What:  Liveness/readiness probe for Docker and load balancers.
How:   Runs SELECT 1 through the store, then reads the global user and note
       counts. The service is only healthy when the store answers.

    healthy:   store reachable (HTTP 200)
    unhealthy: store unreachable (HTTP 503, stop routing traffic here)
"""

import logging
import time

from fastapi import APIRouter, Depends, Response

from notestash import __version__
from notestash.exceptions import NoteStashError
from notestash.routes.deps import get_store
from notestash.schemas.common import HealthResponse
from notestash.services.stats_service import stats_service
from notestash.store import KeyValueStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(
    response: Response,
    store: KeyValueStore = Depends(get_store),
) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"
    users = notes = None

    try:
        await store.ping()
        counts = await stats_service.get_global_stats(store)
        users, notes = counts.users, counts.notes
    except NoteStashError as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = 503
        logger.warning("Health check: store unreachable: %s", e.message)

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        users=users,
        notes=notes,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
