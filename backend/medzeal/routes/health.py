"""
MedZeal Backend: Health Check Route
====================================

Status:
    healthy    store reachable, no subscription errored, mail circuit closed
    degraded   store reachable but a subscription errored or the mail circuit is not closed
    unhealthy  store unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from medzeal import __version__
from medzeal.database import RealtimeStore, get_store
from medzeal.schemas.common import HealthResponse
from medzeal.services import smtp_service
from medzeal.services.subscriptions import ERROR, live_snapshots

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(store: RealtimeStore = Depends(get_store)):
    database = "connected"
    overall = "healthy"

    try:
        # Shallow read of the root: key names only, no payload
        await store.get("", shallow=True)
    except Exception as e:
        database = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: store unreachable: %s", e)

    subscriptions = live_snapshots.statuses()
    mail = smtp_service.mail_service.circuit_state()
    if overall == "healthy" and (ERROR in subscriptions.values() or mail != "closed"):
        overall = "degraded"

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=database,
        mail=mail,
        subscriptions=subscriptions,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    return JSONResponse(status_code=503 if overall == "unhealthy" else 200, content=body.model_dump())
