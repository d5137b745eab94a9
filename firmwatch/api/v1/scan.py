"""Scan endpoints: on-demand trigger, latest status and history of scan runs."""

import logging
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy import func
from sqlalchemy.orm import Session

from firmwatch.core.database import get_db
from firmwatch.models import ScanResult
from firmwatch.scheduler import get_orchestrator
from firmwatch.schemas.scan import (
    ScanHistoryResponse,
    ScanOutcome,
    ScanQueuedResponse,
    ScanResultResponse,
)
from firmwatch.services.scan import ScanOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_HISTORY_LIMIT = 100


@router.post(
    "/trigger",
    response_model=ScanOutcome,
    responses={202: {"model": ScanQueuedResponse}, 502: {"model": ScanOutcome}},
)
def trigger_scan(
    background_tasks: BackgroundTasks,
    orchestrator: Annotated[ScanOrchestrator, Depends(get_orchestrator)],
    background: bool = Query(default=False, description="Queue the scan and return immediately."),
):
    """
    Run a scan now.

    By default the scan runs synchronously and the response carries the outcome
    recorded in the resulting ScanResult (502 when the run failed). With
    `background=true` the scan is queued and 202 is returned at once.
    """
    if background:
        background_tasks.add_task(orchestrator.run, "manual")
        logger.info("Manual scan queued")
        return JSONResponse(status_code=202, content=ScanQueuedResponse().model_dump())

    logger.info("Manual scan triggered")
    outcome = orchestrator.run(trigger="manual")
    if not outcome.success:
        return JSONResponse(status_code=502, content=outcome.model_dump(mode="json"))
    return outcome


@router.get("/status", response_model=ScanResultResponse)
def get_scan_status(db: Annotated[Session, Depends(get_db)]) -> ScanResultResponse:
    """Return the most recent ScanResult."""
    latest = (
        db.query(ScanResult)
        .order_by(ScanResult.started_at.desc(), ScanResult.id.desc())
        .first()
    )
    if latest is None:
        raise HTTPException(status_code=404, detail="No scans completed yet.")
    return ScanResultResponse.model_validate(latest)


@router.get("/history", response_model=ScanHistoryResponse)
def get_scan_history(
    db: Annotated[Session, Depends(get_db)],
    limit: int = Query(default=10, ge=1, le=MAX_HISTORY_LIMIT),
    offset: int = Query(default=0, ge=0),
) -> ScanHistoryResponse:
    """Return ScanResults, newest first."""
    rows = (
        db.query(ScanResult)
        .order_by(ScanResult.started_at.desc(), ScanResult.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    total = db.query(func.count(ScanResult.id)).scalar() or 0
    return ScanHistoryResponse(
        scans=[ScanResultResponse.model_validate(r) for r in rows],
        total=total,
        limit=limit,
        offset=offset,
    )
