"""Pydantic schemas for scan runs: the in-memory outcome and persisted ScanResult rows."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

ScanTrigger = Literal["scheduled", "manual"]


class ScanOutcome(BaseModel):
    """Result of one orchestrator run; mirrors the ScanResult row it produces."""

    started_at: datetime
    posts_scanned: int = Field(default=0, ge=0, description="Posts fetched from the source.")
    new_posts: int = Field(default=0, ge=0, description="Posts seen for the first time.")
    skipped_posts: int = Field(default=0, ge=0, description="Posts that could not be stored.")
    issues_found: int = Field(default=0, ge=0, description="Issues produced by the classifier.")
    skipped_issues: int = Field(default=0, ge=0, description="Issues that could not be stored.")
    assessments_updated: int = Field(default=0, ge=0)
    duration_ms: int = Field(default=0, ge=0)
    success: bool = True
    error_message: str | None = None
    trigger: ScanTrigger = "manual"
    scan_id: int | None = Field(default=None, description="Id of the recorded ScanResult, if recorded.")


class ScanResultResponse(BaseModel):
    """One persisted ScanResult row."""

    model_config = {"from_attributes": True}

    id: int
    started_at: datetime
    posts_scanned: int
    new_posts: int
    issues_found: int
    duration_ms: int
    success: bool
    error_message: str | None = None
    trigger: str


class ScanHistoryResponse(BaseModel):
    """Response body for GET /scan/history."""

    scans: list[ScanResultResponse] = Field(default_factory=list)
    total: int = Field(..., ge=0)
    limit: int = Field(..., ge=1)
    offset: int = Field(..., ge=0)


class ScanQueuedResponse(BaseModel):
    """Response body when a scan is queued to run in the background."""

    queued: Literal[True] = True
    message: str = "Scan queued"
