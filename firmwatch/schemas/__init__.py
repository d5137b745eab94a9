"""Pydantic request/response schemas."""

from firmwatch.schemas.assessments import AssessmentListResponse, RiskAssessmentResponse
from firmwatch.schemas.health import HealthResponse
from firmwatch.schemas.issues import (
    ClassifiedIssue,
    EquipmentType,
    IssueListResponse,
    IssueResponse,
    IssueType,
    SeverityLevel,
)
from firmwatch.schemas.posts import SourcePost
from firmwatch.schemas.scan import (
    ScanHistoryResponse,
    ScanOutcome,
    ScanQueuedResponse,
    ScanResultResponse,
)
from firmwatch.schemas.stats import StatsResponse

__all__ = [
    "AssessmentListResponse",
    "ClassifiedIssue",
    "EquipmentType",
    "HealthResponse",
    "IssueListResponse",
    "IssueResponse",
    "IssueType",
    "RiskAssessmentResponse",
    "ScanHistoryResponse",
    "ScanOutcome",
    "ScanQueuedResponse",
    "ScanResultResponse",
    "SeverityLevel",
    "SourcePost",
    "StatsResponse",
]
