"""Pydantic schemas for risk assessments."""

from datetime import datetime

from pydantic import BaseModel, Field

from firmwatch.schemas.issues import SeverityLevel


class RiskAssessmentResponse(BaseModel):
    """One persisted (equipment_type, firmware_version) risk aggregate."""

    model_config = {"from_attributes": True}

    id: int
    equipment_type: str
    firmware_version: str
    risk_percentage: int = Field(..., ge=0, le=100)
    severity: SeverityLevel
    issue_count: int = Field(..., ge=0)
    last_updated: datetime


class AssessmentListResponse(BaseModel):
    """Response body for GET /assessments."""

    assessments: list[RiskAssessmentResponse] = Field(default_factory=list)
    total: int = Field(..., ge=0)
    limit: int = Field(..., ge=1)
    offset: int = Field(..., ge=0)
