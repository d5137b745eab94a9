"""Pydantic schemas for classified firmware issues."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

EquipmentType = Literal[
    "router",
    "switch",
    "access-point",
    "security-gateway",
    "camera",
    "nvr",
    "unresolved",
]

IssueType = Literal[
    "connectivity",
    "performance",
    "stability",
    "security",
    "configuration",
    "hardware",
    "other",
]

SeverityLevel = Literal["low", "medium", "high"]

SEVERITY_VALUES: frozenset[str] = frozenset({"low", "medium", "high"})

UNKNOWN_FIRMWARE_VERSION = "unknown"


class ClassifiedIssue(BaseModel):
    """One finding produced by the classifier for a single post and issue category."""

    model_config = {"frozen": True}

    post_id: str = Field(..., min_length=1, description="Identifier of the owning post.")
    equipment_type: EquipmentType
    firmware_version: str = Field(
        default=UNKNOWN_FIRMWARE_VERSION,
        min_length=1,
        description="Extracted N.N.N version or 'unknown'.",
    )
    issue_type: IssueType
    severity: SeverityLevel
    description: str = Field(..., description="Body excerpt (max 200 chars + '...') or the title.")
    extracted_from: str = Field(..., description="Literal text the classifier matched for this category.")


class IssueResponse(BaseModel):
    """Persisted issue joined with a few fields of its post."""

    model_config = {"from_attributes": True}

    id: int
    post_id: str
    equipment_type: str
    firmware_version: str
    issue_type: str
    severity: str
    description: str
    extracted_from: str
    created_at: datetime
    post_title: str | None = None
    post_permalink: str | None = None


class Pagination(BaseModel):
    """Page metadata for list responses."""

    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)


class IssueListResponse(BaseModel):
    """Response body for GET /issues."""

    issues: list[IssueResponse] = Field(default_factory=list)
    pagination: Pagination
