"""Pydantic schemas for the summary statistics endpoint."""

from pydantic import BaseModel, Field

from firmwatch.schemas.scan import ScanResultResponse


class StatsTotals(BaseModel):
    """Row counts of the four pipeline tables."""

    posts: int = Field(..., ge=0)
    issues: int = Field(..., ge=0)
    assessments: int = Field(..., ge=0)
    scans: int = Field(..., ge=0)


class CountBucket(BaseModel):
    """One group of a GROUP BY count."""

    key: str
    count: int = Field(..., ge=0)


class StatsDistribution(BaseModel):
    issues_by_severity: list[CountBucket] = Field(default_factory=list)
    assessments_by_risk: list[CountBucket] = Field(default_factory=list)
    issues_by_equipment: list[CountBucket] = Field(default_factory=list)


class StatsActivity(BaseModel):
    successful_scans: int = Field(..., ge=0)
    failed_scans: int = Field(..., ge=0)
    success_rate: float | None = Field(
        default=None,
        ge=0,
        le=100,
        description="Percentage of recorded scans that succeeded; null when no scans exist.",
    )
    latest_scan: ScanResultResponse | None = None


class StatsResponse(BaseModel):
    """Response body for GET /stats."""

    totals: StatsTotals
    distribution: StatsDistribution
    activity: StatsActivity
