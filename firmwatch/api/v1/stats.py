"""Summary statistics over posts, issues, risk assessments and scan runs."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from firmwatch.core.database import get_db
from firmwatch.models import FirmwareIssue, Post, RiskAssessment, ScanResult
from firmwatch.schemas.scan import ScanResultResponse
from firmwatch.schemas.stats import (
    CountBucket,
    StatsActivity,
    StatsDistribution,
    StatsResponse,
    StatsTotals,
)

router = APIRouter()

SEVERITY_ORDER = ("high", "medium", "low")


def _severity_buckets(rows: list[tuple[str, int]]) -> list[CountBucket]:
    counts = dict(rows)
    return [CountBucket(key=s, count=counts[s]) for s in SEVERITY_ORDER if s in counts]


@router.get("", response_model=StatsResponse)
def get_stats(db: Annotated[Session, Depends(get_db)]) -> StatsResponse:
    """Totals, severity and equipment distributions, and scan success rate."""
    totals = StatsTotals(
        posts=db.query(func.count(Post.id)).scalar(),
        issues=db.query(func.count(FirmwareIssue.id)).scalar(),
        assessments=db.query(func.count(RiskAssessment.id)).scalar(),
        scans=db.query(func.count(ScanResult.id)).scalar(),
    )

    issues_by_severity = (
        db.query(FirmwareIssue.severity, func.count(FirmwareIssue.id))
        .group_by(FirmwareIssue.severity)
        .all()
    )
    assessments_by_risk = (
        db.query(RiskAssessment.severity, func.count(RiskAssessment.id))
        .group_by(RiskAssessment.severity)
        .all()
    )
    issue_count = func.count(FirmwareIssue.id)
    issues_by_equipment = (
        db.query(FirmwareIssue.equipment_type, issue_count)
        .group_by(FirmwareIssue.equipment_type)
        .order_by(issue_count.desc(), FirmwareIssue.equipment_type)
        .all()
    )

    successful = (
        db.query(func.count(ScanResult.id)).filter(ScanResult.success.is_(True)).scalar()
    )
    failed = totals.scans - successful
    latest = (
        db.query(ScanResult)
        .order_by(ScanResult.started_at.desc(), ScanResult.id.desc())
        .first()
    )

    return StatsResponse(
        totals=totals,
        distribution=StatsDistribution(
            issues_by_severity=_severity_buckets(issues_by_severity),
            assessments_by_risk=_severity_buckets(assessments_by_risk),
            issues_by_equipment=[
                CountBucket(key=k, count=c) for k, c in issues_by_equipment
            ],
        ),
        activity=StatsActivity(
            successful_scans=successful,
            failed_scans=failed,
            success_rate=round(successful * 100 / totals.scans, 2) if totals.scans else None,
            latest_scan=ScanResultResponse.model_validate(latest) if latest else None,
        ),
    )
