"""Risk assessment endpoints: read-only listing of per-(equipment, firmware) risk."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from firmwatch.core.database import get_db
from firmwatch.models import RiskAssessment
from firmwatch.schemas.assessments import AssessmentListResponse, RiskAssessmentResponse
from firmwatch.schemas.issues import SeverityLevel

router = APIRouter()

MAX_PAGE_LIMIT = 100


@router.get("", response_model=AssessmentListResponse)
def list_assessments(
    db: Annotated[Session, Depends(get_db)],
    severity: SeverityLevel | None = Query(default=None),
    equipment_type: str | None = Query(default=None),
    limit: int = Query(default=20, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(default=0, ge=0),
) -> AssessmentListResponse:
    """
    Return risk assessments ordered by risk percentage (highest first).

    Rows for pairs that left the trailing window are returned as last computed.
    """
    query = db.query(RiskAssessment)
    if severity:
        query = query.filter(RiskAssessment.severity == severity)
    if equipment_type:
        query = query.filter(RiskAssessment.equipment_type == equipment_type)
    total = query.count()
    rows = (
        query.order_by(
            RiskAssessment.risk_percentage.desc(),
            RiskAssessment.issue_count.desc(),
            RiskAssessment.id,
        )
        .offset(offset)
        .limit(limit)
        .all()
    )
    return AssessmentListResponse(
        assessments=[RiskAssessmentResponse.model_validate(r) for r in rows],
        total=total,
        limit=limit,
        offset=offset,
    )
