"""Risk aggregation: recompute per-(equipment, firmware) risk from the trailing issue window.

The score is a policy heuristic, not a statistical model:

    risk_percentage = min(100, round(issue_count * 10 + avg_severity_score * 20))

with severity scores high=3, medium=2, low=1, rounded half up. Rows are
replaced in place (upsert) on every pass. Pairs with no issues left in the
window are not deleted; their last row stays until the pair reappears.
"""

import logging
import math
from datetime import datetime, timedelta, timezone

from sqlalchemy import case, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from firmwatch.models import FirmwareIssue, RiskAssessment
from firmwatch.schemas.issues import SeverityLevel
from firmwatch.services.store import StoreError, dialect_insert

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 30

SEVERITY_SCORES: dict[str, int] = {"high": 3, "medium": 2, "low": 1}
# Anything not high/medium scores as low.
DEFAULT_SEVERITY_SCORE = 1

ISSUE_COUNT_WEIGHT = 10
SEVERITY_SCORE_WEIGHT = 20
MAX_RISK_PERCENTAGE = 100

HIGH_RISK_THRESHOLD = 70  # percentage > this → high
MEDIUM_RISK_THRESHOLD = 40  # percentage > this → medium


def compute_risk_percentage(issue_count: int, avg_severity_score: float) -> int:
    """Linear heuristic capped at 100; .5 rounds up."""
    raw = issue_count * ISSUE_COUNT_WEIGHT + avg_severity_score * SEVERITY_SCORE_WEIGHT
    return min(MAX_RISK_PERCENTAGE, math.floor(raw + 0.5))


def severity_bucket(risk_percentage: int) -> SeverityLevel:
    """Map a risk percentage to high (> 70), medium (> 40) or low."""
    if risk_percentage > HIGH_RISK_THRESHOLD:
        return "high"
    if risk_percentage > MEDIUM_RISK_THRESHOLD:
        return "medium"
    return "low"


def _severity_score_expr():
    return case(
        (FirmwareIssue.severity == "high", SEVERITY_SCORES["high"]),
        (FirmwareIssue.severity == "medium", SEVERITY_SCORES["medium"]),
        else_=DEFAULT_SEVERITY_SCORE,
    )


def update_risk_assessments(
    session: Session,
    now: datetime | None = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> int:
    """
    Recompute and upsert every RiskAssessment from issues created in the trailing window.

    Commits on success and returns the number of rows written. Raises StoreError
    (after rolling back) when the database is unavailable.
    """
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=window_days)

    query = (
        select(
            FirmwareIssue.equipment_type,
            FirmwareIssue.firmware_version,
            func.count(FirmwareIssue.id).label("issue_count"),
            func.avg(_severity_score_expr()).label("avg_severity"),
        )
        .where(FirmwareIssue.created_at >= cutoff)
        .group_by(FirmwareIssue.equipment_type, FirmwareIssue.firmware_version)
    )

    written = 0
    try:
        for row in session.execute(query).all():
            issue_count = int(row.issue_count)
            # Postgres AVG returns Decimal.
            avg_severity = float(row.avg_severity)
            percentage = compute_risk_percentage(issue_count, avg_severity)
            stmt = dialect_insert(session, RiskAssessment).values(
                equipment_type=row.equipment_type,
                firmware_version=row.firmware_version,
                risk_percentage=percentage,
                severity=severity_bucket(percentage),
                issue_count=issue_count,
                last_updated=now,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[
                    RiskAssessment.equipment_type,
                    RiskAssessment.firmware_version,
                ],
                set_={
                    "risk_percentage": stmt.excluded.risk_percentage,
                    "severity": stmt.excluded.severity,
                    "issue_count": stmt.excluded.issue_count,
                    "last_updated": stmt.excluded.last_updated,
                },
            )
            session.execute(stmt)
            written += 1
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise StoreError("Failed to update risk assessments", cause=e) from e

    logger.info(
        "Risk assessments updated",
        extra={"assessment_count": written, "window_days": window_days},
    )
    return written
