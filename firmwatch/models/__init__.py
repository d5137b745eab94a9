"""SQLAlchemy ORM models."""

from firmwatch.models.base import Base
from firmwatch.models.issue import FirmwareIssue
from firmwatch.models.post import Post
from firmwatch.models.risk_assessment import RiskAssessment
from firmwatch.models.scan_result import ScanResult

__all__ = ["Base", "FirmwareIssue", "Post", "RiskAssessment", "ScanResult"]
