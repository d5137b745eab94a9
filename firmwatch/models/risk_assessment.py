"""ORM model for per-(equipment, firmware) risk aggregates."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Integer,
    String,
    UniqueConstraint,
    func,
)

from firmwatch.models.base import Base


class RiskAssessment(Base):
    """Rolling risk score for one (equipment_type, firmware_version) pair."""

    __tablename__ = "risk_assessments"
    __table_args__ = (
        CheckConstraint(
            "risk_percentage >= 0 AND risk_percentage <= 100",
            name="ck_risk_assessments_percentage",
        ),
        UniqueConstraint(
            "equipment_type",
            "firmware_version",
            name="uq_risk_assessments_equipment_version",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    equipment_type = Column(String(50), nullable=False, index=True)
    firmware_version = Column(String(50), nullable=False)
    risk_percentage = Column(Integer, nullable=False)
    severity = Column(String(10), nullable=False)
    issue_count = Column(Integer, nullable=False, default=0)
    last_updated = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
