"""ORM model for classified firmware issues."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)

from firmwatch.models.base import Base


class FirmwareIssue(Base):
    """
    One classified finding extracted from a post.

    (post_id, issue_type, firmware_version) is unique so reclassifying an
    unchanged post does not add rows and keeps the original created_at.
    """

    __tablename__ = "firmware_issues"
    __table_args__ = (
        CheckConstraint(
            "severity IN ('low', 'medium', 'high')",
            name="ck_firmware_issues_severity",
        ),
        UniqueConstraint(
            "post_id",
            "issue_type",
            "firmware_version",
            name="uq_firmware_issues_post_type_version",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(
        String(32),
        ForeignKey("posts.id"),
        nullable=False,
        index=True,
    )
    equipment_type = Column(String(50), nullable=False, index=True)
    firmware_version = Column(String(50), nullable=False, default="unknown")
    issue_type = Column(String(50), nullable=False)
    severity = Column(String(10), nullable=False, index=True)
    description = Column(Text, nullable=False)
    extracted_from = Column(Text, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )
