"""ORM model for the audit record of one scan run."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, func

from firmwatch.models.base import Base


class ScanResult(Base):
    """Written exactly once per scan run, whether it succeeded or failed."""

    __tablename__ = "scan_results"

    id = Column(Integer, primary_key=True, autoincrement=True)
    started_at = Column(DateTime(timezone=True), nullable=False, index=True)
    posts_scanned = Column(Integer, nullable=False, default=0)
    new_posts = Column(Integer, nullable=False, default=0)
    issues_found = Column(Integer, nullable=False, default=0)
    duration_ms = Column(Integer, nullable=False, default=0)
    success = Column(Boolean, nullable=False, default=True)
    error_message = Column(Text, nullable=True)
    trigger = Column(String(16), nullable=False, default="manual")
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
