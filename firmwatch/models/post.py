"""ORM model for ingested community posts."""

from sqlalchemy import BigInteger, Boolean, Column, DateTime, Integer, String, Text, func

from firmwatch.models.base import Base


class Post(Base):
    """
    One upstream post, keyed by its upstream identifier.

    Re-ingestion refreshes score and num_comments only; created_utc and the
    text fields are written once on first sighting.
    """

    __tablename__ = "posts"

    id = Column(String(32), primary_key=True)
    title = Column(Text, nullable=False)
    body = Column(Text, nullable=False, default="")
    author = Column(String(100), nullable=True)
    created_utc = Column(BigInteger, nullable=False, index=True)
    score = Column(Integer, nullable=False, default=0)
    num_comments = Column(Integer, nullable=False, default=0)
    url = Column(Text, nullable=True)
    permalink = Column(Text, nullable=True)
    subreddit = Column(String(50), nullable=False, default="UNIFI")
    fetched_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    processed = Column(Boolean, nullable=False, default=False, index=True)
