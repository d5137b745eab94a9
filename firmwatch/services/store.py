"""Ingestion store: idempotent writes of posts, issues and scan results.

Each write runs in its own short transaction so one failing row never rolls
back the rest of a batch. Failures surface as StoreError; RowConflictError marks
the per-row, recoverable case (integrity conflicts and similar).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from firmwatch.models import FirmwareIssue, Post, ScanResult
from firmwatch.schemas.issues import ClassifiedIssue
from firmwatch.schemas.posts import SourcePost
from firmwatch.schemas.scan import ScanOutcome

logger = logging.getLogger(__name__)

# Fields refreshed when an already-known post is seen again.
POST_MUTABLE_FIELDS = ("score", "num_comments")


class StoreError(Exception):
    """Raised when the store cannot complete a write or read."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class RowConflictError(StoreError):
    """A single row could not be written (e.g. uniqueness race); the batch may continue."""


def dialect_insert(session: Session, table: Any) -> Any:
    """Return an INSERT construct supporting ON CONFLICT for the session's dialect."""
    name = session.get_bind().dialect.name
    if name == "postgresql":
        return postgresql.insert(table)
    if name == "sqlite":
        return sqlite.insert(table)
    raise StoreError(f"Upserts are not supported on dialect {name!r}")


class SqlStore:
    """SQLAlchemy-backed store for the four pipeline tables."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session; commit on success, roll back and re-raise on error."""
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def upsert_post(self, post: SourcePost) -> bool:
        """
        Insert a new post, or refresh score/num_comments and reset processed for a known one.

        Returns True when the identifier had not been stored before.
        Raises RowConflictError for integrity conflicts, StoreError otherwise.
        """
        values = post.model_dump()
        try:
            with self.session() as db:
                is_new = db.get(Post, post.id) is None
                stmt = dialect_insert(db, Post).values(**values, processed=False)
                stmt = stmt.on_conflict_do_update(
                    index_elements=[Post.id],
                    set_={
                        **{name: stmt.excluded[name] for name in POST_MUTABLE_FIELDS},
                        "processed": False,
                    },
                )
                db.execute(stmt)
        except IntegrityError as e:
            raise RowConflictError(f"Conflict storing post {post.id}", cause=e) from e
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to store post {post.id}", cause=e) from e
        return is_new

    def insert_issue(self, issue: ClassifiedIssue) -> bool:
        """
        Insert an issue unless an equivalent one (post, issue type, version) already exists.

        Returns True when a row was inserted. A missing parent post raises RowConflictError.
        """
        try:
            with self.session() as db:
                stmt = (
                    dialect_insert(db, FirmwareIssue)
                    .values(**issue.model_dump())
                    .on_conflict_do_nothing(
                        index_elements=[
                            FirmwareIssue.post_id,
                            FirmwareIssue.issue_type,
                            FirmwareIssue.firmware_version,
                        ]
                    )
                )
                result = db.execute(stmt)
                inserted = result.rowcount == 1
        except IntegrityError as e:
            raise RowConflictError(
                f"Conflict storing {issue.issue_type} issue for post {issue.post_id}",
                cause=e,
            ) from e
        except SQLAlchemyError as e:
            raise StoreError(
                f"Failed to store issue for post {issue.post_id}", cause=e
            ) from e
        return inserted

    def mark_processed(self, post_ids: list[str]) -> int:
        """Set processed=True for the given posts. Returns rows updated."""
        if not post_ids:
            return 0
        try:
            with self.session() as db:
                result = db.execute(
                    update(Post)
                    .where(Post.id.in_(post_ids))
                    .values(processed=True)
                )
                return result.rowcount
        except SQLAlchemyError as e:
            raise StoreError("Failed to mark posts processed", cause=e) from e

    def record_scan(self, outcome: ScanOutcome) -> int:
        """Persist one ScanResult row for a finished run and return its id."""
        row = ScanResult(
            started_at=outcome.started_at,
            posts_scanned=outcome.posts_scanned,
            new_posts=outcome.new_posts,
            issues_found=outcome.issues_found,
            duration_ms=outcome.duration_ms,
            success=outcome.success,
            error_message=outcome.error_message,
            trigger=outcome.trigger,
        )
        try:
            with self.session() as db:
                db.add(row)
                db.flush()
                return row.id
        except SQLAlchemyError as e:
            raise StoreError("Failed to record scan result", cause=e) from e
