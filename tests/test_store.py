"""Tests for firmwatch.services.store: idempotent post upsert, issue dedup, scan records."""

import unittest
from datetime import datetime, timezone
from unittest.mock import MagicMock

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from firmwatch.models import FirmwareIssue, Post, ScanResult
from firmwatch.schemas.issues import ClassifiedIssue
from firmwatch.schemas.posts import SourcePost
from firmwatch.schemas.scan import ScanOutcome
from firmwatch.services.store import RowConflictError, SqlStore, StoreError
from db_helpers import sqlite_session_factory


def _post(post_id: str = "t3abc", **kwargs: object) -> SourcePost:
    """Build a minimal SourcePost for tests."""
    defaults = {
        "title": "UDM firmware 4.0.6 crash",
        "body": "",
        "author": "tester",
        "created_utc": 1_700_000_000,
        "score": 5,
        "num_comments": 2,
        "url": "https://example.com",
        "permalink": "/r/UNIFI/comments/t3abc/",
    }
    defaults.update(kwargs)
    return SourcePost(id=post_id, **defaults)


def _issue(post_id: str = "t3abc", **kwargs: object) -> ClassifiedIssue:
    """Build a minimal ClassifiedIssue for tests."""
    defaults = {
        "equipment_type": "router",
        "firmware_version": "4.0.6",
        "issue_type": "stability",
        "severity": "high",
        "description": "UDM firmware 4.0.6 crash",
        "extracted_from": "crash",
    }
    defaults.update(kwargs)
    return ClassifiedIssue(post_id=post_id, **defaults)


class TestUpsertPost(unittest.TestCase):
    """Re-ingesting an identifier updates mutable fields only."""

    def setUp(self) -> None:
        self.Session = sqlite_session_factory()
        self.store = SqlStore(self.Session)

    def test_first_sighting_is_new(self) -> None:
        self.assertTrue(self.store.upsert_post(_post()))
        with self.Session() as db:
            row = db.get(Post, "t3abc")
            self.assertIsNotNone(row)
            self.assertFalse(row.processed)
            self.assertEqual(row.score, 5)

    def test_reingest_updates_score_and_keeps_creation_time(self) -> None:
        self.store.upsert_post(_post(score=5, num_comments=2, created_utc=1_700_000_000))
        is_new = self.store.upsert_post(
            _post(score=42, num_comments=9, created_utc=1_800_000_000, title="Edited title")
        )
        self.assertFalse(is_new)
        with self.Session() as db:
            count = db.scalar(select(func.count()).select_from(Post))
            row = db.get(Post, "t3abc")
            self.assertEqual(count, 1)
            self.assertEqual(row.score, 42)
            self.assertEqual(row.num_comments, 9)
            self.assertEqual(row.created_utc, 1_700_000_000)
            self.assertEqual(row.title, "UDM firmware 4.0.6 crash")

    def test_reingest_resets_processed(self) -> None:
        self.store.upsert_post(_post())
        self.assertEqual(self.store.mark_processed(["t3abc"]), 1)
        self.store.upsert_post(_post(score=6))
        with self.Session() as db:
            self.assertFalse(db.get(Post, "t3abc").processed)

    def test_integrity_error_is_recoverable(self) -> None:
        session = MagicMock()
        session.get.side_effect = IntegrityError("INSERT", {}, Exception("duplicate"))
        store = SqlStore(lambda: session)
        with self.assertRaises(RowConflictError):
            store.upsert_post(_post())
        session.rollback.assert_called_once()
        session.close.assert_called_once()

    def test_operational_error_is_store_error(self) -> None:
        session = MagicMock()
        session.get.side_effect = OperationalError("SELECT", {}, Exception("db down"))
        store = SqlStore(lambda: session)
        with self.assertRaises(StoreError) as ctx:
            store.upsert_post(_post())
        self.assertNotIsInstance(ctx.exception, RowConflictError)


class TestInsertIssue(unittest.TestCase):
    """Issues are keyed by (post, issue type, firmware version)."""

    def setUp(self) -> None:
        self.Session = sqlite_session_factory()
        self.store = SqlStore(self.Session)
        self.store.upsert_post(_post())

    def _issue_count(self) -> int:
        with self.Session() as db:
            return db.scalar(select(func.count()).select_from(FirmwareIssue))

    def test_insert(self) -> None:
        self.assertTrue(self.store.insert_issue(_issue()))
        self.assertEqual(self._issue_count(), 1)

    def test_reclassification_does_not_duplicate(self) -> None:
        self.store.insert_issue(_issue())
        self.assertFalse(self.store.insert_issue(_issue()))
        self.assertEqual(self._issue_count(), 1)

    def test_distinct_categories_stored_separately(self) -> None:
        self.store.insert_issue(_issue(issue_type="stability"))
        self.store.insert_issue(_issue(issue_type="connectivity", extracted_from="offline"))
        self.assertEqual(self._issue_count(), 2)


class TestRecordScan(unittest.TestCase):
    """One ScanResult row per call."""

    def test_record_scan_persists_fields(self) -> None:
        Session = sqlite_session_factory()
        store = SqlStore(Session)
        outcome = ScanOutcome(
            started_at=datetime(2026, 10, 18, tzinfo=timezone.utc),
            posts_scanned=0,
            issues_found=0,
            duration_ms=12,
            success=False,
            error_message="Reddit request timed out.",
            trigger="scheduled",
        )
        scan_id = store.record_scan(outcome)
        with Session() as db:
            row = db.get(ScanResult, scan_id)
            self.assertFalse(row.success)
            self.assertEqual(row.error_message, "Reddit request timed out.")
            self.assertEqual(row.trigger, "scheduled")
            self.assertEqual(row.duration_ms, 12)

    def test_mark_processed_empty_is_noop(self) -> None:
        session_factory = MagicMock()
        store = SqlStore(session_factory)
        self.assertEqual(store.mark_processed([]), 0)
        session_factory.assert_not_called()


if __name__ == "__main__":
    unittest.main()
