"""Scan orchestrator: one end-to-end pass of fetch → classify → persist → aggregate.

Every invocation records exactly one ScanResult, success or failure. Runs are
serialized by an in-process lock, so a timer run and an on-demand run never
interleave; the second caller waits and then performs its own pass.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Protocol

from firmwatch.schemas.issues import ClassifiedIssue
from firmwatch.schemas.posts import SourcePost
from firmwatch.schemas.scan import ScanOutcome, ScanTrigger
from firmwatch.services.classifier import classify_posts
from firmwatch.services.risk import DEFAULT_WINDOW_DAYS, update_risk_assessments
from firmwatch.services.store import SqlStore, StoreError

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 200
MAX_ERROR_MESSAGE_LENGTH = 1000


class PostSource(Protocol):
    """Anything that can return a bounded batch of recent posts."""

    def fetch_recent_posts(self, limit: int) -> list[SourcePost]: ...


class ScanOrchestrator:
    """Drives scan runs; holds no state between runs other than the run lock."""

    def __init__(
        self,
        source: PostSource,
        store: SqlStore,
        classify: Callable[[list[SourcePost]], list[ClassifiedIssue]] = classify_posts,
        aggregate: Callable[..., int] = update_risk_assessments,
        batch_size: int = DEFAULT_BATCH_SIZE,
        window_days: int = DEFAULT_WINDOW_DAYS,
    ) -> None:
        self.source = source
        self.store = store
        self.classify = classify
        self.aggregate = aggregate
        self.batch_size = batch_size
        self.window_days = window_days
        self._run_lock = threading.Lock()

    def run(self, trigger: ScanTrigger = "manual") -> ScanOutcome:
        """Run one scan and return its outcome. Never raises; failures are in the outcome."""
        with self._run_lock:
            return self._run(trigger)

    def _store_posts(self, posts: list[SourcePost], outcome: ScanOutcome) -> set[str]:
        """Upsert posts one by one; returns ids of posts that are stored."""
        stored: set[str] = set()
        for post in posts:
            try:
                if self.store.upsert_post(post):
                    outcome.new_posts += 1
                stored.add(post.id)
            except StoreError as e:
                outcome.skipped_posts += 1
                logger.warning(
                    "Skipping post that could not be stored",
                    extra={"post_id": post.id, "reason": e.message},
                )
        return stored

    def _store_issues(
        self,
        issues: list[ClassifiedIssue],
        stored_post_ids: set[str],
        outcome: ScanOutcome,
    ) -> None:
        for issue in issues:
            if issue.post_id not in stored_post_ids:
                outcome.skipped_issues += 1
                continue
            try:
                self.store.insert_issue(issue)
            except StoreError as e:
                outcome.skipped_issues += 1
                logger.warning(
                    "Skipping issue that could not be stored",
                    extra={
                        "post_id": issue.post_id,
                        "issue_type": issue.issue_type,
                        "reason": e.message,
                    },
                )

    def _run_aggregation(self) -> int:
        with self.store.session() as db:
            return self.aggregate(db, window_days=self.window_days)

    def _run(self, trigger: ScanTrigger) -> ScanOutcome:
        started_at = datetime.now(timezone.utc)
        start = time.perf_counter()
        outcome = ScanOutcome(started_at=started_at, trigger=trigger)
        logger.info("Scan started", extra={"trigger": trigger})

        try:
            posts = self.source.fetch_recent_posts(self.batch_size)
            outcome.posts_scanned = len(posts)

            stored_ids = self._store_posts(posts, outcome)

            # Previously seen posts are reclassified too.
            issues = self.classify(posts)
            outcome.issues_found = len(issues)

            self._store_issues(issues, stored_ids, outcome)

            outcome.assessments_updated = self._run_aggregation()

            self.store.mark_processed([p.id for p in posts])
        except Exception as e:
            outcome.success = False
            outcome.error_message = (str(e) or type(e).__name__)[:MAX_ERROR_MESSAGE_LENGTH]
            logger.exception(
                "Scan failed",
                extra={
                    "trigger": trigger,
                    "posts_scanned": outcome.posts_scanned,
                    "issues_found": outcome.issues_found,
                },
            )

        outcome.duration_ms = int((time.perf_counter() - start) * 1000)
        try:
            outcome.scan_id = self.store.record_scan(outcome)
        except StoreError as e:
            # Last resort: nothing else records the run.
            logger.error(
                "Failed to record scan result",
                extra={"trigger": trigger, "success": outcome.success, "reason": e.message},
            )

        if outcome.success:
            logger.info(
                "Scan completed",
                extra={
                    "trigger": trigger,
                    "posts_scanned": outcome.posts_scanned,
                    "new_posts": outcome.new_posts,
                    "issues_found": outcome.issues_found,
                    "skipped_posts": outcome.skipped_posts,
                    "skipped_issues": outcome.skipped_issues,
                    "duration_ms": outcome.duration_ms,
                },
            )
        return outcome
