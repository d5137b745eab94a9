"""Firmware issue endpoints: filtered, paginated listing and single-issue lookup."""

import math
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from firmwatch.core.database import get_db
from firmwatch.models import FirmwareIssue, Post
from firmwatch.schemas.issues import (
    IssueListResponse,
    IssueResponse,
    Pagination,
    SeverityLevel,
)

router = APIRouter()

MAX_PAGE_LIMIT = 100


def _to_response(issue: FirmwareIssue, post: Post | None) -> IssueResponse:
    response = IssueResponse.model_validate(issue)
    if post is not None:
        response.post_title = post.title
        response.post_permalink = post.permalink
    return response


@router.get("", response_model=IssueListResponse)
def list_issues(
    db: Annotated[Session, Depends(get_db)],
    equipment_type: str | None = Query(default=None),
    severity: SeverityLevel | None = Query(default=None),
    firmware_version: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=MAX_PAGE_LIMIT),
) -> IssueListResponse:
    """Return issues (newest first) with their post title and permalink."""
    query = db.query(FirmwareIssue, Post).join(Post, FirmwareIssue.post_id == Post.id)
    if equipment_type:
        query = query.filter(FirmwareIssue.equipment_type == equipment_type)
    if severity:
        query = query.filter(FirmwareIssue.severity == severity)
    if firmware_version:
        query = query.filter(FirmwareIssue.firmware_version == firmware_version)
    total = query.count()
    rows = (
        query.order_by(FirmwareIssue.created_at.desc(), FirmwareIssue.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return IssueListResponse(
        issues=[_to_response(issue, post) for issue, post in rows],
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit),
        ),
    )


@router.get("/{issue_id}", response_model=IssueResponse)
def get_issue(
    issue_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> IssueResponse:
    """Return one issue by id (404 if missing)."""
    issue = db.get(FirmwareIssue, issue_id)
    if issue is None:
        raise HTTPException(status_code=404, detail="Issue not found.")
    return _to_response(issue, db.get(Post, issue.post_id))
