"""Pydantic schemas for posts fetched from the upstream community feed."""

from pydantic import BaseModel, Field, field_validator


class SourcePost(BaseModel):
    """Post-shaped record returned by the source client. Unknown upstream keys are ignored."""

    model_config = {"extra": "ignore"}

    id: str = Field(..., min_length=1, max_length=32, description="Stable upstream identifier.")
    title: str = Field(default="", description="Post title.")
    body: str = Field(default="", description="Free-text body (Reddit selftext).")
    author: str | None = Field(default=None, description="Author handle.")
    created_utc: int = Field(..., ge=0, description="Upstream creation time, epoch seconds.")
    score: int = Field(default=0, description="Popularity score at fetch time.")
    num_comments: int = Field(default=0, ge=0, description="Comment count at fetch time.")
    url: str | None = Field(default=None, description="Canonical URL.")
    permalink: str | None = Field(default=None, description="Permanent link.")
    subreddit: str = Field(default="UNIFI", description="Community the post belongs to.")

    @field_validator("title", "body", mode="before")
    @classmethod
    def none_to_empty(cls, v: str | None) -> str:
        return v if v is not None else ""

    @field_validator("created_utc", mode="before")
    @classmethod
    def truncate_float_epoch(cls, v: float | int) -> int:
        # Reddit reports created_utc as a float.
        return int(v) if isinstance(v, float) else v
