"""Source client: fetch recent posts from a subreddit via the Reddit OAuth API."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from firmwatch.schemas.posts import SourcePost

if TYPE_CHECKING:
    from firmwatch.core.config import Settings

logger = logging.getLogger(__name__)

TOKEN_URL = "https://www.reddit.com/api/v1/access_token"
API_BASE_URL = "https://oauth.reddit.com"

# Reddit caps listing pages at 100 items.
MAX_LISTING_LIMIT = 100
# Refresh the bearer token this many seconds before it expires.
TOKEN_REFRESH_MARGIN_SEC = 60


class SourceFetchError(Exception):
    """Raised when posts cannot be fetched (network, auth, rate limit, bad payload)."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class SourceNotConfiguredError(SourceFetchError):
    """Raised when Reddit credentials are missing."""


def _is_reddit_configured(settings: Settings) -> bool:
    if not settings.REDDIT_CLIENT_ID or not settings.REDDIT_CLIENT_ID.strip():
        return False
    if settings.REDDIT_CLIENT_SECRET is None:
        return False
    return bool(settings.REDDIT_CLIENT_SECRET.get_secret_value().strip())


def _listing_after(body: Any) -> str | None:
    """Cursor for the next listing page, or None at the end of the listing."""
    try:
        after = body["data"].get("after")
    except (KeyError, TypeError, AttributeError):
        return None
    return after if isinstance(after, str) and after else None


def _listing_to_posts(body: Any) -> list[SourcePost]:
    """Map a Reddit listing payload to SourcePost records."""
    try:
        children = body["data"]["children"]
    except (KeyError, TypeError) as e:
        raise SourceFetchError("Reddit listing is missing data.children.", cause=e) from e
    posts: list[SourcePost] = []
    for child in children:
        data = child.get("data") if isinstance(child, dict) else None
        if not isinstance(data, dict):
            continue
        try:
            posts.append(
                SourcePost(
                    id=data.get("id"),
                    title=data.get("title"),
                    body=data.get("selftext"),
                    author=data.get("author"),
                    created_utc=data.get("created_utc"),
                    score=data.get("score") or 0,
                    num_comments=data.get("num_comments") or 0,
                    url=data.get("url"),
                    permalink=data.get("permalink"),
                    subreddit=data.get("subreddit") or "UNIFI",
                )
            )
        except ValidationError as e:
            logger.warning(
                "Skipping malformed Reddit post",
                extra={"post_id": data.get("id"), "reason": str(e)[:200]},
            )
    return posts


class RedditClient:
    """
    Minimal Reddit API client using the client-credentials grant.

    The bearer token is cached on the instance and refreshed shortly before it
    expires. Pass a custom httpx transport to stub the network in tests.
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._access_token: str | None = None
        self._token_expiry: float = 0.0

    def _client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self._settings.REDDIT_REQUEST_TIMEOUT_SEC),
            headers={"User-Agent": self._settings.REDDIT_USER_AGENT},
            transport=self._transport,
        )

    def _authenticate(self, client: httpx.Client) -> None:
        if not _is_reddit_configured(self._settings):
            raise SourceNotConfiguredError(
                "Reddit is not configured; set REDDIT_CLIENT_ID and REDDIT_CLIENT_SECRET."
            )
        secret = self._settings.REDDIT_CLIENT_SECRET.get_secret_value()
        logger.info("Authenticating with Reddit API")
        resp = client.post(
            TOKEN_URL,
            data={"grant_type": "client_credentials"},
            auth=(self._settings.REDDIT_CLIENT_ID.strip(), secret),
        )
        if resp.status_code == 401:
            raise SourceFetchError("Reddit authentication failed (invalid client id or secret).")
        if resp.status_code >= 400:
            raise SourceFetchError(f"Reddit token endpoint returned {resp.status_code}.")
        try:
            body = resp.json()
            token = body["access_token"]
            expires_in = float(body.get("expires_in", 3600))
        except (ValueError, KeyError, TypeError) as e:
            raise SourceFetchError("Reddit token response is malformed.", cause=e) from e
        self._access_token = token
        self._token_expiry = time.monotonic() + expires_in

    def _ensure_authenticated(self, client: httpx.Client) -> None:
        if (
            self._access_token is None
            or time.monotonic() >= self._token_expiry - TOKEN_REFRESH_MARGIN_SEC
        ):
            self._authenticate(client)

    def _get_page(
        self, client: httpx.Client, subreddit: str, page_size: int, after: str | None
    ) -> Any:
        params: dict[str, Any] = {"limit": page_size, "sort": "new", "t": "week"}
        if after:
            params["after"] = after
        resp = client.get(
            f"{API_BASE_URL}/r/{subreddit}/new",
            params=params,
            headers={"Authorization": f"Bearer {self._access_token}"},
        )
        if resp.status_code == 401:
            # Force re-authentication on the next run.
            self._access_token = None
            raise SourceFetchError("Reddit rejected the access token (401).")
        if resp.status_code == 429:
            raise SourceFetchError("Reddit rate limit exceeded (429).")
        if resp.status_code >= 400:
            raise SourceFetchError(f"Reddit returned status {resp.status_code}.")
        try:
            return resp.json()
        except ValueError as e:
            raise SourceFetchError("Reddit response body is not valid JSON.", cause=e) from e

    def fetch_recent_posts(self, limit: int = MAX_LISTING_LIMIT) -> list[SourcePost]:
        """
        Return up to `limit` newest posts of the configured subreddit.

        Listings are paged through Reddit's `after` cursor, at most 100 posts per
        request, until `limit` posts are collected or the listing ends. Upstream
        may return fewer posts than requested. Raises SourceFetchError on
        timeout, transport failure, non-2xx status or an unparseable listing.
        """
        subreddit = self._settings.REDDIT_SUBREDDIT
        limit = max(1, limit)
        posts: list[SourcePost] = []
        pages = 0
        after: str | None = None
        start = time.perf_counter()
        try:
            with self._client() as client:
                self._ensure_authenticated(client)
                while len(posts) < limit:
                    page_size = min(limit - len(posts), MAX_LISTING_LIMIT)
                    body = self._get_page(client, subreddit, page_size, after)
                    pages += 1
                    page = _listing_to_posts(body)
                    posts.extend(page[:page_size])
                    after = _listing_after(body)
                    if not after or not page:
                        break
        except httpx.TimeoutException as e:
            raise SourceFetchError(
                "Reddit request timed out. Try increasing REDDIT_REQUEST_TIMEOUT_SEC.",
                cause=e,
            ) from e
        except httpx.HTTPError as e:
            raise SourceFetchError("Reddit request failed.", cause=e) from e

        logger.info(
            "Fetched posts from Reddit",
            extra={
                "subreddit": subreddit,
                "requested": limit,
                "pages": pages,
                "post_count": len(posts),
                "latency_seconds": time.perf_counter() - start,
            },
        )
        return posts
