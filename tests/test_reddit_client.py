"""Unit tests for firmwatch.services.reddit_client using httpx.MockTransport (no network)."""

import unittest

import httpx
from pydantic import SecretStr

from firmwatch.core.config import Settings
from firmwatch.services.reddit_client import (
    RedditClient,
    SourceFetchError,
    SourceNotConfiguredError,
)


def _settings(**kwargs: object) -> Settings:
    """Settings with Reddit credentials and no .env lookup."""
    defaults = {
        "REDDIT_CLIENT_ID": "client-id",
        "REDDIT_CLIENT_SECRET": SecretStr("client-secret"),
        "REDDIT_USER_AGENT": "firmwatch-tests/1.0",
        "REDDIT_SUBREDDIT": "UNIFI",
        "REDDIT_REQUEST_TIMEOUT_SEC": 5.0,
    }
    defaults.update(kwargs)
    return Settings(_env_file=None, **defaults)


def _listing(*children: dict, after: str | None = None) -> dict:
    return {
        "kind": "Listing",
        "data": {"children": [{"kind": "t3", "data": c} for c in children], "after": after},
    }


def _posts(prefix: str, count: int) -> list[dict]:
    return [dict(POST_DATA, id=f"{prefix}{i}") for i in range(count)]


POST_DATA = {
    "id": "1abcde",
    "title": "UDM firmware 4.0.6 crash",
    "selftext": "",
    "author": "someone",
    "created_utc": 1_760_000_000.0,
    "score": 12,
    "num_comments": 3,
    "url": "https://www.reddit.com/r/UNIFI/comments/1abcde/",
    "permalink": "/r/UNIFI/comments/1abcde/udm_firmware/",
    "subreddit": "UNIFI",
}


class _Handler:
    """Records requests and answers token and listing calls."""

    def __init__(
        self,
        listing: dict | None = None,
        pages: list[dict] | None = None,
        listing_status: int = 200,
        token_status: int = 200,
        error: Exception | None = None,
    ) -> None:
        self.listing = listing if listing is not None else _listing(POST_DATA)
        self.pages = list(pages or [])
        self.listing_status = listing_status
        self.token_status = token_status
        self.error = error
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if request.url.path == "/api/v1/access_token":
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={"error": "invalid_grant"})
            return httpx.Response(200, json={"access_token": "tok", "expires_in": 3600})
        body = self.pages.pop(0) if self.pages else self.listing
        return httpx.Response(self.listing_status, json=body)


class TestFetchRecentPosts(unittest.TestCase):
    """Happy path: authenticate, fetch listing, map to SourcePost."""

    def test_maps_listing_to_posts(self) -> None:
        handler = _Handler()
        client = RedditClient(_settings(), transport=httpx.MockTransport(handler))
        posts = client.fetch_recent_posts(200)

        self.assertEqual(len(posts), 1)
        post = posts[0]
        self.assertEqual(post.id, "1abcde")
        self.assertEqual(post.body, "")
        self.assertEqual(post.created_utc, 1_760_000_000)
        self.assertEqual(post.score, 12)

        listing_request = handler.requests[-1]
        self.assertEqual(listing_request.url.path, "/r/UNIFI/new")
        self.assertEqual(listing_request.url.params["limit"], "100")
        self.assertEqual(listing_request.headers["Authorization"], "Bearer tok")
        self.assertEqual(listing_request.headers["User-Agent"], "firmwatch-tests/1.0")

    def test_token_is_reused(self) -> None:
        handler = _Handler()
        client = RedditClient(_settings(), transport=httpx.MockTransport(handler))
        client.fetch_recent_posts(10)
        client.fetch_recent_posts(10)
        token_calls = [r for r in handler.requests if r.url.path == "/api/v1/access_token"]
        self.assertEqual(len(token_calls), 1)

    def test_fewer_posts_than_requested_is_fine(self) -> None:
        handler = _Handler(listing=_listing())
        client = RedditClient(_settings(), transport=httpx.MockTransport(handler))
        self.assertEqual(client.fetch_recent_posts(50), [])

    def test_malformed_post_skipped(self) -> None:
        bad = dict(POST_DATA, id=None)
        handler = _Handler(listing=_listing(bad, POST_DATA))
        client = RedditClient(_settings(), transport=httpx.MockTransport(handler))
        posts = client.fetch_recent_posts(10)
        self.assertEqual([p.id for p in posts], ["1abcde"])


class TestFetchPaging(unittest.TestCase):
    """Batches above 100 posts follow the listing's `after` cursor."""

    def _listing_calls(self, handler: _Handler) -> list[httpx.Request]:
        return [r for r in handler.requests if r.url.path == "/r/UNIFI/new"]

    def test_pages_until_limit(self) -> None:
        handler = _Handler(
            pages=[
                _listing(*_posts("a", 100), after="t3_a99"),
                _listing(*_posts("b", 100), after="t3_b99"),
                _listing(*_posts("c", 100), after="t3_c99"),
            ]
        )
        client = RedditClient(_settings(), transport=httpx.MockTransport(handler))
        posts = client.fetch_recent_posts(250)

        self.assertEqual(len(posts), 250)
        self.assertEqual(posts[0].id, "a0")
        self.assertEqual(posts[-1].id, "c49")
        calls = self._listing_calls(handler)
        self.assertEqual([c.url.params["limit"] for c in calls], ["100", "100", "50"])
        self.assertNotIn("after", calls[0].url.params)
        self.assertEqual(calls[1].url.params["after"], "t3_a99")
        self.assertEqual(calls[2].url.params["after"], "t3_b99")

    def test_stops_at_end_of_listing(self) -> None:
        handler = _Handler(
            pages=[
                _listing(*_posts("a", 100), after="t3_a99"),
                _listing(*_posts("b", 30)),
            ]
        )
        client = RedditClient(_settings(), transport=httpx.MockTransport(handler))
        posts = client.fetch_recent_posts(500)
        self.assertEqual(len(posts), 130)
        self.assertEqual(len(self._listing_calls(handler)), 2)

    def test_small_limit_is_one_request(self) -> None:
        handler = _Handler(listing=_listing(*_posts("a", 10), after="t3_a9"))
        client = RedditClient(_settings(), transport=httpx.MockTransport(handler))
        self.assertEqual(len(client.fetch_recent_posts(10)), 10)
        calls = self._listing_calls(handler)
        self.assertEqual(len(calls), 1)
        self.assertEqual(calls[0].url.params["limit"], "10")

    def test_failure_on_later_page_raises(self) -> None:
        handler = _Handler(pages=[_listing(*_posts("a", 100), after="t3_a99"), {"data": {}}])
        client = RedditClient(_settings(), transport=httpx.MockTransport(handler))
        with self.assertRaises(SourceFetchError):
            client.fetch_recent_posts(200)


class TestFetchFailures(unittest.TestCase):
    """All upstream failures surface as SourceFetchError."""

    def test_not_configured(self) -> None:
        client = RedditClient(
            _settings(REDDIT_CLIENT_ID=None, REDDIT_CLIENT_SECRET=None),
            transport=httpx.MockTransport(_Handler()),
        )
        with self.assertRaises(SourceNotConfiguredError):
            client.fetch_recent_posts(10)

    def test_auth_failure(self) -> None:
        client = RedditClient(_settings(), transport=httpx.MockTransport(_Handler(token_status=401)))
        with self.assertRaises(SourceFetchError) as ctx:
            client.fetch_recent_posts(10)
        self.assertIn("authentication failed", ctx.exception.message)

    def test_rate_limited(self) -> None:
        client = RedditClient(_settings(), transport=httpx.MockTransport(_Handler(listing_status=429)))
        with self.assertRaises(SourceFetchError) as ctx:
            client.fetch_recent_posts(10)
        self.assertIn("429", ctx.exception.message)

    def test_timeout(self) -> None:
        handler = _Handler(error=httpx.ReadTimeout("timed out"))
        client = RedditClient(_settings(), transport=httpx.MockTransport(handler))
        with self.assertRaises(SourceFetchError) as ctx:
            client.fetch_recent_posts(10)
        self.assertIn("timed out", ctx.exception.message)
        self.assertIsInstance(ctx.exception.cause, httpx.TimeoutException)

    def test_missing_children(self) -> None:
        client = RedditClient(_settings(), transport=httpx.MockTransport(_Handler(listing={"data": {}})))
        with self.assertRaises(SourceFetchError):
            client.fetch_recent_posts(10)

    def test_expired_token_cleared_on_401(self) -> None:
        handler = _Handler(listing_status=401)
        client = RedditClient(_settings(), transport=httpx.MockTransport(handler))
        with self.assertRaises(SourceFetchError):
            client.fetch_recent_posts(10)
        handler.listing_status = 200
        client.fetch_recent_posts(10)
        token_calls = [r for r in handler.requests if r.url.path == "/api/v1/access_token"]
        self.assertEqual(len(token_calls), 2)


if __name__ == "__main__":
    unittest.main()
