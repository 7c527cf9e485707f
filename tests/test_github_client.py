"""Tests for GitHubClient request handling and error classification."""

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import httpx
import pytest

from conftest import API_BASE, API_BASE_V2, FakeGitHub, SHA
from ghmirror.core.rate_limiter import RateLimiter
from ghmirror.github_client import GitHubClient, RemoteError


def make_client(handler, rate_limiter=None) -> GitHubClient:
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return GitHubClient(
        http,
        rate_limiter=rate_limiter or RateLimiter(budget=1000),
        base_url=API_BASE,
        base_url_v2=API_BASE_V2,
    )


def status_handler(status: int):
    def handler(request):
        return httpx.Response(status, json={"message": "whatever"})
    return handler


class TestFetch:

    def test_returns_parsed_json(self, github):
        assert github.fetch(API_BASE + "users/alice")["login"] == "alice"

    def test_not_found_becomes_error_payload(self):
        client = make_client(status_handler(404))
        assert client.fetch(API_BASE + "users/ghost") == {"error": "Not Found"}

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 422])
    def test_handled_statuses_do_not_raise(self, status):
        client = make_client(status_handler(status))
        reason = httpx.codes.get_reason_phrase(status)
        assert client.fetch(API_BASE + "anything") == {"error": reason}

    @pytest.mark.parametrize("status", [500, 502, 503, 409, 429])
    def test_other_statuses_raise(self, status):
        client = make_client(status_handler(status))
        with pytest.raises(RemoteError) as exc_info:
            client.fetch(API_BASE + "anything")
        assert exc_info.value.status_code == status
        assert exc_info.value.url == API_BASE + "anything"

    def test_transport_failure_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)
        with pytest.raises(RemoteError) as exc_info:
            client.fetch(API_BASE + "users/alice")
        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_invalid_json_raises(self):
        fake = FakeGitHub()
        fake.add("/users/alice", content=b"<html>not json</html>")
        client = make_client(fake.handler)

        with pytest.raises(RemoteError):
            client.fetch(API_BASE + "users/alice")

    def test_every_request_goes_through_rate_limiter(self):
        limiter = Mock(spec=RateLimiter)
        client = make_client(status_handler(200), rate_limiter=limiter)

        client.fetch(API_BASE + "a")
        client.fetch(API_BASE + "b")

        assert limiter.acquire.call_count == 2
        assert client.num_api_calls == 2

    def test_rate_limiter_acquired_before_failed_request(self):
        limiter = Mock(spec=RateLimiter)
        client = make_client(status_handler(500), rate_limiter=limiter)

        with pytest.raises(RemoteError):
            client.fetch(API_BASE + "a")
        limiter.acquire.assert_called_once()

    def test_call_count_exact_across_threads(self):
        client = make_client(status_handler(200))

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda i: client.fetch(API_BASE + f"users/u{i}"), range(200)))

        assert client.num_api_calls == 200


class TestEndpoints:

    def test_endpoint_urls(self, github, fake_github):
        github.get_user("alice")
        github.get_repo("alice", "proj")
        github.get_commit("alice", "proj", SHA)
        github.get_user_by_email("bob@example.com")
        github.get_events()

        assert fake_github.requests == [
            "/users/alice",
            "/repos/alice/proj",
            f"/repos/alice/proj/commits/{SHA}",
            "/api/v2/json/user/email/bob@example.com",
            "/events",
        ]

    def test_base_url_without_trailing_slash(self, fake_github):
        http = httpx.Client(transport=httpx.MockTransport(fake_github.handler))
        client = GitHubClient(http, rate_limiter=RateLimiter(budget=10),
                              base_url="https://api.github.test", base_url_v2=API_BASE_V2)

        assert client.get_user("alice")["login"] == "alice"


class TestConstruction:

    def test_token_sets_bearer_header(self):
        client = GitHubClient("ghp_test_token", rate_limiter=RateLimiter(budget=1))
        try:
            assert client.client.headers["Authorization"] == "Bearer ghp_test_token"
            assert client.client.headers["Accept"] == "application/vnd.github+json"
        finally:
            client.close()

    def test_context_manager_closes_owned_client(self):
        with GitHubClient("ghp_test_token", rate_limiter=RateLimiter(budget=1)) as client:
            http = client.client
        assert http.is_closed

    def test_borrowed_client_left_open(self, fake_github):
        http = httpx.Client(transport=httpx.MockTransport(fake_github.handler))
        with GitHubClient(http, rate_limiter=RateLimiter(budget=1)):
            pass
        assert not http.is_closed
        http.close()

    def test_default_rate_limiter_per_client(self):
        a = GitHubClient("t1")
        b = GitHubClient("t2")
        try:
            assert a.rate_limiter is not b.rate_limiter
        finally:
            a.close()
            b.close()
