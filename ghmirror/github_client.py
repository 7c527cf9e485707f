# ghmirror/github_client.py
import json
import logging
import threading
from typing import Any, Union

import httpx

from ghmirror.core.config import settings
from ghmirror.core.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

# Statuses GitHub uses to say "no such thing" or "not for you". These come back
# to the caller as data, everything else non-2xx is fatal.
HANDLED_STATUSES = frozenset({
    400,  # Bad request
    401,  # Unauthorized
    403,  # Forbidden
    404,  # Not found
    422,  # Unprocessable entity
})


class RemoteError(Exception):
    """Raised when a GitHub request fails in a way GitHub doesn't report as data."""

    def __init__(self, message: str, url: str, status_code: int | None = None):
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class GitHubClient:
    def __init__(
        self,
        client_or_token: Union[httpx.Client, str, None] = None,
        rate_limiter: RateLimiter | None = None,
        base_url: str | None = None,
        base_url_v2: str | None = None,
    ):
        self.base_url = base_url or settings.MIRROR_URLBASE
        self.base_url_v2 = base_url_v2 or settings.MIRROR_URLBASE_V2
        self.rate_limiter = rate_limiter or RateLimiter(
            budget=settings.MIRROR_REQRATE,
            window=settings.MIRROR_WINDOW_SECONDS,
        )
        self.num_api_calls = 0
        self._count_lock = threading.Lock()

        # If caller passed a Client, reuse it (tests hand in one with a mock transport).
        if isinstance(client_or_token, httpx.Client):
            self.client = client_or_token
            self._owns_client = False
        else:
            headers = {"Accept": "application/vnd.github+json"}
            access_token = client_or_token or settings.MIRROR_GITHUB_TOKEN
            if access_token:
                headers["Authorization"] = f"Bearer {access_token}"
            self.client = httpx.Client(
                headers=headers,
                timeout=settings.MIRROR_HTTP_TIMEOUT,
                follow_redirects=True,
            )
            self._owns_client = True

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    @staticmethod
    def _join(base: str, path: str) -> str:
        return base.rstrip("/") + "/" + path.lstrip("/")

    def get_user(self, login: str):
        return self.fetch(self._join(self.base_url, f"users/{login}"))

    def get_user_by_email(self, email: str):
        # API v2 user search; optional info, it may not return a user at all
        return self.fetch(self._join(self.base_url_v2, f"user/email/{email}"))

    def get_repo(self, owner: str, repo: str):
        return self.fetch(self._join(self.base_url, f"repos/{owner}/{repo}"))

    def get_commit(self, owner: str, repo: str, sha: str):
        return self.fetch(self._join(self.base_url, f"repos/{owner}/{repo}/commits/{sha}"))

    def get_events(self):
        """Current public events feed."""
        return self.fetch(self._join(self.base_url, "events"))

    def fetch(self, url: str) -> Any:
        """GET ``url`` and return the parsed JSON body.

        Handled GitHub error statuses come back as ``{"error": <reason>}``
        instead of raising; anything else that isn't a 2xx raises RemoteError.
        """
        self.rate_limiter.acquire()
        # handlers share one client across the server threadpool
        with self._count_lock:
            self.num_api_calls += 1
            num_calls = self.num_api_calls
        logger.debug("Request: %s (num_calls = %d)", url, num_calls)

        try:
            resp = self.client.get(url)
        except httpx.HTTPError as e:
            raise RemoteError(f"GitHub request failed: {e}", url) from e

        if resp.status_code in HANDLED_STATUSES:
            logger.debug("GitHub answered %s for %s", resp.status_code, url)
            return {"error": resp.reason_phrase}

        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RemoteError(
                f"GitHub API error: {resp.status_code} - {resp.reason_phrase}",
                url,
                status_code=resp.status_code,
            ) from e

        try:
            return resp.json()
        except json.JSONDecodeError as e:
            raise RemoteError(f"Invalid JSON from GitHub: {e}", url, status_code=resp.status_code) from e
