"""Where: src/agent_defs/platform/github/http_client.py
What: Single-attempt GitHub GET adapter that classifies failures.
Why: Keep requests handling out of sources; retry policy belongs to sync.
"""

from __future__ import annotations

import json
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Final, Protocol, cast

import requests

from agent_defs.features.definitions.domain.errors import AuthError, NetworkError, SourceError
from agent_defs.platform.logging import logger

from .rate_limit import GitHubRateLimiter, parse_reset, parse_retry_after, quota_message
from .user_agent import resolve_user_agent

DEFAULT_API_BASE: Final[str] = "https://api.github.com"
_CONNECT_TIMEOUT: Final[float] = 5.0


@dataclass(slots=True)
class HTTPResult:
    """Represent an HTTP response relevant to the GitHub client."""

    status: int
    headers: dict[str, str]
    content: bytes


class HTTPSession(Protocol):
    """The subset of ``requests.Session`` the client relies on."""

    def get(self, url: str, *, headers: Mapping[str, str], timeout: tuple[float, float]) -> Any:
        ...


class GitHubHTTPClient:
    """Perform authenticated GET requests against the GitHub REST API."""

    def __init__(
        self,
        token: str | None = None,
        *,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = 30.0,
        session: HTTPSession | None = None,
        limiter: GitHubRateLimiter | None = None,
    ) -> None:
        self._token = token.strip() if token else None
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._session: HTTPSession = session if session is not None else requests.Session()
        self._limiter = limiter if limiter is not None else GitHubRateLimiter()

    @property
    def authenticated(self) -> bool:
        return self._token is not None

    def url_for(self, path: str) -> str:
        return f"{self._api_base}/{path.lstrip('/')}"

    def get_bytes(self, path: str, *, accept: str = "application/vnd.github+json") -> bytes:
        """Fetch ``path`` and return the raw body.

        Raises:
            NetworkError: On timeouts, connection failures and 5xx responses.
            AuthError: On 401, 403, 404 and rate-limit responses.
        """

        result = self._attempt(self.url_for(path), accept)
        error = classify_status(result.status, result.headers)
        if error is not None:
            logger.debug("GitHub GET %s failed: %s", path, error)
            raise error
        return result.content

    def get_json(self, path: str) -> Any:
        """Fetch ``path`` and decode a JSON body.

        Raises:
            NetworkError: When the body is not valid JSON, plus every
                failure :meth:`get_bytes` raises.
        """

        raw = self.get_bytes(path)
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise NetworkError(f"invalid JSON from {path}: {exc}") from exc

    def _headers(self, accept: str) -> dict[str, str]:
        headers = {
            "Accept": accept,
            "User-Agent": resolve_user_agent(),
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _attempt(self, url: str, accept: str) -> HTTPResult:
        self._limiter.acquire()
        try:
            response = self._session.get(
                url,
                headers=self._headers(accept),
                timeout=(_CONNECT_TIMEOUT, self._timeout),
            )
        except requests.Timeout as exc:
            raise NetworkError(f"request timed out: {url}") from exc
        except requests.ConnectionError as exc:
            raise NetworkError(f"connection failed: {url}: {exc}") from exc
        except requests.RequestException as exc:
            raise NetworkError(f"request failed: {url}: {exc}") from exc

        status = int(response.status_code)
        header_items = cast(Iterable[tuple[str, str]], response.headers.items())
        response_headers = {str(key).lower(): str(value) for key, value in header_items}
        self._limiter.observe(response_headers)
        return HTTPResult(status=status, headers=response_headers, content=bytes(response.content))


def classify_status(status: int, headers: Mapping[str, str]) -> SourceError | None:
    """Translate an HTTP status into the matching source error, if any.

    ``headers`` keys are expected in lower case.
    """

    if 200 <= status < 300:
        return None
    if status == 401:
        return AuthError("unauthorized", "GitHub rejected the credentials (HTTP 401); check GITHUB_TOKEN")
    if status == 429 or (status == 403 and headers.get("x-ratelimit-remaining") == "0"):
        return AuthError("rate_limited", _rate_limit_message(headers))
    if status == 403:
        return AuthError("forbidden", "GitHub denied access (HTTP 403)")
    if status == 404:
        return AuthError("not_found", "GitHub returned HTTP 404 (missing or private; set GITHUB_TOKEN)")
    if status >= 500:
        return NetworkError(f"GitHub server error (HTTP {status})")
    return NetworkError(f"unexpected HTTP status {status}")


def _rate_limit_message(headers: Mapping[str, str]) -> str:
    now = time.time()
    wait = parse_retry_after(headers.get("retry-after"), now)
    if wait is None:
        wait = parse_reset(headers.get("x-ratelimit-reset"), now)
    return quota_message(wait)


__all__ = [
    "DEFAULT_API_BASE",
    "GitHubHTTPClient",
    "HTTPResult",
    "HTTPSession",
    "classify_status",
]
