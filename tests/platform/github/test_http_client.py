"""Tests for the GitHub HTTP adapter."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest
import requests

from agent_defs.features.definitions.domain.errors import AuthError, NetworkError
from agent_defs.platform.github import http_client
from agent_defs.platform.github.http_client import GitHubHTTPClient, classify_status
from agent_defs.platform.github.rate_limit import GitHubRateLimiter


class _Response:
    def __init__(self, status: int, content: bytes = b"", headers: dict[str, str] | None = None) -> None:
        self.status_code = status
        self.content = content
        self.headers = headers or {}


class _Session:
    def __init__(self, response: _Response | None = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[tuple[str, dict[str, str]]] = []

    def get(self, url: str, *, headers: Mapping[str, str], timeout: tuple[float, float]) -> Any:
        self.calls.append((url, dict(headers)))
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture(autouse=True)
def no_throttle(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(http_client, "GitHubRateLimiter", lambda: GitHubRateLimiter(0.0))


@pytest.mark.parametrize(
    ("status", "headers", "reason"),
    [
        (401, {}, "unauthorized"),
        (403, {}, "forbidden"),
        (403, {"x-ratelimit-remaining": "0"}, "rate_limited"),
        (429, {}, "rate_limited"),
        (404, {}, "not_found"),
    ],
)
def test_classify_auth_failures(status: int, headers: dict[str, str], reason: str) -> None:
    error = classify_status(status, headers)

    assert isinstance(error, AuthError)
    assert error.reason == reason


@pytest.mark.parametrize("status", [500, 502, 503, 418])
def test_classify_other_failures_as_network(status: int) -> None:
    assert isinstance(classify_status(status, {}), NetworkError)


def test_classify_success() -> None:
    assert classify_status(200, {}) is None


def test_rate_limit_message_mentions_retry_after() -> None:
    error = classify_status(429, {"retry-after": "42"})

    assert error is not None
    assert "42s" in str(error)


def test_get_json_sends_token_and_user_agent() -> None:
    session = _Session(_Response(200, b'{"ok": true}'))
    client = GitHubHTTPClient("secret", session=session)

    payload = client.get_json("/gists/abc")

    assert payload == {"ok": True}
    url, headers = session.calls[0]
    assert url == "https://api.github.com/gists/abc"
    assert headers["Authorization"] == "Bearer secret"
    assert headers["User-Agent"]
    assert client.authenticated


def test_anonymous_client_sends_no_authorization() -> None:
    session = _Session(_Response(200, b"{}"))
    client = GitHubHTTPClient(None, session=session)

    _ = client.get_json("rate_limit")

    assert "Authorization" not in session.calls[0][1]
    assert not client.authenticated


def test_error_status_raises_classified_error() -> None:
    session = _Session(_Response(403, headers={"X-RateLimit-Remaining": "0"}))
    client = GitHubHTTPClient(session=session)

    with pytest.raises(AuthError) as excinfo:
        _ = client.get_bytes("repos/a/b/tarball/main")

    assert excinfo.value.reason == "rate_limited"


def test_transport_errors_become_network_errors() -> None:
    client = GitHubHTTPClient(session=_Session(error=requests.ConnectionError("boom")))

    with pytest.raises(NetworkError, match="connection failed"):
        _ = client.get_bytes("repos/a/b/tarball/main")


def test_timeouts_become_network_errors() -> None:
    client = GitHubHTTPClient(session=_Session(error=requests.Timeout("slow")))

    with pytest.raises(NetworkError, match="timed out"):
        _ = client.get_bytes("x")


def test_invalid_json_is_a_network_error() -> None:
    client = GitHubHTTPClient(session=_Session(_Response(200, b"<html>")))

    with pytest.raises(NetworkError, match="invalid JSON"):
        _ = client.get_json("x")


def test_exhausted_quota_stops_further_requests() -> None:
    limiter = GitHubRateLimiter(0.0, max_wait=30.0, clock=lambda: 1_000.0, sleep=lambda _: None)
    headers = {"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "4600"}
    session = _Session(_Response(200, b"{}", headers=headers))
    client = GitHubHTTPClient(session=session, limiter=limiter)
    _ = client.get_json("gists/abc")

    with pytest.raises(AuthError) as excinfo:
        _ = client.get_json("gists/def")

    assert excinfo.value.reason == "rate_limited"
    assert len(session.calls) == 1
