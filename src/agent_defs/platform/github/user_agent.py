"""Where: src/agent_defs/platform/github/user_agent.py
What: Build the User-Agent header sent with GitHub API requests.
Why: GitHub rejects API requests that carry no User-Agent.
"""

from __future__ import annotations

import os
from typing import Final

from agent_defs import __version__

APP_NAME: Final[str] = "agent-def-fetcher"
_ENV_USER_AGENT: Final[str] = "AGENT_DEFS_USER_AGENT"


def format_user_agent(app_name: str, app_version: str, contact: str = "") -> str:
    """Return ``App/Version (contact)`` when contact information is available."""

    stripped = contact.strip()
    if stripped:
        return f"{app_name}/{app_version} ({stripped})"
    return f"{app_name}/{app_version}"


def resolve_user_agent() -> str:
    """Provide the user agent that outbound HTTP calls should send."""

    env = os.getenv(_ENV_USER_AGENT)
    if env:
        return env
    return format_user_agent(APP_NAME, __version__)


__all__ = [
    "APP_NAME",
    "format_user_agent",
    "resolve_user_agent",
]
