"""
Centralized configuration for Unmask.

All values that vary by deployment belong here.
Override via environment variables.
"""

import os

# ============================================================
# Identity
# ============================================================

DEFAULT_USER_ID: str | None = os.environ.get("UNMASK_DEFAULT_USER_ID") or None
"""Identity used when a request carries no X-User-Id header. Unset = header required."""

USER_ID_HEADER: str = "X-User-Id"

# ============================================================
# Agents
# ============================================================

WORKERS_URL: str = os.environ.get("UNMASK_WORKERS_URL", "http://localhost:8787").rstrip("/")
"""Base URL of the deployed worker bundle. The orchestrator lives at {WORKERS_URL}/orchestrator."""

EMOTIONAL_AGENT_URL: str = os.environ.get(
    "UNMASK_EMOTIONAL_AGENT_URL", f"{WORKERS_URL}/emotional-agent"
)
PATTERN_AGENT_URL: str = os.environ.get("UNMASK_PATTERN_AGENT_URL", f"{WORKERS_URL}/pattern-agent")
MEMORY_AGENT_URL: str = os.environ.get("UNMASK_MEMORY_AGENT_URL", f"{WORKERS_URL}/memory-agent")
ORCHESTRATOR_URL: str = os.environ.get("UNMASK_ORCHESTRATOR_URL", f"{WORKERS_URL}/orchestrator")

API_TOKEN: str | None = os.environ.get("UNMASK_API_TOKEN") or None
"""Bearer token sent to the workers. Omitted from requests when unset."""

AGENT_TIMEOUT_SECONDS: float = float(os.environ.get("UNMASK_AGENT_TIMEOUT", "15"))

CHAT_HISTORY_LIMIT: int = 10
"""Orchestrator only sees the most recent turns."""

# ============================================================
# Object storage
# ============================================================

IMAGE_BASE_URL: str = os.environ.get("UNMASK_IMAGE_BASE_URL", "http://localhost:8788/images").rstrip(
    "/"
)


def image_url(key: str) -> str:
    """Public URL for an image stored under *key*."""
    return f"{IMAGE_BASE_URL}/{key.lstrip('/')}"


# ============================================================
# HTTP / logging
# ============================================================

CORS_ORIGINS: list[str] = (
    ["*"]
    if os.environ.get("CORS_ORIGINS", "*") == "*"
    else [o.strip() for o in os.environ["CORS_ORIGINS"].split(",")]
)

LOG_LEVEL: str = os.environ.get("UNMASK_LOG_LEVEL", "INFO")

_log_json = os.environ.get("UNMASK_LOG_JSON")
LOG_JSON: bool | None = None if _log_json is None else _log_json.lower() in ("1", "true", "yes")
"""None = auto-detect (JSON when stderr is not a TTY)."""

LOG_FILE: str | None = os.environ.get("UNMASK_LOG_FILE") or None

# ============================================================
# Pagination
# ============================================================

DEFAULT_PAGE_SIZE: int = 50
MAX_PAGE_SIZE: int = 500
DEFAULT_EVENTS_PAGE_SIZE: int = 100
