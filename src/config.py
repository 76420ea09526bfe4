"""Configuration and environment helpers for the project.

Provides small helpers to read typed environment variables and exposes
project-level configuration constants used across the codebase (e.g.
SOOS_API_URL, HTTP_VERIFY, MAX_MANIFESTS, polling cadence and limits).
"""

from __future__ import annotations

import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


APP_NAME = "soos-sast"
APP_VERSION = "1.0.3"

# SOOS API
SOOS_API_URL = os.environ.get("SOOS_API_URL", "https://api.soos.io/api/").strip()
SOOS_API_KEY_ENV_VAR = "SOOS_API_KEY"
SOOS_CLIENT_ID_ENV_VAR = "SOOS_CLIENT_ID"

# Network / HTTP
HTTP_VERIFY = _env_bool("HTTP_VERIFY", True)
HTTP_TIMEOUT = _env_float("HTTP_TIMEOUT", 60.0)

# File discovery
SAST_FILE_PATTERN = "**/*.sarif.json"
MAX_MANIFESTS = _env_int("MAX_MANIFESTS", 50)

# Status polling
POLL_INTERVAL = _env_float("POLL_INTERVAL", 10.0)
POLL_TIMEOUT = _env_float("POLL_TIMEOUT", 900.0)
