from __future__ import annotations

import os

DEFAULT_PORT = 3000


def get_host() -> str:
    return os.environ.get("HOST", "0.0.0.0")


def get_port() -> int:
    raw = os.environ.get("PORT", "")
    return int(raw) if raw.strip() else DEFAULT_PORT


def get_log_level() -> str:
    return os.environ.get("PLAYROOM_LOG_LEVEL", "INFO").upper()
