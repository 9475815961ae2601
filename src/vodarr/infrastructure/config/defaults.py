"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "vodarr",
    "environment": "dev",
    "http": {
        "timeout_seconds": 6.0,
        "detail_timeout_seconds": 10.0,
        "follow_redirects": True,
        "user_agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/122.0.0.0 Safari/537.36"
        ),
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "search": {
        "max_pages": 5,
        "concurrency_limit": 3,
        "retry_attempts": 1,
        "retry_backoff_seconds": 1.0,
    },
    "cache": {
        "ttl_seconds": 300,
        "max_entries": 1000,
    },
    "sources": {
        "backend": "memory",
        "dir": "./.cache/vodarr/sources",
        "entries": [],
    },
    "users": {},
}
