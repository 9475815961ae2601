"""Layered configuration loading: defaults < YAML < ENV < CLI."""

from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides

_SECTIONS: tuple[str, ...] = ("http", "logging", "search", "cache", "sources")

# Flat key -> (section, key inside section)
_FLAT_KEYS: dict[str, tuple[str, str]] = {
    "http_timeout_seconds": ("http", "timeout_seconds"),
    "http_detail_timeout_seconds": ("http", "detail_timeout_seconds"),
    "http_follow_redirects": ("http", "follow_redirects"),
    "http_user_agent": ("http", "user_agent"),
    "log_level": ("logging", "level"),
    "log_format": ("logging", "format"),
    "search_max_pages": ("search", "max_pages"),
    "search_concurrency_limit": ("search", "concurrency_limit"),
    "cache_ttl_seconds": ("cache", "ttl_seconds"),
    "cache_max_entries": ("cache", "max_entries"),
    "sources_backend": ("sources", "backend"),
    "sources_dir": ("sources", "dir"),
}


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge *override* into *base* in place; non-dict values replace."""
    for key, value in override.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _deep_merge(current, value)
        else:
            base[key] = deepcopy(value)
    return base


def _site_entries(api_site: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Convert an ``api_site`` mapping (key -> site) into source entries."""
    entries: list[dict[str, Any]] = []
    for key, site in api_site.items():
        if not isinstance(site, Mapping):
            raise ValueError(f"api_site.{key} must be a mapping")
        entries.append({"key": key, **site})
    return entries


def _to_sectioned(layer: Mapping[str, Any]) -> dict[str, Any]:
    """Bring one layer into the sectioned shape ``AppConfig`` validates.

    Accepts sectioned blocks, flat keys (``log_level``, ``cache_ttl_seconds``)
    and a top-level ``api_site`` mapping as a shorthand for
    ``sources.entries``.
    """
    out: dict[str, Any] = {
        section: dict(layer[section])
        for section in _SECTIONS
        if isinstance(layer.get(section), Mapping)
    }

    for key in ("app_name", "environment"):
        if key in layer:
            out[key] = layer[key]

    if isinstance(layer.get("users"), Mapping):
        out["users"] = dict(layer["users"])

    for flat_key, (section, key) in _FLAT_KEYS.items():
        if flat_key in layer:
            out.setdefault(section, {})[key] = layer[flat_key]

    api_site = layer.get("api_site")
    if isinstance(api_site, Mapping):
        sources = out.setdefault("sources", {})
        sources["entries"] = list(sources.get("entries") or []) + _site_entries(
            api_site
        )

    return out


def _read_yaml(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(config_path)
    parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Config YAML must be a mapping, got: {type(parsed)!r}")
    return parsed


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """Build the validated ``AppConfig``.

    Precedence: defaults < YAML file < env vars (incl. ``.env``) < CLI.
    No files or directories are created.
    """
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        # Real environment variables keep priority over the .env file
        load_dotenv(dotenv_path, override=False)

    layers: list[Mapping[str, Any]] = [DEFAULT_CONFIG]
    if config_path is not None:
        layers.append(_read_yaml(config_path))
    layers.append(EnvOverrides().to_update_dict())
    layers.append(cli_overrides or {})

    merged: dict[str, Any] = {}
    for layer in layers:
        _deep_merge(merged, _to_sectioned(layer))

    return AppConfig.model_validate(merged)
