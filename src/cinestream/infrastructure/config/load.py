"""Layered configuration loading: defaults < YAML < ENV (.env) < CLI."""

from __future__ import annotations

from collections.abc import Iterable
from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

import structlog
import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides

log = structlog.get_logger(__name__)

# Flat keys (ENV / CLI spelling) -> (section, key) in config.yaml.
FLAT_KEYS: dict[str, tuple[str, str]] = {
    "http_timeout_seconds": ("http", "timeout_seconds"),
    "http_max_redirects": ("http", "max_redirects"),
    "http_user_agent": ("http", "user_agent"),
    "log_level": ("logging", "level"),
    "log_format": ("logging", "format"),
    "store_max_age_seconds": ("store", "max_age_seconds"),
    "store_sweep_interval_seconds": ("store", "sweep_interval_seconds"),
    "search_max_results": ("search", "max_results"),
    "search_concurrent": ("search", "concurrent"),
    "search_source_timeout_seconds": ("search", "source_timeout_seconds"),
    "sources_enabled": ("sources", "enabled"),
}

_SECTIONS = frozenset(section for section, _ in FLAT_KEYS.values())
_TOP_LEVEL = ("app_name", "environment")


def _merge_into(target: dict[str, Any], layer: Mapping[str, Any]) -> None:
    """Merge *layer* into *target* in place; nested sections merge key-wise."""
    for key, value in layer.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _merge_into(current, value)
        else:
            target[key] = deepcopy(value)


def _sectioned(layer: Mapping[str, Any]) -> dict[str, Any]:
    """Bring a layer into the sectioned config.yaml shape.

    Accepts sectioned blocks (``{"http": {...}}``), flat keys
    (``http_timeout_seconds``) or both. Flat keys win over a block in the
    same layer. Unknown keys are dropped.
    """
    out: dict[str, Any] = {
        key: layer[key] for key in _TOP_LEVEL if key in layer
    }
    for section in _SECTIONS:
        block = layer.get(section)
        if isinstance(block, Mapping):
            out[section] = dict(block)

    for flat_key, (section, key) in FLAT_KEYS.items():
        if flat_key in layer:
            out.setdefault(section, {})[key] = layer[flat_key]
    return out


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Config YAML must be a mapping, got: {type(parsed)!r}")
    return parsed


def merge_layers(layers: Iterable[Mapping[str, Any]]) -> dict[str, Any]:
    """Fold *layers* (lowest precedence first) into one sectioned dict."""
    merged: dict[str, Any] = {}
    for layer in layers:
        _merge_into(merged, _sectioned(layer))
    return merged


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """Build the validated ``AppConfig``.

    A ``.env`` file only fills variables that are not already set in the
    process environment. Reads files, never creates any.
    """
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        load_dotenv(dotenv_path, override=False)

    layers: list[Mapping[str, Any]] = [DEFAULT_CONFIG]
    if config_path is not None:
        layers.append(_read_yaml(config_path))
    layers.append(EnvOverrides().to_update_dict())
    layers.append(cli_overrides or {})

    config = AppConfig.model_validate(merge_layers(layers))
    log.debug(
        "config_loaded",
        config_path=str(config_path) if config_path else None,
        environment=config.environment,
    )
    return config
