"""Configuration loading utilities."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from wordgloss import logging_manager
from wordgloss.exceptions import ConfigurationError

from .settings import AnnotatorSettings, apply_settings_updates, load_environment_overrides

logger = logging_manager.get_logger().getChild("config")

_ACTIVE_SETTINGS: Optional[AnnotatorSettings] = None


def _read_config_json(path: Path, label: str = "configuration") -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError as exc:
        raise ConfigurationError(f"No {label} found at {path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Failed to parse {label} at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"{label.capitalize()} at {path} must be a JSON object")
    logger.debug(
        "Loaded %s from %s",
        label,
        path,
        extra={"event": "config.file.loaded"},
    )
    return data


def _deep_merge_dict(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), dict):
            result[key] = _deep_merge_dict(result[key], value)
        else:
            result[key] = value
    return result


def load_configuration(
    config_file: Optional[str | Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> AnnotatorSettings:
    """Load the layered configuration and activate it.

    Layers, lowest priority first: model defaults, the optional JSON file,
    explicit ``overrides`` and finally ``WORDGLOSS_*`` environment variables.
    """

    global _ACTIVE_SETTINGS

    payload: Dict[str, Any] = {}
    if config_file:
        path = Path(config_file).expanduser()
        if not path.is_absolute():
            path = (Path.cwd() / path).resolve()
        payload = _deep_merge_dict(payload, _read_config_json(path))
    if overrides:
        payload = _deep_merge_dict(payload, overrides)

    try:
        settings = AnnotatorSettings.model_validate(payload)
        settings = apply_settings_updates(settings, load_environment_overrides())
    except ValidationError as exc:
        raise ConfigurationError("Invalid configuration detected") from exc

    _ACTIVE_SETTINGS = settings
    logger.info(
        "Configuration loaded",
        extra={
            "event": "config.loaded",
            "vocabulary_provider": settings.vocabulary_provider,
            "translation_provider": settings.translation_provider,
        },
    )
    return settings


def get_settings() -> AnnotatorSettings:
    """Return the currently loaded :class:`AnnotatorSettings` instance."""

    global _ACTIVE_SETTINGS
    if _ACTIVE_SETTINGS is None:
        try:
            _ACTIVE_SETTINGS = apply_settings_updates(
                AnnotatorSettings(), load_environment_overrides()
            )
        except ValidationError as exc:
            raise ConfigurationError("Invalid configuration detected") from exc
    return _ACTIVE_SETTINGS


def reset_settings() -> None:
    """Forget the active settings so the next access reloads them."""

    global _ACTIVE_SETTINGS
    _ACTIVE_SETTINGS = None


__all__ = ["get_settings", "load_configuration", "reset_settings"]
