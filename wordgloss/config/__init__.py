"""Configuration management for wordgloss."""
from __future__ import annotations

from .constants import (
    BASE_TAGS,
    CACHE_TTL_SECONDS,
    CONTEXT_MAX_LENGTH,
    DEFAULT_CACHE_SIZE,
    DEFAULT_MAX_CONCURRENCY,
    LEVEL_PRIORITY,
    WORD_BOUNDARY_SEARCH_LENGTH,
)
from .loader import get_settings, load_configuration, reset_settings
from .settings import (
    AnnotatorSettings,
    EnvironmentOverrides,
    MatchOptionsConfig,
    apply_settings_updates,
    load_environment_overrides,
)

__all__ = [
    "AnnotatorSettings",
    "BASE_TAGS",
    "CACHE_TTL_SECONDS",
    "CONTEXT_MAX_LENGTH",
    "DEFAULT_CACHE_SIZE",
    "DEFAULT_MAX_CONCURRENCY",
    "EnvironmentOverrides",
    "LEVEL_PRIORITY",
    "MatchOptionsConfig",
    "WORD_BOUNDARY_SEARCH_LENGTH",
    "apply_settings_updates",
    "get_settings",
    "load_configuration",
    "load_environment_overrides",
    "reset_settings",
]
