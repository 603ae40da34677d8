"""Pydantic models and helper utilities for configuration values."""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from wordgloss import logging_manager

from .constants import (
    CACHE_CLEANUP_INTERVAL_SECONDS,
    CACHE_TTL_SECONDS,
    CONTEXT_MAX_LENGTH,
    DEFAULT_CACHE_SIZE,
    DEFAULT_FREQUENCY_THRESHOLD,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_SOURCE_LANG,
    DEFAULT_TARGET_LANG,
    DEFAULT_TRANSLATION_PROVIDER,
    DEFAULT_VOCABULARY_CACHE_SIZE,
    DEFAULT_VOCABULARY_PROVIDER,
    ENV_PREFIX,
    MAX_CONCURRENCY_LIMIT,
    VALID_VOCABULARY_PROVIDERS,
)

logger = logging_manager.get_logger().getChild("config")


class MatchOptionsConfig(BaseModel):
    """Tag matching options as they appear in configuration documents."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    target_tags: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("target_tags", "targetTags")
    )
    mode: Literal["any", "all", "exact"] = "any"
    include_base: bool = Field(
        default=False, validation_alias=AliasChoices("include_base", "includeBase")
    )
    min_star_rating: int = Field(
        default=0,
        ge=0,
        le=5,
        validation_alias=AliasChoices("min_star_rating", "minStarRating", "minCollins"),
    )

    @field_validator("mode", mode="before")
    @classmethod
    def _lower_mode(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("target_tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.replace(",", " ").split()
        if isinstance(value, (list, tuple, set)):
            return [str(tag).strip().lower() for tag in value if str(tag).strip()]
        return value


class AnnotatorSettings(BaseModel):
    """Typed representation of the annotator configuration."""

    model_config = ConfigDict(extra="ignore")

    source_lang: str = DEFAULT_SOURCE_LANG
    target_lang: str = DEFAULT_TARGET_LANG

    vocabulary_provider: str = DEFAULT_VOCABULARY_PROVIDER
    vocabulary_dir: Optional[str] = None
    match_options: MatchOptionsConfig = Field(default_factory=MatchOptionsConfig)
    tier_levels: List[str] = Field(default_factory=lambda: ["cet6"])
    tier_mode: Literal["above", "exact", "below"] = "above"
    tier_include_base: bool = False
    frequency_threshold: int = Field(default=DEFAULT_FREQUENCY_THRESHOLD, ge=1)
    frequency_mode: Literal["below", "above"] = "below"

    translation_provider: str = DEFAULT_TRANSLATION_PROVIDER
    fetch_translation: bool = True
    max_concurrency: int = Field(default=DEFAULT_MAX_CONCURRENCY, ge=1, le=MAX_CONCURRENCY_LIMIT)
    context_max_length: int = Field(default=CONTEXT_MAX_LENGTH, ge=20)

    vocabulary_cache_size: int = Field(default=DEFAULT_VOCABULARY_CACHE_SIZE, ge=1)
    vocabulary_cache_ttl_seconds: float = Field(default=CACHE_TTL_SECONDS, gt=0)
    translation_cache_size: int = Field(default=DEFAULT_CACHE_SIZE, ge=0)
    translation_cache_ttl_seconds: float = Field(default=CACHE_TTL_SECONDS, gt=0)
    cache_cleanup_interval_seconds: float = Field(default=CACHE_CLEANUP_INTERVAL_SECONDS, gt=0)
    cache_auto_cleanup: bool = True

    log_level: str = "INFO"
    log_file: Optional[str] = None

    @field_validator("vocabulary_provider")
    @classmethod
    def _check_provider(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in VALID_VOCABULARY_PROVIDERS:
            raise ValueError(
                f"vocabulary_provider must be one of {sorted(VALID_VOCABULARY_PROVIDERS)}"
            )
        return normalized


class EnvironmentOverrides(BaseSettings):
    """Configuration overrides sourced from ``WORDGLOSS_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="ignore")

    source_lang: Optional[str] = None
    target_lang: Optional[str] = None
    vocabulary_provider: Optional[str] = None
    vocabulary_dir: Optional[str] = None
    translation_provider: Optional[str] = None
    max_concurrency: Optional[int] = None
    context_max_length: Optional[int] = None
    vocabulary_cache_size: Optional[int] = None
    translation_cache_size: Optional[int] = None
    log_level: Optional[str] = None
    log_file: Optional[str] = None


def load_environment_overrides() -> Dict[str, Any]:
    """Return configuration overrides sourced from environment variables."""

    try:
        overrides = EnvironmentOverrides()
    except ValidationError as exc:
        logger.warning(
            "Invalid environment configuration detected; using defaults.",
            extra={"event": "config.env.validation_error", "error": str(exc)},
        )
        return {}
    return overrides.model_dump(exclude_none=True)


def apply_settings_updates(
    settings: AnnotatorSettings, updates: Dict[str, Any]
) -> AnnotatorSettings:
    """Return a validated copy of ``settings`` updated with ``updates``."""

    if not updates:
        return settings
    payload = settings.model_dump()
    payload.update(updates)
    return AnnotatorSettings.model_validate(payload)


__all__ = [
    "AnnotatorSettings",
    "EnvironmentOverrides",
    "MatchOptionsConfig",
    "apply_settings_updates",
    "load_environment_overrides",
]
