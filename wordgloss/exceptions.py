"""Exception hierarchy for vocabulary matching, translation and scanning."""

from __future__ import annotations

from typing import Optional


class WordglossError(RuntimeError):
    """Base exception raised by wordgloss components."""


class ConfigurationError(WordglossError):
    """Raised when configuration values fail validation."""


class VocabularyLoadError(WordglossError):
    """Raised when vocabulary data for a tier cannot be loaded.

    The owning provider is unusable until it is initialized again.
    """

    def __init__(
        self,
        message: str,
        *,
        tier: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.tier = tier
        self.cause = cause
        detail = f" (tier={tier})" if tier else ""
        if cause is not None:
            detail += f": {cause.__class__.__name__}: {cause}"
        super().__init__(f"{message}{detail}")


class ProviderNotInitializedError(WordglossError):
    """Raised when a provider is queried before ``initialize()`` completed."""

    def __init__(self, provider_name: str) -> None:
        self.provider_name = provider_name
        super().__init__(
            f'Vocabulary provider "{provider_name}" is not initialized. '
            "Call initialize() first."
        )


class UnknownProviderError(WordglossError, KeyError):
    """Raised when a provider name has not been registered."""

    def __init__(self, name: str, *, kind: str = "vocabulary") -> None:
        self.name = name
        self.kind = kind
        super().__init__(f'{kind.capitalize()} provider "{name}" not found')

    def __str__(self) -> str:
        return self.args[0]


class NoActiveProviderError(WordglossError):
    """Raised when a service is used before an active provider was selected."""


class MissingCollaboratorError(WordglossError, TypeError):
    """Raised when a required collaborator was not supplied at construction."""

    def __init__(self, owner: str, collaborator: str) -> None:
        self.owner = owner
        self.collaborator = collaborator
        super().__init__(f"{owner} requires a {collaborator}; got None")


class TranslationError(WordglossError):
    """Raised when a single translation request fails."""

    def __init__(
        self,
        message: str,
        *,
        word: Optional[str] = None,
        provider: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.word = word
        self.provider = provider
        self.cause = cause
        super().__init__(message)


__all__ = [
    "ConfigurationError",
    "MissingCollaboratorError",
    "NoActiveProviderError",
    "ProviderNotInitializedError",
    "TranslationError",
    "UnknownProviderError",
    "VocabularyLoadError",
    "WordglossError",
]
