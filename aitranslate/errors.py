"""Error definitions for the AI Translate catalog filler."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class ErrorCategory(Enum):
    """Categorises errors handled during a run."""

    UNSUPPORTED_FORMAT = auto()
    PROVIDER = auto()
    TIMEOUT = auto()
    BACKUP = auto()


class AITranslateError(Exception):
    """Base exception for all custom errors."""


class CatalogFormatError(AITranslateError):
    """Raised when the string catalog cannot be read or decoded."""


class PersistenceError(AITranslateError):
    """Raised when a checkpoint cannot be written to disk."""


class TranslationProviderConfigurationError(AITranslateError):
    """Raised when the translation provider is misconfigured."""


class TranslationProviderError(AITranslateError):
    """Raised when the translation provider fails for a single request."""


class TranslationTimeout(TranslationProviderError):
    """Raised when a provider request exceeds its deadline."""

    def __init__(self, seconds: float) -> None:
        super().__init__(f"Translation request timed out after {seconds:g} seconds.")
        self.seconds = seconds


@dataclass
class ErrorRecord:
    """Stores context for a handled error."""

    category: ErrorCategory
    message: str
    details: Optional[str] = None
