"""Shared fixtures for the AI Translate test suite."""

from __future__ import annotations

import asyncio
import json
import pathlib
from types import SimpleNamespace
from typing import Callable, Dict, List, Optional

import pytest

from aitranslate.configuration import RunSettings
from aitranslate.errors import TranslationProviderError
from aitranslate.providers import TranslationProvider


class FakeProvider(TranslationProvider):
    """In-memory provider that records calls and concurrency."""

    name = "fake"

    def __init__(
        self,
        responses: Optional[Dict[str, str]] = None,
        *,
        delay: float = 0.0,
        failing: tuple[str, ...] = (),
        hanging: tuple[str, ...] = (),
        on_call: Optional[Callable[[str, str], None]] = None,
    ) -> None:
        self.responses = responses or {}
        self.delay = delay
        self.failing = set(failing)
        self.hanging = set(hanging)
        self.on_call = on_call
        self.calls: List[tuple[str, str, str, Optional[str]]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    async def translate(
        self,
        text: str,
        *,
        source_language: str,
        target_language: str,
        context: str | None = None,
    ) -> str:
        self.calls.append((text, source_language, target_language, context))
        if self.on_call is not None:
            self.on_call(text, target_language)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if text in self.hanging:
                await asyncio.sleep(3600)
            if self.delay:
                await asyncio.sleep(self.delay)
            if text in self.failing:
                raise TranslationProviderError(f"boom: {text}")
            return self.responses.get(text, f"{text} [{target_language}]")
        finally:
            self.in_flight -= 1

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def sample_catalog_data() -> dict:
    return {
        "sourceLanguage": "en",
        "version": "1.0",
        "strings": {
            "Hello": {},
            "Goodbye": {
                "comment": "Shown when the user signs out",
                "extractionState": "manual",
                "localizations": {
                    "fr": {"stringUnit": {"state": "translated", "value": "Au revoir"}},
                },
            },
            "%lld items": {
                "localizations": {
                    "fr": {
                        "variations": {
                            "plural": {
                                "one": {"stringUnit": {"state": "translated", "value": "%lld élément"}},
                                "other": {"stringUnit": {"state": "translated", "value": "%lld éléments"}},
                            }
                        }
                    }
                }
            },
            "BrandName": {"shouldTranslate": False},
            "%@": {},
        },
    }


@pytest.fixture
def catalog_path(tmp_path: pathlib.Path, sample_catalog_data: dict) -> pathlib.Path:
    path = tmp_path / "Localizable.xcstrings"
    path.write_text(json.dumps(sample_catalog_data, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def make_settings(catalog_path: pathlib.Path) -> Callable[..., RunSettings]:
    def factory(**overrides) -> RunSettings:
        values = {
            "input_path": catalog_path,
            "languages": ("fr",),
            "provider": "echo",
            "model": "test-model",
            "concurrency": 5,
            "request_timeout": 5.0,
        }
        values.update(overrides)
        return RunSettings(**values)

    return factory


@pytest.fixture
def config_values() -> Callable[..., SimpleNamespace]:
    """Build a stand-in for the validated configuration model."""

    def factory(**overrides) -> SimpleNamespace:
        values = {
            "LLM_PROVIDER": "openai",
            "LANGUAGES": None,
            "OPENAI_API_KEY": None,
            "OPENAI_HOST": None,
            "MODEL": None,
            "CONCURRENCY": None,
            "REQUEST_TIMEOUT": None,
            "AZURE_OPENAI_API_KEY": None,
            "AZURE_OPENAI_ENDPOINT": None,
            "AZURE_OPENAI_API_VERSION": None,
            "AZURE_OPENAI_DEPLOYMENT_NAME": None,
            "AITRANSLATE_PROVIDER_DEBUG": False,
        }
        values.update(overrides)
        return SimpleNamespace(**values)

    return factory
