"""Translation provider abstractions."""

from __future__ import annotations

import json
import sys
from abc import ABC, abstractmethod
from typing import Any

from .configuration import RunSettings
from .errors import (
    TranslationProviderConfigurationError,
    TranslationProviderError,
)

SYSTEM_PROMPT = (
    "You are a translator tool that translates UI strings for a software "
    "application. Your input is a JSON object with a source language, a target "
    "language, the original text and optionally some context describing how the "
    "text is used within the application. "
    "In your response include *only* the translation, and do not include any "
    "metadata, tags, periods, quotes, or new lines, unless included in the "
    "original text. "
    "Placeholders (like %@, %d, %1$@, etc) must be preserved exactly as they "
    "appear in the original text. "
    "Treat multi-letter abbreviations (such as common technical acronyms like "
    '"HTML", "URL", "API", "HTTP", "HTTPS", "JSON", "XML", "CPU", "GPU", "RAM", '
    '"ID", "UI", "UX", etc) as case-sensitive and do not translate them.'
)


def build_request_payload(
    text: str,
    *,
    source_language: str,
    target_language: str,
    context: str | None,
) -> dict[str, str]:
    """Build the structured user message sent alongside the system prompt."""

    payload = {
        "source_language": source_language,
        "target_language": target_language,
        "original": text,
    }
    if context:
        payload["context"] = context
    return payload


class TranslationProvider(ABC):
    """Abstract adapter for translation providers."""

    name = "provider"

    @abstractmethod
    async def translate(
        self,
        text: str,
        *,
        source_language: str,
        target_language: str,
        context: str | None = None,
    ) -> str:
        """Translate one string and return the translated text."""

    async def close(self) -> None:
        """Release network resources held by the provider."""


class EchoTranslationProvider(TranslationProvider):
    """A provider that returns the original text (useful for testing)."""

    name = "echo"

    async def translate(
        self,
        text: str,
        *,
        source_language: str,
        target_language: str,
        context: str | None = None,
    ) -> str:
        return text


class OpenAITranslationProvider(TranslationProvider):
    """Translation provider that uses the OpenAI chat completions API."""

    name = "openai"

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        host: str | None = None,
        debug: bool = False,
    ) -> None:
        if not api_key:
            raise TranslationProviderConfigurationError(
                "OpenAI configuration missing. Provide an API key."
            )
        self.debug = debug
        self.model = model
        self.base_url = host_to_base_url(host)
        self._client = self._build_client(api_key)

    def _build_client(self, api_key: str) -> Any:
        try:
            from openai import AsyncOpenAI  # type: ignore
        except ImportError as exc:  # pragma: no cover - import guard
            raise TranslationProviderConfigurationError(
                "OpenAI Python SDK not installed. Install with `pip install openai`."
            ) from exc

        return AsyncOpenAI(api_key=api_key, base_url=self.base_url)

    async def translate(
        self,
        text: str,
        *,
        source_language: str,
        target_language: str,
        context: str | None = None,
    ) -> str:
        user_payload = build_request_payload(
            text,
            source_language=source_language,
            target_language=target_language,
            context=context,
        )
        self._log_debug("provider.request.payload", user_payload)

        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": json.dumps(user_payload, ensure_ascii=False),
                    },
                ],
            )
        except Exception as exc:  # pragma: no cover - network call
            raise TranslationProviderError(
                f"Translation service temporarily unavailable: {exc}"
            ) from exc
        self._log_debug("provider.response.raw", self._safe_dump_response(response))

        translation = self._extract_content(response)
        self._log_debug("provider.response.text", translation)
        return translation

    async def close(self) -> None:
        await self._client.close()

    def _extract_content(self, response: Any) -> str:
        """Return the text of the first usable choice of a chat response."""

        choices = getattr(response, "choices", None) or []
        for choice in choices:
            message = getattr(choice, "message", None)
            if message is None:
                continue
            content = getattr(message, "content", None)
            if isinstance(content, list):
                parts: list[str] = []
                for part in content:
                    text_value = getattr(part, "text", None)
                    if text_value is None and isinstance(part, dict):
                        text_value = part.get("text")
                    if text_value:
                        parts.append(str(text_value))
                content = "".join(parts)
            if content:
                stripped = self._strip_code_fence(str(content))
                if stripped:
                    return stripped

        raise TranslationProviderError(
            "Translation provider response empty or unrecognised."
        )

    def _log_debug(self, label: str, payload: Any) -> None:
        """Emit structured debug information when enabled."""

        if not getattr(self, "debug", False):
            return
        try:
            if isinstance(payload, (dict, list)):
                message = json.dumps(payload, ensure_ascii=False, indent=2)
            else:
                message = str(payload)
        except (TypeError, ValueError):
            message = repr(payload)
        print(f"[ai-translate][provider-debug] {label}:\n{message}", file=sys.stderr)

    def _safe_dump_response(self, response: Any) -> Any:
        """Best-effort conversion of SDK response objects into JSON-friendly data."""

        candidate = getattr(response, "model_dump", None)
        if candidate:
            try:
                return candidate()
            except (TypeError, ValueError):
                pass
        return str(response)

    def _strip_code_fence(self, text: str) -> str:
        """Remove leading/trailing markdown code fences if present."""

        stripped = text.strip()
        if not stripped.startswith("```"):
            return stripped

        # Drop opening fence and optional language hint.
        first_newline = stripped.find("\n")
        if first_newline == -1:
            return stripped
        body = stripped[first_newline + 1 :]
        closing_index = body.rfind("```")
        if closing_index != -1:
            body = body[:closing_index]
        return body.strip()


class AzureOpenAITranslationProvider(OpenAITranslationProvider):
    """Translation provider backed by an Azure OpenAI deployment."""

    name = "azure_openai"

    def __init__(
        self,
        *,
        api_key: str,
        deployment_name: str,
        endpoint: str,
        api_version: str,
        debug: bool = False,
    ) -> None:
        self.endpoint = endpoint
        self.api_version = api_version
        super().__init__(api_key=api_key, model=deployment_name, debug=debug)

    def _build_client(self, api_key: str) -> Any:
        try:
            from openai import AsyncAzureOpenAI  # type: ignore
        except ImportError as exc:  # pragma: no cover - import guard
            raise TranslationProviderConfigurationError(
                "OpenAI Python SDK not installed. Install with `pip install openai`."
            ) from exc

        return AsyncAzureOpenAI(
            api_key=api_key,
            api_version=self.api_version,
            azure_endpoint=self.endpoint,
        )


def host_to_base_url(host: str | None) -> str | None:
    """Turn a bare proxy host such as ``api.example.com`` into an API base URL."""

    if not host or not host.strip():
        return None
    host = host.strip().rstrip("/")
    if "://" in host:
        return host
    return f"https://{host}/v1"


def build_provider(settings: RunSettings) -> TranslationProvider:
    """Factory to create the provider selected by the resolved settings."""

    if settings.provider == "openai":
        return OpenAITranslationProvider(
            api_key=settings.api_key or "",
            model=settings.model,
            host=settings.host,
            debug=settings.provider_debug,
        )
    if settings.provider == "azure_openai":
        return AzureOpenAITranslationProvider(
            api_key=settings.api_key or "",
            deployment_name=settings.model,
            endpoint=settings.azure_endpoint or "",
            api_version=settings.azure_api_version or "",
            debug=settings.provider_debug,
        )
    if settings.provider == "echo":
        return EchoTranslationProvider()
    raise TranslationProviderConfigurationError(
        f"Unknown translation provider '{settings.provider}'."
    )
