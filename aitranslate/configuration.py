"""Prepper-backed configuration loader for AI Translate."""

from __future__ import annotations

import os
import pathlib
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Mapping, Sequence

from dotenv import dotenv_values
from prepper import (
    Field,
    IoError,
    SchemaError,
    SchemaModel,
    ValidationError,
    model_validator,
)
from prepper.config import ConfigInstance
from prepper.loaders import _parse_file, _path_to_source, discover_file_paths
from prepper.merge import merge_layer
from prepper.provenance import ProvenanceRecorder

from .deadline import DEFAULT_REQUEST_TIMEOUT
from .errors import TranslationProviderConfigurationError

APP_NAME = "AITranslate"

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_CONCURRENCY = 5
MIN_CONCURRENCY = 1
MAX_CONCURRENCY = 20

ProviderName = Literal["openai", "azure_openai", "echo"]


class AITranslateConfig(SchemaModel):
    """Schema describing all supported configuration options."""

    LLM_PROVIDER: ProviderName = Field(
        default="openai",
        description="Translation provider selection.",
    )
    LANGUAGES: str | None = Field(
        default=None,
        description="Comma separated target language codes.",
    )
    OPENAI_API_KEY: str | None = Field(default=None, secret=True)
    OPENAI_HOST: str | None = Field(default=None)
    MODEL: str | None = Field(default=None)
    CONCURRENCY: int | None = Field(default=None)
    REQUEST_TIMEOUT: float | None = Field(default=None)
    AZURE_OPENAI_API_KEY: str | None = Field(default=None, secret=True)
    AZURE_OPENAI_ENDPOINT: str | None = Field(default=None)
    AZURE_OPENAI_API_VERSION: str | None = Field(default=None)
    AZURE_OPENAI_DEPLOYMENT_NAME: str | None = Field(default=None)
    AITRANSLATE_PROVIDER_DEBUG: bool = Field(default=False)

    @model_validator(mode="before")
    def _normalise_provider(data: Any) -> Any:
        if isinstance(data, dict):
            raw_value = data.get("LLM_PROVIDER")
            if isinstance(raw_value, str):
                data["LLM_PROVIDER"] = normalise_provider_name(raw_value)
        return data


def normalise_provider_name(value: str | None) -> str:
    """Map user supplied provider names onto the supported identifiers."""

    normalized = (value or "openai").strip().lower().replace("-", "_")
    synonyms = {
        "azure_open_ai": "azure_openai",
        "azureopenai": "azure_openai",
        "azure": "azure_openai",
        "gpt": "openai",
        "default": "openai",
        "noop": "echo",
        "mock": "echo",
    }
    return synonyms.get(normalized, normalized)


@dataclass(frozen=True)
class RunSettings:
    """Fully resolved settings threaded through a translation run."""

    input_path: pathlib.Path
    languages: tuple[str, ...]
    provider: str = "openai"
    api_key: str | None = None
    host: str | None = None
    model: str = DEFAULT_MODEL
    concurrency: int = DEFAULT_CONCURRENCY
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    verbose: bool = False
    skip_backup: bool = False
    force: bool = False
    provider_debug: bool = False
    azure_endpoint: str | None = None
    azure_api_version: str | None = None


@lru_cache(maxsize=1)
def _load_config_instance(app_dir: Path | None = None) -> ConfigInstance:
    """Load configuration layers once and cache the immutable instance."""

    base_dir = app_dir or Path.cwd()
    try:
        provenance = ProvenanceRecorder()
        combined = _load_discovered_yaml(app_dir=base_dir, provenance=provenance)
        _merge_env_sources(
            combined,
            provenance=provenance,
            app_dir=base_dir,
            schema=AITranslateConfig,
        )

        # Every value may also arrive on the command line, so an empty
        # configuration is valid and validated against the defaults.
        model = AITranslateConfig.validate(combined, provenance=provenance)

        return ConfigInstance(
            model=model,
            provenance=provenance,
            env_prefix=None,
            schema_cls=AITranslateConfig,
        )
    except IoError as exc:
        raise TranslationProviderConfigurationError(
            f"Configuration files could not be read: {exc}"
        ) from exc
    except SchemaError as exc:
        raise TranslationProviderConfigurationError(
            f"Configuration schema error: {exc}"
        ) from exc
    except ValidationError as exc:
        issues = _format_validation_errors(exc.to_dict())
        raise TranslationProviderConfigurationError(issues) from exc


def _load_discovered_yaml(
    *,
    app_dir: Path,
    provenance: ProvenanceRecorder,
) -> dict[str, Any]:
    """Load YAML configuration files using Prepper's discovery rules."""

    result: dict[str, Any] = {}
    discovered = discover_file_paths(
        APP_NAME,
        "yaml",
        app_dir=app_dir,
        extra_paths=None,
    )
    for path, label in discovered:
        parsed = _parse_file(path, "yaml")
        if not isinstance(parsed, Mapping):
            raise IoError(
                f"Invalid configuration file {path}: expected a mapping at the root."
            )
        source = _path_to_source(label, "yaml", path)
        merge_layer(result, parsed, provenance=provenance, source=source, layer="file")
    return result


def _merge_env_sources(
    target: dict[str, Any],
    *,
    provenance: ProvenanceRecorder,
    app_dir: Path,
    schema: type[SchemaModel],
) -> None:
    """Merge .env and process environment variables into the target mapping."""

    allowed = set(schema.__field_infos__.keys())

    def merge_values(values: Mapping[str, str], *, source_prefix: str) -> None:
        for key, value in sorted(values.items()):
            if value is None:
                continue
            if key not in allowed:
                continue
            merge_layer(
                target,
                {key: value},
                provenance=provenance,
                source=f"env:{source_prefix}:{key}",
                layer="env",
            )

    dotenv_path = app_dir / ".env"
    if dotenv_path.exists():
        dotenv_content = dotenv_values(dotenv_path)
        merge_values(
            {k: v for k, v in dotenv_content.items() if v is not None},
            source_prefix=".env",
        )

    merge_values(
        {k: v for k, v in os.environ.items() if isinstance(v, str)},
        source_prefix="process",
    )


def _format_validation_errors(entries: Sequence[dict[str, Any]]) -> str:
    details: list[str] = []
    for entry in entries:
        path = entry.get("path") or []
        if isinstance(path, (list, tuple)):
            location = ".".join(str(part) for part in path if part not in {None, ""})
        else:
            location = str(path)
        message = str(entry.get("message") or entry.get("msg") or "Invalid value")
        source = entry.get("source")
        origin = f" (source: {source})" if source else ""
        prefix = f"{location}: " if location else ""
        details.append(f"- {prefix}{message}{origin}")
    return "Configuration validation errors detected:\n" + "\n".join(details)


def get_config(app_dir: Path | None = None) -> ConfigInstance:
    """Return the immutable configuration instance."""

    return _load_config_instance(app_dir=app_dir)


def get_settings(app_dir: Path | None = None) -> AITranslateConfig:
    """Return the validated schema model for typed access."""

    return get_config(app_dir=app_dir).model()


def parse_languages(value: str | Sequence[str] | None) -> tuple[str, ...]:
    """Split a comma separated language list, dropping blanks and duplicates."""

    if value is None:
        return ()
    parts = value.split(",") if isinstance(value, str) else value
    languages: list[str] = []
    for part in parts:
        code = part.strip()
        if code and code not in languages:
            languages.append(code)
    return tuple(languages)


def clamp_concurrency(value: int) -> int:
    """Bound the concurrency width to the supported range."""

    return max(MIN_CONCURRENCY, min(MAX_CONCURRENCY, value))


def _first_given(*values: Any) -> Any:
    """Return the first value that was supplied, treating only None as missing."""

    for value in values:
        if value is not None:
            return value
    return None


def resolve_settings(
    *,
    input_path: pathlib.Path,
    config: AITranslateConfig,
    languages: str | None = None,
    api_key: str | None = None,
    host: str | None = None,
    model: str | None = None,
    concurrency: int | None = None,
    request_timeout: float | None = None,
    provider: str | None = None,
    verbose: bool = False,
    skip_backup: bool = False,
    force: bool = False,
    provider_debug: bool = False,
) -> RunSettings:
    """Combine explicit arguments with configuration values.

    Explicit arguments always take precedence over values read from the
    configuration layers. Raises
    :class:`TranslationProviderConfigurationError` when a required value is
    missing after both sources were consulted.
    """

    provider_name = normalise_provider_name(provider or config.LLM_PROVIDER)
    resolved_languages = parse_languages(languages or config.LANGUAGES)
    resolved_timeout = _first_given(
        request_timeout, config.REQUEST_TIMEOUT, DEFAULT_REQUEST_TIMEOUT
    )
    resolved_concurrency = _first_given(
        concurrency, config.CONCURRENCY, DEFAULT_CONCURRENCY
    )

    errors: list[str] = []
    if not resolved_languages:
        errors.append(
            "Target languages must be given with -l/--languages or the "
            "LANGUAGES configuration key."
        )
    if resolved_timeout <= 0:
        errors.append("The request timeout must be a positive number of seconds.")

    resolved_key: str | None
    resolved_model: str
    azure_endpoint = None
    azure_api_version = None
    if provider_name == "openai":
        resolved_key = api_key or config.OPENAI_API_KEY
        resolved_model = model or config.MODEL or DEFAULT_MODEL
        if not resolved_key:
            errors.append(
                "An OpenAI API key must be given with -k/--openai-key or the "
                "OPENAI_API_KEY configuration key."
            )
    elif provider_name == "azure_openai":
        resolved_key = api_key or config.AZURE_OPENAI_API_KEY
        resolved_model = model or config.AZURE_OPENAI_DEPLOYMENT_NAME or ""
        azure_endpoint = host or config.AZURE_OPENAI_ENDPOINT
        azure_api_version = config.AZURE_OPENAI_API_VERSION
        missing = [
            name
            for name, value in {
                "AZURE_OPENAI_API_KEY": resolved_key,
                "AZURE_OPENAI_ENDPOINT": azure_endpoint,
                "AZURE_OPENAI_API_VERSION": azure_api_version,
                "AZURE_OPENAI_DEPLOYMENT_NAME": resolved_model,
            }.items()
            if not value
        ]
        if missing:
            errors.append(
                "The following Azure OpenAI settings must be provided when "
                f"LLM_PROVIDER is 'azure_openai': {', '.join(missing)}."
            )
    elif provider_name == "echo":
        resolved_key = None
        resolved_model = model or config.MODEL or "echo"
    else:
        raise TranslationProviderConfigurationError(
            f"Unknown translation provider '{provider or config.LLM_PROVIDER}'."
        )

    if errors:
        bullet_list = "\n".join(f"- {message}" for message in errors)
        raise TranslationProviderConfigurationError(
            "Configuration validation errors detected:\n" + bullet_list
        )

    return RunSettings(
        input_path=input_path,
        languages=resolved_languages,
        provider=provider_name,
        api_key=resolved_key,
        host=(host or config.OPENAI_HOST) if provider_name == "openai" else None,
        model=resolved_model,
        concurrency=clamp_concurrency(resolved_concurrency),
        request_timeout=float(resolved_timeout),
        verbose=verbose,
        skip_backup=skip_backup,
        force=force,
        provider_debug=provider_debug or config.AITRANSLATE_PROVIDER_DEBUG,
        azure_endpoint=azure_endpoint,
        azure_api_version=azure_api_version,
    )
