"""High-level orchestration for string catalog translation."""

from __future__ import annotations

import asyncio
import pathlib
import time
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from .configuration import RunSettings
from .deadline import run_with_deadline
from .decisions import Decision, decide, is_untranslatable, resolve_source_text
from .documents import CheckpointWriter, load_catalog
from .errors import ErrorCategory, TranslationProviderError, TranslationTimeout
from .policy import ErrorPolicy
from .progress import ProgressTracker
from .providers import TranslationProvider, build_provider
from .structures import (
    ERROR_STATE,
    TRANSLATED_STATE,
    LocalizationGroup,
    LocalizationUnit,
    StringsCatalog,
)


class LanguageState(Enum):
    """Lifecycle of one target language within a run."""

    PENDING = "pending"
    BATCHING = "batching"
    DRAINING = "draining"
    DONE = "done"


class Outcome(Enum):
    """Terminal result of a single (entry, language) task."""

    TRANSLATED = "translated"
    COPIED = "copied"
    PASSTHROUGH = "passthrough"
    SKIPPED = "skipped"
    UNSUPPORTED = "unsupported"
    FAILED = "failed"


@dataclass
class LanguageReport:
    """Per-language tally of task outcomes."""

    language: str
    outcomes: Counter = field(default_factory=Counter)

    def __getitem__(self, outcome: Outcome) -> int:
        return self.outcomes[outcome]


@dataclass
class TranslationSummary:
    """Report returned after processing a catalog."""

    input_path: pathlib.Path
    provider_name: str
    model: str | None
    source_language: str
    languages: Sequence[str]
    total_entries: int
    checkpoints: int
    elapsed_seconds: float
    reports: List[LanguageReport] = field(default_factory=list)
    error_messages: List[str] = field(default_factory=list)

    def total(self, outcome: Outcome) -> int:
        return sum(report[outcome] for report in self.reports)

    @property
    def total_errors(self) -> int:
        return len(self.error_messages)


def make_batches(keys: Sequence[str], width: int) -> List[List[str]]:
    """Split entry keys into consecutive batches of at most ``width`` keys."""

    width = max(1, width)
    return [list(keys[index : index + width]) for index in range(0, len(keys), width)]


class TranslationRunner:
    """Fills missing catalog translations one target language at a time.

    Within a language, entries are processed in batches of ``concurrency``
    tasks. Each task owns exactly one ``(entry, language)`` slot of the shared
    catalog, so the catalog itself needs no locking. A batch fully drains
    before the next one starts, and every completed language is checkpointed
    before the next language begins.
    """

    def __init__(
        self,
        *,
        settings: RunSettings,
        provider: Optional[TranslationProvider] = None,
        catalog: Optional[StringsCatalog] = None,
        writer: Optional[CheckpointWriter] = None,
    ) -> None:
        self.settings = settings
        self.error_policy = ErrorPolicy(verbose=settings.verbose)
        self.provider = provider
        self.catalog = catalog
        self.writer = writer or CheckpointWriter(
            settings.input_path,
            skip_backup=settings.skip_backup,
            error_policy=self.error_policy,
            verbose=settings.verbose,
        )
        self.language_states: Dict[str, LanguageState] = {
            language: LanguageState.PENDING for language in settings.languages
        }

    async def run(self) -> TranslationSummary:
        start_time = time.time()

        catalog = self.catalog or load_catalog(self.settings.input_path)
        self.catalog = catalog

        owns_provider = self.provider is None
        provider = self.provider or build_provider(self.settings)
        self.provider = provider

        if self.settings.verbose:
            print(f"[📁] Using languages: {', '.join(self.settings.languages)}")
            print(f"[🤖] Using model: {self.settings.model}")
            if self.settings.host:
                print(f"[🌐] Using host: {self.settings.host}")
            print(
                f"[🧵] Translating {len(catalog.strings)} entries "
                f"with {self.settings.concurrency} concurrent requests."
            )

        reports: List[LanguageReport] = []
        try:
            for language in self.settings.languages:
                reports.append(await self.translate_language(catalog, language))
                await asyncio.to_thread(self.writer.persist, catalog)
        finally:
            if owns_provider:
                await provider.close()

        return TranslationSummary(
            input_path=self.settings.input_path,
            provider_name=getattr(provider, "name", type(provider).__name__),
            model=self.settings.model,
            source_language=catalog.source_language,
            languages=list(self.settings.languages),
            total_entries=len(catalog.strings),
            checkpoints=self.writer.writes,
            elapsed_seconds=time.time() - start_time,
            reports=reports,
            error_messages=[record.message for record in self.error_policy.records],
        )

    async def translate_language(
        self,
        catalog: StringsCatalog,
        language: str,
    ) -> LanguageReport:
        """Process every entry of the catalog for one target language."""

        if self.provider is None:
            self.provider = build_provider(self.settings)

        report = LanguageReport(language=language)
        keys = sorted(catalog.strings)
        tracker = ProgressTracker(len(keys))

        self.language_states[language] = LanguageState.BATCHING
        for batch in make_batches(keys, self.settings.concurrency):
            self.language_states[language] = LanguageState.DRAINING
            outcomes = await asyncio.gather(
                *(
                    self._process_entry(catalog, key, language, tracker)
                    for key in batch
                )
            )
            report.outcomes.update(outcomes)
            self.language_states[language] = LanguageState.BATCHING

        self.language_states[language] = LanguageState.DONE
        print(f"[✅] [{language}] 100% ({tracker.count}/{tracker.total})")
        return report

    async def _process_entry(
        self,
        catalog: StringsCatalog,
        key: str,
        language: str,
        tracker: ProgressTracker,
    ) -> Outcome:
        try:
            return await self._translate_entry(catalog, key, language)
        finally:
            count, percentage = tracker.increment()
            if percentage < 100 and tracker.should_report(percentage):
                print(f"[⏳] [{language}] {percentage}% ({count}/{tracker.total})")

    async def _translate_entry(
        self,
        catalog: StringsCatalog,
        key: str,
        language: str,
    ) -> Outcome:
        group = catalog.strings[key]
        existing = group.unit_for(language)
        decision = decide(
            existing,
            force=self.settings.force,
            should_translate=group.should_translate,
        )

        if decision is Decision.WARN_UNSUPPORTED:
            self.error_policy.handle_error(
                ErrorCategory.UNSUPPORTED_FORMAT,
                f"Unsupported format in entry with key: {key}",
            )
            return Outcome.UNSUPPORTED
        if decision is Decision.SKIP:
            return Outcome.SKIPPED
        if decision is Decision.COPY_KEY:
            group.set_unit(language, LocalizationUnit.plain(TRANSLATED_STATE, key))
            if self.settings.verbose:
                print(f"[{language}] {key} -> skip")
            return Outcome.COPIED

        source_text = resolve_source_text(key, group, catalog.source_language)
        if is_untranslatable(source_text):
            group.set_unit(
                language, LocalizationUnit.plain(TRANSLATED_STATE, source_text)
            )
            return Outcome.PASSTHROUGH

        try:
            translation = await run_with_deadline(
                self.settings.request_timeout,
                self.provider.translate(  # type: ignore[union-attr]
                    source_text,
                    source_language=catalog.source_language,
                    target_language=language,
                    context=group.comment,
                ),
            )
            if not translation or not translation.strip():
                raise TranslationProviderError("Translation provider returned no text.")
        except TranslationTimeout as exc:
            return self._record_failure(
                ErrorCategory.TIMEOUT, group, source_text, language, existing, exc
            )
        except Exception as exc:
            return self._record_failure(
                ErrorCategory.PROVIDER, group, source_text, language, existing, exc
            )

        group.set_unit(language, LocalizationUnit.plain(TRANSLATED_STATE, translation))
        if self.settings.verbose:
            print(f"[{language}] {source_text} -> {translation}")
        return Outcome.TRANSLATED

    def _record_failure(
        self,
        category: ErrorCategory,
        group: LocalizationGroup,
        source_text: str,
        language: str,
        existing: Optional[LocalizationUnit],
        exc: Exception,
    ) -> Outcome:
        self.error_policy.handle_error(
            category,
            f"Failed to translate {source_text!r} into {language}",
            details=str(exc),
        )
        # A previously good translation survives a failed forced refresh.
        if existing is None or not existing.has_translation:
            group.set_unit(language, LocalizationUnit.plain(ERROR_STATE, ""))
        return Outcome.FAILED
