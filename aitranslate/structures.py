"""Core data structures for the AI Translate catalog filler."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .errors import CatalogFormatError


TRANSLATED_STATE = "translated"
ERROR_STATE = "error"

JsonObject = Dict[str, Any]


def _expect_mapping(value: Any, location: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise CatalogFormatError(f"Expected an object at {location}.")
    return value


def _optional_str(data: Mapping[str, Any], key: str, location: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise CatalogFormatError(f"Expected a string for '{key}' at {location}.")
    return value


def _remaining(data: Mapping[str, Any], known: set[str]) -> JsonObject:
    return {key: value for key, value in data.items() if key not in known}


@dataclass
class StringUnit:
    """A plain translated value together with its state tag."""

    state: str
    value: str
    extra: JsonObject = field(default_factory=dict)

    KEYS = {"state", "value"}

    @classmethod
    def from_dict(cls, data: Any, location: str) -> "StringUnit":
        data = _expect_mapping(data, location)
        state = _optional_str(data, "state", location) or ""
        value = _optional_str(data, "value", location) or ""
        return cls(state=state, value=value, extra=_remaining(data, cls.KEYS))

    def to_dict(self) -> JsonObject:
        payload = dict(self.extra)
        payload["state"] = self.state
        payload["value"] = self.value
        return payload


@dataclass
class LocalizationUnit:
    """The per-language value of an entry.

    Exactly one shape is expected: a plain ``string_unit``, a ``variations``
    set (plural or device) or a ``substitutions`` set. Variations and
    substitutions are kept as raw JSON and written back untouched.
    """

    string_unit: Optional[StringUnit] = None
    variations: Optional[JsonObject] = None
    substitutions: Optional[JsonObject] = None
    extra: JsonObject = field(default_factory=dict)

    KEYS = {"stringUnit", "variations", "substitutions"}

    @property
    def is_supported_format(self) -> bool:
        return self.variations is None and self.substitutions is None

    @property
    def has_translation(self) -> bool:
        return (
            self.is_supported_format
            and self.string_unit is not None
            and bool(self.string_unit.value)
        )

    @classmethod
    def plain(cls, state: str, value: str) -> "LocalizationUnit":
        """Build a plain string unit."""

        return cls(string_unit=StringUnit(state=state, value=value))

    @classmethod
    def from_dict(cls, data: Any, location: str) -> "LocalizationUnit":
        data = _expect_mapping(data, location)
        string_unit = None
        if data.get("stringUnit") is not None:
            string_unit = StringUnit.from_dict(
                data["stringUnit"], f"{location}.stringUnit"
            )
        variations = data.get("variations")
        if variations is not None:
            variations = dict(_expect_mapping(variations, f"{location}.variations"))
        substitutions = data.get("substitutions")
        if substitutions is not None:
            substitutions = dict(
                _expect_mapping(substitutions, f"{location}.substitutions")
            )
        return cls(
            string_unit=string_unit,
            variations=variations,
            substitutions=substitutions,
            extra=_remaining(data, cls.KEYS),
        )

    def to_dict(self) -> JsonObject:
        payload = dict(self.extra)
        if self.string_unit is not None:
            payload["stringUnit"] = self.string_unit.to_dict()
        if self.variations is not None:
            payload["variations"] = self.variations
        if self.substitutions is not None:
            payload["substitutions"] = self.substitutions
        return payload


@dataclass
class LocalizationGroup:
    """All localizations of a single catalog entry."""

    comment: Optional[str] = None
    extraction_state: Optional[str] = None
    should_translate: Optional[bool] = None
    localizations: Optional[Dict[str, LocalizationUnit]] = None
    extra: JsonObject = field(default_factory=dict)

    KEYS = {"comment", "extractionState", "shouldTranslate", "localizations"}

    def unit_for(self, language: str) -> Optional[LocalizationUnit]:
        if not self.localizations:
            return None
        return self.localizations.get(language)

    def set_unit(self, language: str, unit: LocalizationUnit) -> None:
        if self.localizations is None:
            self.localizations = {}
        self.localizations[language] = unit

    @classmethod
    def from_dict(cls, data: Any, location: str) -> "LocalizationGroup":
        data = _expect_mapping(data, location)
        should_translate = data.get("shouldTranslate")
        if should_translate is not None and not isinstance(should_translate, bool):
            raise CatalogFormatError(
                f"Expected a boolean for 'shouldTranslate' at {location}."
            )

        localizations = None
        raw_localizations = data.get("localizations")
        if raw_localizations is not None:
            raw_localizations = _expect_mapping(
                raw_localizations, f"{location}.localizations"
            )
            localizations = {
                language: LocalizationUnit.from_dict(
                    unit, f"{location}.localizations.{language}"
                )
                for language, unit in raw_localizations.items()
            }

        return cls(
            comment=_optional_str(data, "comment", location),
            extraction_state=_optional_str(data, "extractionState", location),
            should_translate=should_translate,
            localizations=localizations,
            extra=_remaining(data, cls.KEYS),
        )

    def to_dict(self) -> JsonObject:
        payload = dict(self.extra)
        if self.comment is not None:
            payload["comment"] = self.comment
        if self.extraction_state is not None:
            payload["extractionState"] = self.extraction_state
        if self.should_translate is not None:
            payload["shouldTranslate"] = self.should_translate
        if self.localizations is not None:
            payload["localizations"] = {
                language: unit.to_dict()
                for language, unit in self.localizations.items()
            }
        return payload


@dataclass
class StringsCatalog:
    """An in-memory string catalog shared by every task of a run."""

    source_language: str
    version: str
    strings: Dict[str, LocalizationGroup] = field(default_factory=dict)
    extra: JsonObject = field(default_factory=dict)

    KEYS = {"sourceLanguage", "version", "strings"}

    @classmethod
    def from_dict(cls, data: Any) -> "StringsCatalog":
        data = _expect_mapping(data, "the catalog root")
        source_language = data.get("sourceLanguage")
        if not isinstance(source_language, str) or not source_language:
            raise CatalogFormatError("The catalog is missing 'sourceLanguage'.")
        version = data.get("version")
        if not isinstance(version, str):
            raise CatalogFormatError("The catalog is missing 'version'.")
        raw_strings = _expect_mapping(data.get("strings", {}), "strings")
        strings = {
            key: LocalizationGroup.from_dict(group, f"strings[{key!r}]")
            for key, group in raw_strings.items()
        }
        return cls(
            source_language=source_language,
            version=version,
            strings=strings,
            extra=_remaining(data, cls.KEYS),
        )

    def to_dict(self) -> JsonObject:
        payload = dict(self.extra)
        payload["sourceLanguage"] = self.source_language
        payload["version"] = self.version
        payload["strings"] = {
            key: group.to_dict() for key, group in self.strings.items()
        }
        return payload
