"""Tests for the string catalog document model."""

import pytest

from aitranslate.errors import CatalogFormatError
from aitranslate.structures import LocalizationUnit, StringsCatalog


def test_decodes_catalog_shapes(sample_catalog_data):
    catalog = StringsCatalog.from_dict(sample_catalog_data)

    assert catalog.source_language == "en"
    assert catalog.version == "1.0"
    assert set(catalog.strings) == {"Hello", "Goodbye", "%lld items", "BrandName", "%@"}

    goodbye = catalog.strings["Goodbye"]
    assert goodbye.comment == "Shown when the user signs out"
    assert goodbye.extraction_state == "manual"
    assert goodbye.unit_for("fr").string_unit.value == "Au revoir"
    assert goodbye.unit_for("de") is None

    assert catalog.strings["BrandName"].should_translate is False
    assert catalog.strings["Hello"].should_translate is None
    assert catalog.strings["Hello"].localizations is None


def test_unit_shape_predicates():
    plain = LocalizationUnit.plain("translated", "Bonjour")
    empty = LocalizationUnit.plain("new", "")
    plural = LocalizationUnit(variations={"plural": {}})
    substituted = LocalizationUnit(substitutions={"count": {}})

    assert plain.is_supported_format and plain.has_translation
    assert empty.is_supported_format and not empty.has_translation
    assert not plural.is_supported_format and not plural.has_translation
    assert not substituted.is_supported_format
    assert LocalizationUnit().is_supported_format


def test_round_trip_preserves_unknown_keys():
    data = {
        "sourceLanguage": "en",
        "version": "1.0",
        "strings": {
            "Title": {
                "isCommentAutoGenerated": True,
                "localizations": {
                    "de": {
                        "stringUnit": {"state": "needs_review", "value": "Titel"},
                    },
                    "fr": {
                        "substitutions": {
                            "arg1": {
                                "formatSpecifier": "lld",
                                "variations": {"plural": {"other": {"stringUnit": {"state": "new", "value": "x"}}}},
                            }
                        }
                    },
                },
            }
        },
    }

    assert StringsCatalog.from_dict(data).to_dict() == data


def test_set_unit_creates_localizations(sample_catalog_data):
    catalog = StringsCatalog.from_dict(sample_catalog_data)
    group = catalog.strings["Hello"]

    group.set_unit("fr", LocalizationUnit.plain("translated", "Bonjour"))

    assert group.to_dict() == {
        "localizations": {"fr": {"stringUnit": {"state": "translated", "value": "Bonjour"}}}
    }


@pytest.mark.parametrize(
    "data",
    [
        [],
        {"version": "1.0", "strings": {}},
        {"sourceLanguage": "en", "strings": {}},
        {"sourceLanguage": "en", "version": "1.0", "strings": {"a": "b"}},
        {"sourceLanguage": "en", "version": "1.0", "strings": {"a": {"shouldTranslate": "no"}}},
    ],
)
def test_rejects_malformed_catalogs(data):
    with pytest.raises(CatalogFormatError):
        StringsCatalog.from_dict(data)
