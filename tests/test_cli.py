"""Tests for the command line entry point."""

import json

import pytest

from aitranslate import cli
from aitranslate.documents import CheckpointWriter, backup_path_for
from aitranslate.errors import PersistenceError


@pytest.fixture
def patched_config(monkeypatch, config_values):
    def install(**values):
        monkeypatch.setattr(cli, "get_settings", lambda: config_values(**values))

    install()
    return install


def test_main_fills_catalog_with_echo_provider(catalog_path, patched_config, capsys):
    exit_code = cli.main([str(catalog_path), "-l", "fr,de", "-p", "echo", "-c", "2"])

    assert exit_code == 0
    saved = json.loads(catalog_path.read_text(encoding="utf-8"))
    hello = saved["strings"]["Hello"]["localizations"]
    assert hello["fr"]["stringUnit"] == {"state": "translated", "value": "Hello"}
    assert hello["de"]["stringUnit"] == {"state": "translated", "value": "Hello"}
    assert backup_path_for(catalog_path).exists()
    output = capsys.readouterr().out
    assert "Unsupported format in entry with key: %lld items" in output
    assert "Translations time" in output


def test_main_uses_configured_languages(catalog_path, patched_config):
    patched_config(LANGUAGES="ja", LLM_PROVIDER="echo")

    assert cli.main([str(catalog_path), "--skip-backup"]) == 0

    saved = json.loads(catalog_path.read_text(encoding="utf-8"))
    assert "ja" in saved["strings"]["Hello"]["localizations"]
    assert not backup_path_for(catalog_path).exists()


def test_main_reports_missing_configuration(catalog_path, patched_config, capsys):
    assert cli.main([str(catalog_path)]) == 1

    output = capsys.readouterr().out
    assert "LANGUAGES" in output
    assert "OPENAI_API_KEY" in output


def test_main_reports_missing_input(tmp_path, patched_config, capsys):
    assert cli.main([str(tmp_path / "nope.xcstrings"), "-l", "fr", "-p", "echo"]) == 1
    assert "Input file not found" in capsys.readouterr().out


def test_main_reports_malformed_catalog(tmp_path, patched_config, capsys):
    path = tmp_path / "Broken.xcstrings"
    path.write_text("[]", encoding="utf-8")

    assert cli.main([str(path), "-l", "fr", "-p", "echo"]) == 1
    assert "Expected an object" in capsys.readouterr().out



def test_main_stops_on_checkpoint_failure(catalog_path, patched_config, monkeypatch, capsys):
    def fail(self, catalog):
        raise PersistenceError(f"Could not write checkpoint to {self.path}: read-only")

    monkeypatch.setattr(CheckpointWriter, "persist", fail)

    assert cli.main([str(catalog_path), "-l", "fr,de", "-p", "echo"]) == 1

    output = capsys.readouterr().out
    assert "read-only" in output
    assert "completed languages were saved" in output
    assert "Translations time" not in output


def test_main_reports_unexpected_errors(catalog_path, patched_config, monkeypatch, capsys):
    class BrokenRunner:
        def __init__(self, **kwargs):
            pass

        async def run(self):
            raise RuntimeError("worker crashed")

    monkeypatch.setattr(cli, "TranslationRunner", BrokenRunner)

    assert cli.main([str(catalog_path), "-l", "fr", "-p", "echo"]) == 1

    output = capsys.readouterr().out
    assert "worker crashed" in output
    assert "An unexpected error occurred" in output

@pytest.mark.parametrize(
    "seconds, expected",
    [(0.2, "0 seconds"), (1, "1 second"), (65, "1 minute, 5 seconds"), (3600, "1 hour")],
)
def test_format_duration(seconds, expected):
    assert cli.format_duration(seconds) == expected
