"""Tests for config module."""

import json

from srexplorer.config import (
    DEFAULT_DECK_NAME,
    ExplorerSettings,
    SRSettings,
    load_explorer_settings,
    load_sr_settings,
    save_explorer_settings,
    settings_from_dict,
)
from srexplorer.paths import explorer_settings_file, sr_settings_file


def _write_sr_settings(vault, settings: dict):
    path = sr_settings_file(vault)
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps({"settings": settings}))


class TestSRSettings:
    """Tests for the SRSettings dataclass."""

    def test_default_values(self):
        settings = SRSettings()
        assert settings.flashcard_tags == ("#flashcards",)
        assert settings.convert_folders_to_decks is True
        assert settings.single_line_card_separator == "::"
        assert settings.single_line_reversed_card_separator == ":::"
        assert settings.multiline_card_separator == "?"
        assert settings.multiline_reversed_card_separator == "??"
        assert settings.multiline_card_end_marker == ""
        assert settings.base_ease == 250
        assert settings.note_folders_to_ignore == ()

    def test_default_deck_name(self):
        assert DEFAULT_DECK_NAME == "Default"

    def test_is_hashable(self):
        assert hash(SRSettings()) == hash(SRSettings())


class TestSettingsFromDict:
    """Tests for settings_from_dict."""

    def test_camel_case_keys(self):
        settings = settings_from_dict({
            "singleLineCardSeparator": "=>",
            "baseEase": 230,
            "flashcardTags": ["#cards", "#review"],
            "noteFoldersToIgnore": ["Archive/**"],
            "convertHighlightsToClozes": True,
        })
        assert settings.single_line_card_separator == "=>"
        assert settings.base_ease == 230
        assert settings.flashcard_tags == ("#cards", "#review")
        assert settings.note_folders_to_ignore == ("Archive/**",)
        assert settings.convert_highlights_to_clozes is True

    def test_snake_case_keys(self):
        assert settings_from_dict({"base_ease": 300}).base_ease == 300

    def test_invalid_values_fall_back(self):
        settings = settings_from_dict({
            "baseEase": "lots",
            "convertFoldersToDecks": "yes",
            "flashcardTags": [1, 2],
        })
        assert settings == SRSettings()

    def test_empty_separator_falls_back(self):
        settings = settings_from_dict({
            "multilineCardSeparator": "",
            "singleLineCardSeparator": "  ",
            "multilineCardEndMarker": "",
        })
        assert settings.multiline_card_separator == "?"
        assert settings.single_line_card_separator == "::"
        assert settings.multiline_card_end_marker == ""

    def test_unknown_keys_ignored(self):
        assert settings_from_dict({"showContextInCards": True}) == SRSettings()

    def test_not_a_dict(self):
        assert settings_from_dict(None) == SRSettings()
        assert settings_from_dict(["nope"]) == SRSettings()


class TestLoadSRSettings:
    """Tests for reading the plugin's settings file."""

    def test_load(self, tmp_path):
        _write_sr_settings(tmp_path, {"multilineCardSeparator": "%%", "baseEase": 270})
        settings = load_sr_settings(tmp_path)
        assert settings.multiline_card_separator == "%%"
        assert settings.base_ease == 270

    def test_missing_file(self, tmp_path):
        assert load_sr_settings(tmp_path) == SRSettings()

    def test_corrupt_file(self, tmp_path):
        path = sr_settings_file(tmp_path)
        path.parent.mkdir(parents=True)
        path.write_text("not valid json {{{")
        assert load_sr_settings(tmp_path) == SRSettings()

    def test_missing_settings_key(self, tmp_path):
        path = sr_settings_file(tmp_path)
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"data": {}}))
        assert load_sr_settings(tmp_path) == SRSettings()


class TestExplorerSettings:
    """Tests for explorer settings persistence."""

    def test_defaults(self):
        settings = ExplorerSettings()
        assert settings.use_sr_ignore_folders is True
        assert settings.max_workers == 4

    def test_missing_file(self, tmp_path):
        assert load_explorer_settings(tmp_path) == ExplorerSettings()

    def test_save_and_load(self, tmp_path):
        save_explorer_settings(tmp_path, ExplorerSettings(use_sr_ignore_folders=False, max_workers=2))
        stored = json.loads(explorer_settings_file(tmp_path).read_text())
        assert stored == {"useSrIgnoreFolders": False, "maxWorkers": 2}
        loaded = load_explorer_settings(tmp_path)
        assert loaded.use_sr_ignore_folders is False
        assert loaded.max_workers == 2

    def test_corrupt_file_backed_up(self, tmp_path):
        path = explorer_settings_file(tmp_path)
        path.parent.mkdir(parents=True)
        path.write_text("not valid json {{{")
        assert load_explorer_settings(tmp_path) == ExplorerSettings()
        assert path.with_suffix(".json.bak").exists()

    def test_workers_at_least_one(self, tmp_path):
        path = explorer_settings_file(tmp_path)
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"maxWorkers": 0}))
        assert load_explorer_settings(tmp_path).max_workers == 1
