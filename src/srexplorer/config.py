"""Configuration management for srexplorer."""

from __future__ import annotations

import json
import logging
import shutil
from dataclasses import dataclass, fields, asdict
from pathlib import Path

from .paths import atomic_json_write, explorer_settings_file, sr_settings_file

logger = logging.getLogger(__name__)

DEFAULT_DECK_NAME = "Default"

# camelCase keys used by the spaced-repetition plugin's data.json
SR_SETTING_KEYS: dict[str, str] = {
    "flashcardTags": "flashcard_tags",
    "convertFoldersToDecks": "convert_folders_to_decks",
    "singleLineCardSeparator": "single_line_card_separator",
    "singleLineReversedCardSeparator": "single_line_reversed_card_separator",
    "multilineCardSeparator": "multiline_card_separator",
    "multilineReversedCardSeparator": "multiline_reversed_card_separator",
    "multilineCardEndMarker": "multiline_card_end_marker",
    "convertHighlightsToClozes": "convert_highlights_to_clozes",
    "convertBoldTextToClozes": "convert_bold_text_to_clozes",
    "convertCurlyBracketsToClozes": "convert_curly_brackets_to_clozes",
    "baseEase": "base_ease",
    "noteFoldersToIgnore": "note_folders_to_ignore",
}

# Card syntax that must never be empty; the end marker may be
NONEMPTY_SETTINGS = frozenset({
    "single_line_card_separator",
    "single_line_reversed_card_separator",
    "multiline_card_separator",
    "multiline_reversed_card_separator",
})

EXPLORER_SETTING_KEYS: dict[str, str] = {
    "useSrIgnoreFolders": "use_sr_ignore_folders",
    "maxWorkers": "max_workers",
}


@dataclass(frozen=True)
class SRSettings:
    """Card syntax and deck settings shared with the spaced-repetition plugin."""

    flashcard_tags: tuple[str, ...] = ("#flashcards",)
    convert_folders_to_decks: bool = True
    single_line_card_separator: str = "::"
    single_line_reversed_card_separator: str = ":::"
    multiline_card_separator: str = "?"
    multiline_reversed_card_separator: str = "??"
    multiline_card_end_marker: str = ""
    convert_highlights_to_clozes: bool = False
    convert_bold_text_to_clozes: bool = False
    convert_curly_brackets_to_clozes: bool = False
    base_ease: int = 250
    note_folders_to_ignore: tuple[str, ...] = ()


@dataclass
class ExplorerSettings:
    """Settings owned by the explorer itself."""

    use_sr_ignore_folders: bool = True
    max_workers: int = 4


def _coerce(value, default):
    """Return value converted to the type of default, or None if it doesn't fit."""
    if isinstance(default, bool):
        return value if isinstance(value, bool) else None
    if isinstance(default, int):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return int(value)
    if isinstance(default, str):
        return value if isinstance(value, str) else None
    if isinstance(default, tuple):
        if isinstance(value, str):
            value = [value]
        if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
            return tuple(value)
        return None
    return None


def _from_dict(cls, data: dict, key_map: dict[str, str]):
    defaults = cls()
    known = {f.name for f in fields(cls)}
    values = {}
    for key, value in data.items():
        name = key_map.get(key, key)
        if name not in known:
            continue
        coerced = _coerce(value, getattr(defaults, name))
        if coerced is None or (name in NONEMPTY_SETTINGS and not coerced.strip()):
            logger.debug("Ignoring invalid value for %s: %r", key, value)
            continue
        values[name] = coerced
    return cls(**values)


def settings_from_dict(data: dict | None) -> SRSettings:
    """Build SRSettings from the plugin's settings mapping.

    Accepts camelCase plugin keys or snake_case field names. Missing or
    invalid values fall back to the defaults.
    """
    if not isinstance(data, dict):
        return SRSettings()
    return _from_dict(SRSettings, data, SR_SETTING_KEYS)


def load_sr_settings(vault: Path) -> SRSettings:
    """Load the spaced-repetition plugin settings for a vault."""
    path = sr_settings_file(vault)
    if not path.exists():
        logger.debug("No spaced-repetition settings at %s; using defaults", path)
        return SRSettings()
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not load spaced-repetition settings from %s; using defaults (%s)", path, e)
        return SRSettings()
    if not isinstance(raw, dict):
        return SRSettings()
    return settings_from_dict(raw.get("settings") or {})


def load_explorer_settings(vault: Path) -> ExplorerSettings:
    """Load explorer settings, returning defaults if none are stored."""
    path = explorer_settings_file(vault)
    if not path.exists():
        return ExplorerSettings()
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise TypeError("explorer settings must be a JSON object")
    except (json.JSONDecodeError, TypeError, OSError) as e:
        # Back up corrupted settings before they get overwritten with defaults
        logger.warning("Corrupt explorer settings at %s: %s", path, e)
        try:
            shutil.copy2(path, path.with_suffix(".json.bak"))
        except OSError:
            pass
        return ExplorerSettings()
    settings = _from_dict(ExplorerSettings, data, EXPLORER_SETTING_KEYS)
    settings.max_workers = max(1, settings.max_workers)
    return settings


def save_explorer_settings(vault: Path, settings: ExplorerSettings) -> None:
    """Save explorer settings using the plugin's camelCase keys."""
    reverse = {v: k for k, v in EXPLORER_SETTING_KEYS.items()}
    data = {reverse[k]: v for k, v in asdict(settings).items()}
    atomic_json_write(explorer_settings_file(vault), data)
