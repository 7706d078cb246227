"""Centralized vault paths for srexplorer."""

import json
import os
import tempfile
from pathlib import Path

# Obsidian keeps per-vault configuration here
OBSIDIAN_DIR_NAME = ".obsidian"

# Settings written by the spaced-repetition plugin (read only)
SR_PLUGIN_SETTINGS = Path(OBSIDIAN_DIR_NAME) / "plugins" / "obsidian-spaced-repetition" / "data.json"

# Settings owned by the explorer
EXPLORER_SETTINGS = Path(OBSIDIAN_DIR_NAME) / "plugins" / "spaced-repetition-explorer" / "data.json"

# Notes are markdown files
NOTE_SUFFIX = ".md"


def sr_settings_file(vault: Path) -> Path:
    """Path of the spaced-repetition plugin settings inside a vault."""
    return Path(vault) / SR_PLUGIN_SETTINGS


def explorer_settings_file(vault: Path) -> Path:
    """Path of the explorer settings inside a vault."""
    return Path(vault) / EXPLORER_SETTINGS


def iter_note_files(vault: Path) -> list[Path]:
    """List markdown notes in a vault, skipping the Obsidian config folder.

    Paths are returned sorted so scans are deterministic.
    """
    vault = Path(vault)
    notes = []
    for path in vault.rglob(f"*{NOTE_SUFFIX}"):
        rel = path.relative_to(vault)
        if rel.parts and rel.parts[0] == OBSIDIAN_DIR_NAME:
            continue
        if path.is_file():
            notes.append(path)
    return sorted(notes)


def atomic_json_write(path: Path, data, *, indent: int = 2, ensure_ascii: bool = False) -> None:
    """Write JSON data to a file atomically.

    Writes to a temporary file in the same directory, then renames it
    to the target path. This prevents data loss if a crash occurs mid-write.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=indent, ensure_ascii=ensure_ascii)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
