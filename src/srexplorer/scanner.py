"""Collect flashcards from every note in a vault."""

from __future__ import annotations

import logging
import re
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

import frontmatter
import yaml

from .config import DEFAULT_DECK_NAME, ExplorerSettings, SRSettings
from .decks import DeckNode, build_deck_tree
from .expander import expand
from .models import CardRecord
from .paths import iter_note_files
from .schedule import extract_schedules
from .segmenter import segment
from .study import SortMode, sort_cards

logger = logging.getLogger(__name__)

INLINE_TAG_RE = re.compile(r"(?<!\S)#([\w/-]+)")


@dataclass
class ScanProgress:
    """Progress update while notes are being parsed."""

    completed: int
    total: int
    current_note: str
    success: bool
    error: str | None = None


@dataclass
class ScanResult:
    """Everything a scan produces. Always rebuilt as a whole."""

    cards: list[CardRecord] = field(default_factory=list)
    decks: list[str] = field(default_factory=list)
    deck_tree: DeckNode = field(default_factory=DeckNode)


# ---------------------------------------------------------------------------
# Ignore patterns
# ---------------------------------------------------------------------------

def glob_to_regex(pattern: str) -> re.Pattern:
    """Translate a folder-ignore glob: ``**`` spans folders, ``*`` does not."""
    escaped = ".*".join(
        "[^/]*".join(re.escape(piece) for piece in part.split("*"))
        for part in pattern.split("**")
    )
    return re.compile(f"^{escaped}$")


def path_matches_pattern(path: str, pattern: str) -> bool:
    return glob_to_regex(pattern).match(path) is not None


def should_ignore(rel_path: str, sr_settings: SRSettings, explorer_settings: ExplorerSettings) -> bool:
    """True if the note falls under one of the plugin's ignored folders."""
    if not explorer_settings.use_sr_ignore_folders:
        return False
    return any(
        pattern and path_matches_pattern(rel_path, pattern)
        for pattern in sr_settings.note_folders_to_ignore
    )


# ---------------------------------------------------------------------------
# Deck resolution
# ---------------------------------------------------------------------------

def topic_path_from_tag(tag: str, flashcard_tags: tuple[str, ...] | list[str]) -> str | None:
    """Deck path a tag maps to under the flashcard tags.

    Returns None for unrelated tags and "" for a bare flashcard tag.
    """
    if not tag:
        return None
    clean = tag.lstrip("#")
    for flash_tag in flashcard_tags or ():
        normalized = flash_tag.lstrip("#")
        if clean == normalized:
            return ""
        if clean.startswith(normalized + "/"):
            return clean[len(normalized) + 1:]
    return None


def extract_tags(text: str) -> list[str]:
    """Frontmatter and inline tags of a note, each with a leading '#'."""
    tags: list[str] = []
    try:
        metadata = frontmatter.loads(text).metadata
    except (yaml.YAMLError, ValueError, TypeError) as e:
        logger.debug("Ignoring unparseable frontmatter: %s", e)
        metadata = {}

    raw = metadata.get("tags") or metadata.get("tag") or []
    if isinstance(raw, str):
        raw = re.split(r"[,\s]+", raw)
    if isinstance(raw, list):
        tags.extend("#" + str(t).lstrip("#") for t in raw if t)

    tags.extend("#" + t for t in INLINE_TAG_RE.findall(text) if not t.isdigit())
    return list(dict.fromkeys(tags))


def deck_names_for_note(rel_path: str, tags: list[str], settings: SRSettings) -> list[str]:
    """Deck paths a note's cards belong to. Never empty."""
    names: list[str] = []
    if settings.convert_folders_to_decks:
        folder = Path(rel_path).parent.as_posix()
        names.append(folder if folder not in ("", ".") else DEFAULT_DECK_NAME)
    else:
        for tag in tags:
            topic = topic_path_from_tag(tag, settings.flashcard_tags)
            if topic is not None:
                names.append(topic or DEFAULT_DECK_NAME)
    if not names:
        names.append(DEFAULT_DECK_NAME)
    return list(dict.fromkeys(names))


# ---------------------------------------------------------------------------
# Card collection
# ---------------------------------------------------------------------------

def cards_from_note(
    rel_path: str,
    text: str,
    deck_names: list[str],
    settings: SRSettings,
) -> list[CardRecord]:
    """Parse one note into card records, one per pair and deck."""
    deck_names = deck_names or [DEFAULT_DECK_NAME]
    multi_deck = len(deck_names) > 1
    cards = []
    for block in segment(text, settings):
        pairs = expand(block, settings)
        schedules = extract_schedules(block.text, len(pairs), settings.base_ease)
        for idx, (pair, schedule) in enumerate(zip(pairs, schedules)):
            for deck_idx, deck in enumerate(deck_names):
                card_id = f"{rel_path}:{block.first_line}:{idx}"
                if multi_deck:
                    card_id += f":{deck_idx}"
                cards.append(
                    CardRecord(
                        id=card_id,
                        deck=deck,
                        file_path=rel_path,
                        line=block.first_line + 1,
                        front=pair.front.strip(),
                        back=pair.back.strip(),
                        ease=schedule.ease,
                        interval=schedule.interval,
                        due=schedule.due,
                    )
                )
    return cards


def _parse_note(vault: Path, note: Path, settings: SRSettings) -> list[CardRecord]:
    rel_path = note.relative_to(vault).as_posix()
    text = note.read_text(encoding="utf-8")
    tags = [] if settings.convert_folders_to_decks else extract_tags(text)
    return cards_from_note(rel_path, text, deck_names_for_note(rel_path, tags, settings), settings)


def assemble(cards: list[CardRecord]) -> ScanResult:
    """Sort cards and build the deck tree and deck list from them."""
    ordered = sort_cards(cards, SortMode.EASE)
    return ScanResult(
        cards=ordered,
        decks=sorted({card.deck for card in ordered}),
        deck_tree=build_deck_tree(ordered),
    )


def scan_vault(
    vault: Path,
    sr_settings: SRSettings | None = None,
    explorer_settings: ExplorerSettings | None = None,
    progress_callback: Callable[[ScanProgress], None] | None = None,
) -> ScanResult:
    """Read every note in parallel and build the card list and deck tree.

    Notes that cannot be read are logged and skipped.
    """
    vault = Path(vault)
    sr_settings = sr_settings or SRSettings()
    explorer_settings = explorer_settings or ExplorerSettings()

    notes = [
        note for note in iter_note_files(vault)
        if not should_ignore(note.relative_to(vault).as_posix(), sr_settings, explorer_settings)
    ]
    per_note: dict[Path, list[CardRecord]] = {}
    total = len(notes)
    completed = 0

    with ThreadPoolExecutor(max_workers=max(1, explorer_settings.max_workers)) as executor:
        future_to_note = {
            executor.submit(_parse_note, vault, note, sr_settings): note
            for note in notes
        }
        for future in as_completed(future_to_note):
            note = future_to_note[future]
            completed += 1
            error = None
            try:
                per_note[note] = future.result()
            except (OSError, UnicodeDecodeError) as e:
                error = str(e)
                logger.warning("Skipping unreadable note %s: %s", note, e)

            if progress_callback:
                progress_callback(
                    ScanProgress(
                        completed=completed,
                        total=total,
                        current_note=note.relative_to(vault).as_posix(),
                        success=error is None,
                        error=error,
                    )
                )

    cards = [card for note in sorted(per_note) for card in per_note[note]]
    logger.debug("Scanned %d notes, found %d cards", total, len(cards))
    return assemble(cards)


class CardCache:
    """Holds the latest complete scan result.

    ``invalidate`` bumps a generation counter; a scan that started before
    the bump is handed back to its caller but never published.
    """

    def __init__(self, loader: Callable[[], ScanResult]):
        self._loader = loader
        self._lock = threading.Lock()
        self._generation = 0
        self._result: ScanResult | None = None

    @property
    def generation(self) -> int:
        return self._generation

    def invalidate(self) -> None:
        with self._lock:
            self._generation += 1
            self._result = None

    def get(self) -> ScanResult:
        with self._lock:
            if self._result is not None:
                return self._result
            generation = self._generation

        result = self._loader()

        with self._lock:
            if self._generation != generation:
                return result
            if self._result is None:
                self._result = result
            return self._result
