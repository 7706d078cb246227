"""Card ordering and review navigation."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .decks import text_sort_key
from .models import CardRecord


class SortMode(str, Enum):
    EASE = "ease"
    DUE = "due"


def parse_due_date(due: str | None) -> float:
    """Sortable value for a due date; new or unparseable dates sort last."""
    # The plugin writes YYYY-MM-DD, or 0 for new cards
    if not due or due == "0":
        return math.inf
    try:
        return float(datetime.strptime(due, "%Y-%m-%d").toordinal())
    except ValueError:
        return math.inf


def sort_cards(cards: list[CardRecord], mode: SortMode | str = SortMode.EASE) -> list[CardRecord]:
    """Return cards ordered by ease (or due date), then by front text."""
    try:
        mode = SortMode(mode)
    except ValueError:
        mode = SortMode.EASE

    if mode is SortMode.DUE:
        return sorted(cards, key=lambda c: (parse_due_date(c.due), text_sort_key(c.front)))
    return sorted(cards, key=lambda c: (c.ease, text_sort_key(c.front)))


@dataclass
class ReviewSession:
    """Cyclic walk over the cards of one deck."""

    deck: str
    cards: list[CardRecord] = field(default_factory=list)
    index: int = 0
    showing_back: bool = False

    @classmethod
    def for_cards(cls, deck: str, cards: list[CardRecord], mode: SortMode | str = SortMode.EASE) -> ReviewSession:
        return cls(deck=deck, cards=sort_cards(cards, mode))

    @property
    def total(self) -> int:
        return len(self.cards)

    @property
    def current(self) -> CardRecord | None:
        if not self.cards:
            return None
        return self.cards[self.index]

    @property
    def position(self) -> int:
        """1-based position of the current card, 0 when empty."""
        return self.index + 1 if self.cards else 0

    def shift(self, delta: int) -> CardRecord | None:
        """Move by delta cards, wrapping around, and hide the answer."""
        if not self.cards:
            return None
        self.index = (self.index + delta) % len(self.cards)
        self.showing_back = False
        return self.current

    def toggle(self) -> bool:
        """Flip between front and back. Returns True when the back is shown."""
        if not self.cards:
            return False
        self.showing_back = not self.showing_back
        return self.showing_back
