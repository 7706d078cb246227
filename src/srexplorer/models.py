"""Data models for the spaced repetition explorer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CardType(str, Enum):
    """Kind of question block found in a note."""

    SINGLE_LINE_BASIC = "single_line_basic"
    SINGLE_LINE_REVERSED = "single_line_reversed"
    MULTI_LINE_BASIC = "multi_line_basic"
    MULTI_LINE_REVERSED = "multi_line_reversed"
    CLOZE = "cloze"

    @property
    def is_single_line(self) -> bool:
        return self in (CardType.SINGLE_LINE_BASIC, CardType.SINGLE_LINE_REVERSED)


@dataclass(frozen=True)
class RawQuestionBlock:
    """A span of note text recognized as one card.

    ``first_line`` and ``last_line`` are 0-based and inclusive.
    """

    card_type: CardType
    text: str
    first_line: int
    last_line: int


@dataclass(frozen=True)
class FrontBackPair:
    """One quizzable direction derived from a block."""

    front: str
    back: str


@dataclass(frozen=True)
class ScheduleRecord:
    """Scheduling state previously written into the note."""

    ease: int
    interval: int | None = None
    due: str | None = None


@dataclass(frozen=True)
class CardRecord:
    """A flashcard ready for browsing."""

    id: str
    deck: str
    file_path: str
    line: int
    front: str
    back: str
    ease: int
    interval: int | None = None
    due: str | None = None
