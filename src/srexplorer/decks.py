"""Hierarchical deck tree built from card records."""

from __future__ import annotations

import unicodedata
import weakref
from typing import Iterable

from .config import DEFAULT_DECK_NAME
from .models import CardRecord


def text_sort_key(name: str) -> tuple[str, str]:
    """Accent- and case-insensitive ordering with a stable tiebreak on the raw text."""
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), name)


def split_deck_path(path: str | None) -> list[str]:
    """Split a deck path into its non-empty segments."""
    parts = [part for part in (path or "").split("/") if part]
    return parts or [DEFAULT_DECK_NAME]


class DeckNode:
    """A deck in the tree. The root has no name and no parent."""

    def __init__(self, name: str = "", parent: DeckNode | None = None):
        self.name = name
        self._parent = weakref.ref(parent) if parent is not None else None
        # Fixed at creation; ancestors may be freed while this node is still held
        self._path = f"{parent.path}/{name}" if parent is not None and not parent.is_root else name
        self.children: list[DeckNode] = []
        self.cards: list[CardRecord] = []

    def __repr__(self) -> str:
        return f"DeckNode({self.path!r}, children={len(self.children)}, cards={len(self.cards)})"

    @property
    def parent(self) -> DeckNode | None:
        return self._parent() if self._parent is not None else None

    @property
    def is_root(self) -> bool:
        return self._parent is None

    @property
    def path(self) -> str:
        """Slash-joined names from the root down to this node."""
        return self._path

    def child(self, name: str) -> DeckNode | None:
        for child in self.children:
            if child.name == name:
                return child
        return None

    def get_or_create_child(self, name: str) -> DeckNode:
        child = self.child(name)
        if child is None:
            child = DeckNode(name, self)
            self.children.append(child)
        return child

    def find(self, path: str) -> DeckNode | None:
        """Resolve a slash path relative to this node."""
        node = self
        for part in (p for p in path.split("/") if p):
            node = node.child(part)
            if node is None:
                return None
        return node

    def all_cards(self) -> list[CardRecord]:
        """Cards at this node followed by those of every descendant."""
        cards = list(self.cards)
        for child in self.children:
            cards.extend(child.all_cards())
        return cards

    def total_count(self) -> int:
        """Number of cards in this subtree, recomputed on every call."""
        return len(self.cards) + sum(child.total_count() for child in self.children)

    def sort_children(self) -> None:
        self.children.sort(key=lambda node: text_sort_key(node.name))
        for child in self.children:
            child.sort_children()


def build_deck_tree(cards: Iterable[CardRecord]) -> DeckNode:
    """Place every card under its deck path and return the sorted root."""
    root = DeckNode()
    for card in cards:
        node = root
        for part in split_deck_path(card.deck):
            node = node.get_or_create_child(part)
        node.cards.append(card)
    root.sort_children()
    return root
