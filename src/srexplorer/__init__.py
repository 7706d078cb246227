"""Spaced repetition explorer - browse flashcards embedded in markdown notes."""

__version__ = "0.1.0"
