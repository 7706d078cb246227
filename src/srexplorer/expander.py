"""Turn raw question blocks into front/back pairs."""

from __future__ import annotations

import re

from .config import SRSettings
from .models import CardType, FrontBackPair, RawQuestionBlock

CLOZE_RE = re.compile(r"{{c\d*::(.*?)(?:::(.*?))?}}")
HIDDEN_PLACEHOLDER = "[...]"


def split_inline(text: str, separator: str) -> tuple[str, str]:
    """Split text at the first occurrence of separator."""
    index = text.find(separator) if separator else -1
    if index == -1:
        return text, ""
    return text[:index], text[index + len(separator):]


def split_multiline(text: str, separator: str) -> tuple[str, str]:
    """Split text around the first line equal to separator (ignoring whitespace)."""
    # Fences are not tracked here: a separator line inside a fence still splits
    lines = text.split("\n")
    target = separator.strip()
    for index, line in enumerate(lines):
        if line.strip() == target:
            return "\n".join(lines[:index]), "\n".join(lines[index + 1:])
    return text, ""


def find_clozes(text: str) -> list[re.Match]:
    """All cloze occurrences in appearance order."""
    return list(CLOZE_RE.finditer(text))


def _render(text: str, matches: list[re.Match], replacements: list[str]) -> str:
    # Substitute by position so identical markup in two groups stays distinct
    parts = []
    last = 0
    for match, replacement in zip(matches, replacements):
        parts.append(text[last:match.start()])
        parts.append(replacement)
        last = match.end()
    parts.append(text[last:])
    return "".join(parts)


def expand_cloze(text: str) -> list[FrontBackPair]:
    """One pair per cloze occurrence, hiding that occurrence on the front.

    Text without cloze markup yields a single pair with the text on both sides.
    """
    matches = find_clozes(text)
    if not matches:
        return [FrontBackPair(front=text, back=text)]

    answers = [m.group(1) for m in matches]
    back = _render(text, matches, answers)
    pairs = []
    for hidden, match in enumerate(matches):
        hint = match.group(2)
        placeholder = f"[{hint}]" if hint else HIDDEN_PLACEHOLDER
        fronts = [placeholder if idx == hidden else answer for idx, answer in enumerate(answers)]
        pairs.append(FrontBackPair(front=_render(text, matches, fronts), back=back))
    return pairs


def _both_ways(side1: str, side2: str) -> list[FrontBackPair]:
    return [FrontBackPair(front=side1, back=side2), FrontBackPair(front=side2, back=side1)]


def expand(block: RawQuestionBlock, settings: SRSettings | None = None) -> list[FrontBackPair]:
    """Expand a block into its front/back pairs according to its card type."""
    settings = settings or SRSettings()
    card_type = block.card_type

    if card_type is CardType.SINGLE_LINE_BASIC:
        front, back = split_inline(block.text, settings.single_line_card_separator)
        return [FrontBackPair(front=front, back=back)]
    if card_type is CardType.SINGLE_LINE_REVERSED:
        return _both_ways(*split_inline(block.text, settings.single_line_reversed_card_separator))
    if card_type is CardType.MULTI_LINE_BASIC:
        front, back = split_multiline(block.text, settings.multiline_card_separator)
        return [FrontBackPair(front=front, back=back)]
    if card_type is CardType.MULTI_LINE_REVERSED:
        return _both_ways(*split_multiline(block.text, settings.multiline_reversed_card_separator))
    return expand_cloze(block.text)
