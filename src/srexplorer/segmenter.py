"""Split note text into raw question blocks.

The segmenter walks a note line by line. Blank lines (or a configured end
marker) close the current block; fenced code is copied through untouched;
HTML comments that are not scheduling markers are dropped. A block is kept
only if one of its lines identified its card type.
"""

from __future__ import annotations

import re

from .config import SRSettings
from .models import CardType, RawQuestionBlock

SR_COMMENT_PREFIX = "<!--SR:"
COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"

FENCE_RE = re.compile(r"^(`{3,}|~{3,})")
CLOZE_SYNTAX_RE = re.compile(r"{{c\d*::", re.IGNORECASE)
CURLY_CLOZE_RE = re.compile(r"{{.*?}}")
HIGHLIGHT_CLOZE_RE = re.compile(r"==.+==")
BOLD_CLOZE_RE = re.compile(r"\*\*.+\*\*")


def marker_inside_code(line: str, marker: str, index: int) -> bool:
    """True if the marker at index sits inside an inline code span."""
    before = line.count("`", 0, index)
    after = line.count("`", index + len(marker))
    return before % 2 == 1 and after % 2 == 1


def has_inline_marker(line: str, marker: str) -> bool:
    """Check whether line contains marker outside inline code.

    Only the first occurrence is considered.
    """
    if not marker:
        return False
    index = line.find(marker)
    if index == -1:
        return False
    return not marker_inside_code(line, marker, index)


def is_cloze_line(line: str, settings: SRSettings) -> bool:
    """Check whether a line carries cloze markup under the given settings."""
    if CLOZE_SYNTAX_RE.search(line):
        return True
    if settings.convert_curly_brackets_to_clozes and CURLY_CLOZE_RE.search(line):
        return True
    if settings.convert_highlights_to_clozes and HIGHLIGHT_CLOZE_RE.search(line):
        return True
    if settings.convert_bold_text_to_clozes and BOLD_CLOZE_RE.search(line):
        return True
    return False


def _inline_separators(settings: SRSettings) -> list[tuple[str, CardType]]:
    separators = [
        (settings.single_line_card_separator, CardType.SINGLE_LINE_BASIC),
        (settings.single_line_reversed_card_separator, CardType.SINGLE_LINE_REVERSED),
    ]
    # Longest first so ":::" is not mistaken for "::"
    return sorted(separators, key=lambda item: len(item[0]), reverse=True)


def _skip_comment(lines: list[str], start: int) -> int:
    """Return the index of the first line after the comment opened at start."""
    i = start
    closed = COMMENT_CLOSE in lines[i][len(COMMENT_OPEN):]
    while not closed and i + 1 < len(lines):
        i += 1
        closed = COMMENT_CLOSE in lines[i]
    return i + 1


def _make_block(card_type: CardType, card_lines: list[str], first: int, last: int) -> RawQuestionBlock:
    return RawQuestionBlock(
        card_type=card_type,
        text="\n".join(card_lines).rstrip(),
        first_line=first,
        last_line=last,
    )


def segment(text: str, settings: SRSettings | None = None) -> list[RawQuestionBlock]:
    """Scan note text and return its question blocks in order."""
    settings = settings or SRSettings()
    inline_separators = _inline_separators(settings)
    end_marker = settings.multiline_card_end_marker

    lines = text.replace("\r\n", "\n").split("\n")
    blocks: list[RawQuestionBlock] = []
    card_lines: list[str] = []
    card_type: CardType | None = None
    first_line = 0

    i = 0
    while i < len(lines):
        line = lines[i]
        stripped = line.strip()

        if line.startswith(COMMENT_OPEN) and not line.startswith(SR_COMMENT_PREFIX):
            i = _skip_comment(lines, i)
            continue

        fence = FENCE_RE.match(line)
        if fence:
            marker = fence.group(1)
            card_lines.append(line.rstrip())
            i += 1
            while i < len(lines):
                card_lines.append(lines[i])
                closed = lines[i].startswith(marker)
                i += 1
                if closed:
                    break
            continue

        is_empty = not stripped
        at_end_marker = bool(end_marker) and stripped == end_marker
        if (is_empty and (not end_marker or card_type is None)) or at_end_marker:
            if card_type is not None:
                blocks.append(_make_block(card_type, card_lines, first_line, i - 1))
                card_type = None
            card_lines = []
            first_line = i + 1
            i += 1
            continue

        card_lines.append(line.rstrip())

        for separator, kind in inline_separators:
            if has_inline_marker(line, separator):
                card_type = kind
                break

        if card_type is not None and card_type.is_single_line:
            if i + 1 < len(lines) and lines[i + 1].startswith(SR_COMMENT_PREFIX):
                i += 1
                card_lines.append(lines[i])
            blocks.append(_make_block(card_type, card_lines, first_line, i))
            card_type = None
            card_lines = []
            first_line = i + 1
            i += 1
            continue

        has_prior_content = len(card_lines) > 1
        if stripped == settings.multiline_card_separator:
            if has_prior_content:
                card_type = CardType.MULTI_LINE_BASIC
        elif stripped == settings.multiline_reversed_card_separator:
            if has_prior_content:
                card_type = CardType.MULTI_LINE_REVERSED
        elif card_type is None and is_cloze_line(line, settings):
            card_type = CardType.CLOZE

        i += 1

    if card_type is not None and card_lines:
        blocks.append(_make_block(card_type, card_lines, first_line, len(lines) - 1))
    return blocks
