"""Recover scheduling data written into notes by the spaced-repetition plugin.

Two marker forms are understood::

    !2024-01-01,4,230
    <!--SR:2024-01-01,4,230-->

The bare form wins when present; the plugin writes it inside the comment
(``<!--SR:!2024-01-01,4,230-->``), so both spellings resolve to the same values.
"""

from __future__ import annotations

import re

from .models import ScheduleRecord

INLINE_SCHEDULE_RE = re.compile(r"!([\d-]+),(\d+),(\d+)")
COMMENT_SCHEDULE_RE = re.compile(r"<!--SR:([\d-]+),(\d+),(\d+)-->")


def find_schedule_markers(text: str) -> list[tuple[str, int, int]]:
    """Return (due, interval, ease) for each marker in textual order."""
    matches = list(INLINE_SCHEDULE_RE.finditer(text))
    if not matches:
        matches = list(COMMENT_SCHEDULE_RE.finditer(text))
    return [(m.group(1), int(m.group(2)), int(m.group(3))) for m in matches]


def extract_schedules(text: str, pair_count: int, base_ease: int) -> list[ScheduleRecord]:
    """Assign markers to pair positions; unmatched positions get base_ease."""
    markers = find_schedule_markers(text)
    schedules = []
    for index in range(max(pair_count, 0)):
        if index < len(markers):
            due, interval, ease = markers[index]
            schedules.append(ScheduleRecord(ease=ease, interval=interval, due=due))
        else:
            schedules.append(ScheduleRecord(ease=base_ease))
    return schedules
