"""Turn class time records into positioned weekly schedule blocks."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable

DAY_CODES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
DAY_INDEX = {code: i for i, code in enumerate(DAY_CODES)}
SESSION_MINUTES = 55
MAX_SESSIONS = 3
STRIP_CHARS = {".", ","}
# reported, but the entry still gets its blocks
WARNING_REASONS = {"degenerate_range"}


@dataclass(frozen=True)
class DisplayWindow:
    start_hour: int = 7
    end_hour: int = 21
    row_minutes: int = 5

    @property
    def start_minute(self) -> int:
        return self.start_hour * 60

    @property
    def end_minute(self) -> int:
        # end_hour is the last full hour shown
        return (self.end_hour + 1) * 60

    @property
    def total_minutes(self) -> int:
        return self.end_minute - self.start_minute

    @property
    def rows_per_day(self) -> int:
        return self.total_minutes // self.row_minutes


@dataclass
class ClassScheduleEntry:
    id: str
    title: str
    days: Iterable[str] | str = field(default_factory=list)
    start_time: str | None = None
    end_time: str | None = None
    room: str = ""


@dataclass(frozen=True)
class ScheduleBlock:
    class_id: str
    day_code: str
    title: str
    room: str
    start_minute: int
    duration_minutes: int
    row_start: int
    row_span: int

    @property
    def key(self) -> str:
        return f"{self.class_id}-{self.day_code}"

    @property
    def end_minute(self) -> int:
        return self.start_minute + self.duration_minutes

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "class_id": self.class_id,
            "day_code": self.day_code,
            "title": self.title,
            "room": self.room,
            "start_minute": self.start_minute,
            "duration_minutes": self.duration_minutes,
            "row_start": self.row_start,
            "row_span": self.row_span,
        }


@dataclass(frozen=True)
class SkippedEntry:
    class_id: str
    reason: str
    detail: str = ""

    @property
    def omitted(self) -> bool:
        return self.reason not in WARNING_REASONS

    def __str__(self) -> str:
        if self.detail:
            return f"{self.class_id}: {self.reason} ({self.detail})"
        return f"{self.class_id}: {self.reason}"


def parse_time_to_minutes(value: str | None) -> int | None:
    """Parse "HH:MM" or "HH:MM:SS" into minutes since midnight.

    Hours and minutes are not range checked, so "25:75" gives 1575.
    """
    if value is None:
        return None
    parts = str(value).split(":")
    if len(parts) < 2:
        return None
    try:
        hour = int(parts[0])
        minute = int(parts[1])
    except ValueError:
        return None
    return hour * 60 + minute


def minutes_to_sessions(minutes: int | float | None) -> int:
    if not minutes or minutes <= 0:
        return 1
    # half rounds up
    sessions = math.floor(minutes / SESSION_MINUTES + 0.5)
    return max(1, min(MAX_SESSIONS, sessions))


def format_clock(minutes: int, twelve_hour: bool = False) -> str:
    hour = minutes // 60
    minute = minutes % 60
    if twelve_hour:
        hour = hour % 12 or 12
    return f"{hour}:{minute:02d}"


def format_hour_label(minutes: int) -> str:
    hour = minutes // 60
    ampm = "AM" if hour < 12 else "PM"
    return f"{hour % 12 or 12}:00 {ampm}"


def format_time_range(block: ScheduleBlock, twelve_hour: bool = False) -> str:
    start = format_clock(block.start_minute, twelve_hour)
    end = format_clock(block.end_minute, twelve_hour)
    return f"{start} - {end}"


def normalize_day(raw: object) -> str | None:
    text = str(raw or "").strip()[:3]
    code = "".join(char for char in text if char not in STRIP_CHARS and not char.isspace())
    if code in DAY_INDEX:
        return code
    return None


def normalize_days(raw: object) -> list[tuple[object, str | None]]:
    """Pair each day token with its code, or None when it is not a day.

    A string is one token; any other iterable (list, set, generator) is a
    sequence of tokens. Unordered collections are read in sorted order.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        tokens: Iterable[object] = [raw]
    elif isinstance(raw, (set, frozenset)):
        tokens = sorted(raw, key=str)
    elif isinstance(raw, Iterable):
        tokens = raw
    else:
        return []
    return [(token, normalize_day(token)) for token in tokens]


def stack_offset(index: int, step: float, max_levels: int | None = None) -> float:
    """Lateral inset for the index-th block in a day's sorted list."""
    if max_levels:
        index = index % max_levels
    return index * step


def empty_block_map() -> dict[str, list[ScheduleBlock]]:
    return {code: [] for code in DAY_CODES}


def _skip(
    diagnostics: list[SkippedEntry] | None, class_id: str, reason: str, detail: str = ""
) -> None:
    if diagnostics is not None:
        diagnostics.append(SkippedEntry(str(class_id), reason, detail))


def build_schedule_blocks(
    entries: Iterable[ClassScheduleEntry],
    window: DisplayWindow | None = None,
    diagnostics: list[SkippedEntry] | None = None,
) -> dict[str, list[ScheduleBlock]]:
    """Build the per-day block lists for a week.

    Entries with unparseable times, entries starting after the window and
    unknown day tokens are left out rather than raising. Pass a list as
    ``diagnostics`` to collect what was left out and why. Each day's list is
    sorted by clipped start minute; both renderers stack overlaps in that
    order.
    """
    window = window or DisplayWindow()
    blocks_by_day = empty_block_map()

    for entry in entries:
        start_min = parse_time_to_minutes(entry.start_time)
        end_min = parse_time_to_minutes(entry.end_time)
        if start_min is None:
            _skip(diagnostics, entry.id, "start_time", repr(entry.start_time))
            continue
        if end_min is None:
            _skip(diagnostics, entry.id, "end_time", repr(entry.end_time))
            continue

        display_start = max(start_min, window.start_minute)
        if display_start >= window.end_minute:
            _skip(diagnostics, entry.id, "after_window", format_clock(start_min))
            continue
        if end_min <= start_min:
            _skip(
                diagnostics,
                entry.id,
                "degenerate_range",
                f"{entry.start_time} - {entry.end_time}",
            )
        raw_duration = max(1, end_min - start_min)
        display_duration = minutes_to_sessions(raw_duration) * SESSION_MINUTES

        row_start = (display_start - window.start_minute) // window.row_minutes
        row_span = math.ceil(display_duration / window.row_minutes)

        days = normalize_days(entry.days)
        if not days:
            _skip(diagnostics, entry.id, "no_days")
            continue
        seen: set[str] = set()
        for raw_day, code in days:
            if code is None:
                _skip(diagnostics, entry.id, "day", repr(raw_day))
                continue
            if code in seen:
                _skip(diagnostics, entry.id, "duplicate_day", repr(raw_day))
                continue
            seen.add(code)
            blocks_by_day[code].append(
                ScheduleBlock(
                    class_id=str(entry.id),
                    day_code=code,
                    title=entry.title or "Untitled",
                    room=entry.room or "",
                    start_minute=display_start,
                    duration_minutes=display_duration,
                    row_start=row_start,
                    row_span=row_span,
                )
            )

    for code in DAY_CODES:
        blocks_by_day[code].sort(key=lambda block: block.start_minute)
    return blocks_by_day


def blocks_to_dict(blocks_by_day: dict[str, list[ScheduleBlock]]) -> dict[str, list[dict]]:
    return {
        code: [block.to_dict() for block in blocks_by_day.get(code, [])]
        for code in DAY_CODES
    }
