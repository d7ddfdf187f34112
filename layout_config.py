"""Helpers for reading and applying schedule layout overrides."""

from __future__ import annotations

import copy
import json
from pathlib import Path

from schedule_blocks import DAY_CODES, DisplayWindow, ScheduleBlock

DEFAULT_DISPLAY_OPTIONS = {
    "show_room": True,
    "show_time": True,
}

DEFAULT_TITLE_MAX_LENGTH = 60

INT_SETTINGS = {
    "row_height_px": (14, 1),
    "stack_step_px": (6, 0),
    "grid_max_stack_levels": (0, 0),
    "pdf_max_stack_levels": (3, 0),
    "title_max_length": (DEFAULT_TITLE_MAX_LENGTH, 0),
}

DEFAULT_LAYOUT = {
    "start_hour": 7,
    "end_hour": 21,
    "hidden_class_ids_by_day": {},
    "display_options": DEFAULT_DISPLAY_OPTIONS,
    **{key: default for key, (default, _) in INT_SETTINGS.items()},
}


def _hour(value) -> int | None:
    try:
        hour = int(value)
    except (TypeError, ValueError):
        return None
    if 0 <= hour <= 23:
        return hour
    return None


def normalize_layout(data: dict | None) -> dict:
    layout = copy.deepcopy(DEFAULT_LAYOUT)
    if not isinstance(data, dict):
        return layout

    start_hour = _hour(data.get("start_hour", layout["start_hour"]))
    end_hour = _hour(data.get("end_hour", layout["end_hour"]))
    if start_hour is not None and end_hour is not None and end_hour >= start_hour:
        layout["start_hour"] = start_hour
        layout["end_hour"] = end_hour

    for key, (_, minimum) in INT_SETTINGS.items():
        value = data.get(key)
        if value is None:
            continue
        try:
            layout[key] = max(minimum, int(value))
        except (TypeError, ValueError):
            pass

    hidden = data.get("hidden_class_ids_by_day")
    if isinstance(hidden, dict):
        for day, ids in hidden.items():
            if day not in DAY_CODES or not isinstance(ids, list):
                continue
            normalized = [str(item) for item in ids if item not in (None, "")]
            if normalized:
                layout["hidden_class_ids_by_day"][day] = normalized

    display_options = data.get("display_options")
    if isinstance(display_options, dict):
        for key in DEFAULT_DISPLAY_OPTIONS:
            value = display_options.get(key)
            if isinstance(value, bool):
                layout["display_options"][key] = value

    return layout


def load_layout(path: Path) -> dict:
    if not path.exists():
        return copy.deepcopy(DEFAULT_LAYOUT)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        return copy.deepcopy(DEFAULT_LAYOUT)
    return normalize_layout(data)


def save_layout(path: Path, layout: dict) -> None:
    normalized = normalize_layout(layout)
    path.write_text(json.dumps(normalized, indent=2), encoding="utf-8")


def window_from_layout(layout: dict | None) -> DisplayWindow:
    layout = layout or DEFAULT_LAYOUT
    return DisplayWindow(
        start_hour=layout.get("start_hour", DEFAULT_LAYOUT["start_hour"]),
        end_hour=layout.get("end_hour", DEFAULT_LAYOUT["end_hour"]),
    )


def apply_layout(
    blocks_by_day: dict[str, list[ScheduleBlock]], layout: dict
) -> dict[str, list[ScheduleBlock]]:
    hidden_by_day = layout.get("hidden_class_ids_by_day", {})
    filtered: dict[str, list[ScheduleBlock]] = {}
    for day, blocks in blocks_by_day.items():
        hidden_ids = set(hidden_by_day.get(day, []))
        filtered[day] = [block for block in blocks if block.class_id not in hidden_ids]
    return filtered


def get_display_settings(layout: dict | None) -> tuple[dict, int]:
    display = copy.deepcopy(DEFAULT_DISPLAY_OPTIONS)
    title_max_length = DEFAULT_TITLE_MAX_LENGTH
    if layout:
        display.update(layout.get("display_options", {}))
        title_max_length = layout.get("title_max_length", title_max_length)
    return display, title_max_length
