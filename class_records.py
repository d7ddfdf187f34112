"""Map exported class rows onto schedule entries."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from schedule_blocks import ClassScheduleEntry

TITLE_FIELDS = ("class_name", "subject", "class_code")
DAYS_FIELDS = ("schedule_days", "schedule_days_text")
ROOM_FIELDS = ("room_number", "room", "room_no")


@dataclass(frozen=True)
class TeacherIdentity:
    name: str = "Unknown"
    email: str = ""


def first_value(row: dict, fields: tuple[str, ...], default=None):
    for key in fields:
        value = row.get(key)
        if value:
            return value
    return default


def optional_text(value) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def entry_from_row(row: dict) -> ClassScheduleEntry:
    days = first_value(row, DAYS_FIELDS, [])
    if not isinstance(days, (str, list, tuple)):
        days = []
    return ClassScheduleEntry(
        id=str(row.get("id", "")),
        title=str(first_value(row, TITLE_FIELDS, "Untitled")),
        days=list(days) if isinstance(days, tuple) else days,
        start_time=optional_text(row.get("time_start")),
        end_time=optional_text(row.get("time_end")),
        room=str(first_value(row, ROOM_FIELDS, "")),
    )


def teacher_from_row(row: dict | None) -> TeacherIdentity:
    if not isinstance(row, dict):
        return TeacherIdentity()
    parts = [str(row.get(key) or "").strip() for key in ("firstname", "lastname")]
    name = " ".join(part for part in parts if part) or "Unknown"
    return TeacherIdentity(name=name, email=str(row.get("email") or ""))


def parse_class_records(data) -> tuple[list[ClassScheduleEntry], TeacherIdentity]:
    if isinstance(data, list):
        rows = data
        teacher = TeacherIdentity()
    elif isinstance(data, dict):
        rows = data.get("classes", [])
        teacher = teacher_from_row(data.get("teacher"))
    else:
        raise ValueError("Class records must be a list or an object with 'classes'")
    if not isinstance(rows, list):
        raise ValueError("'classes' must be a list of rows")
    entries = [entry_from_row(row) for row in rows if isinstance(row, dict)]
    return entries, teacher


def load_class_records(path: Path) -> tuple[list[ClassScheduleEntry], TeacherIdentity]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    return parse_class_records(data)
