#!/usr/bin/env python3
"""Build weekly schedule blocks from class records and render the HTML grid."""

from __future__ import annotations

import argparse
import html
import json
import sys
from dataclasses import dataclass
from pathlib import Path

import layout_config
from class_records import TeacherIdentity, load_class_records
from schedule_blocks import (
    DAY_CODES,
    DisplayWindow,
    ScheduleBlock,
    SkippedEntry,
    blocks_to_dict,
    build_schedule_blocks,
    format_clock,
    format_hour_label,
    format_time_range,
    stack_offset,
)

HEADER_ROWS = 1
TIME_COL_WIDTH_PX = 90
BASE_Z_INDEX = 40


@dataclass(frozen=True)
class GridTimeLabel:
    row: int
    minute: int
    label: str


@dataclass(frozen=True)
class GridCell:
    block: ScheduleBlock
    column: int
    row_start: int
    row_end: int
    inset: float
    z_index: int


@dataclass
class GridLayout:
    window: DisplayWindow
    row_height_px: int
    time_labels: list[GridTimeLabel]
    cells: list[GridCell]

    @property
    def template_columns(self) -> str:
        return f"{TIME_COL_WIDTH_PX}px repeat({len(DAY_CODES)}, 1fr)"

    @property
    def template_rows(self) -> str:
        return f"auto repeat({self.window.rows_per_day}, {self.row_height_px}px)"


def truncate_text(text: str, max_length: int | None) -> str:
    if not text:
        return ""
    if not max_length or max_length <= 0:
        return text
    if len(text) <= max_length:
        return text
    suffix = "..."
    if max_length <= len(suffix):
        return text[:max_length]
    trimmed = text[: max_length - len(suffix)].rstrip()
    if not trimmed:
        return text[:max_length]
    return trimmed + suffix


def load_week(
    classes_path: Path, layout: dict
) -> tuple[dict[str, list[ScheduleBlock]], TeacherIdentity, list[SkippedEntry]]:
    entries, teacher = load_class_records(classes_path)
    diagnostics: list[SkippedEntry] = []
    window = layout_config.window_from_layout(layout)
    blocks_by_day = build_schedule_blocks(entries, window, diagnostics)
    return layout_config.apply_layout(blocks_by_day, layout), teacher, diagnostics


def layout_grid(
    blocks_by_day: dict[str, list[ScheduleBlock]],
    window: DisplayWindow,
    row_height_px: int = 14,
    stack_step: float = 6,
    max_stack_levels: int = 0,
) -> GridLayout:
    """Place blocks on a CSS grid: one header row, then one row per 5 minutes.

    Grid lines are 1-based and the header takes row 1, so a block starting on
    row 0 of the window begins at grid line 2.
    """
    time_labels = []
    for row in range(window.rows_per_day):
        minute = window.start_minute + row * window.row_minutes
        label = format_hour_label(minute) if minute % 60 == 0 else ""
        time_labels.append(GridTimeLabel(row + HEADER_ROWS + 1, minute, label))

    cells = []
    for day_index, day in enumerate(DAY_CODES):
        for index, block in enumerate(blocks_by_day.get(day, [])):
            row_start = block.row_start + HEADER_ROWS + 1
            cells.append(
                GridCell(
                    block=block,
                    column=day_index + 2,
                    row_start=row_start,
                    row_end=row_start + block.row_span,
                    inset=stack_offset(index, stack_step, max_stack_levels),
                    z_index=BASE_Z_INDEX + index,
                )
            )
    return GridLayout(window, row_height_px, time_labels, cells)


def block_caption(block: ScheduleBlock, display: dict) -> str:
    parts = []
    if display.get("show_room") and block.room:
        parts.append(f"Room {block.room}")
    if display.get("show_time"):
        parts.append(format_time_range(block))
    return " • ".join(parts)


GRID_CSS = """
:root {
  --accent: #f5576c;
  --accent-soft: #F7BB97;
  --line: rgba(0, 0, 0, 0.04);
  --ink: #374151;
}
* { box-sizing: border-box; }
body {
  margin: 0;
  background: #fffbeb;
  color: var(--ink);
  font-family: 'Segoe UI', 'Helvetica Neue', sans-serif;
}
.page {
  max-width: 1280px;
  margin: 28px auto;
  padding: 24px 32px 40px;
}
header h1 {
  font-size: 32px;
  margin: 0 0 4px;
  color: var(--accent);
}
header .subtitle {
  color: #4b5563;
}
.week {
  display: grid;
  min-width: 1000px;
  margin-top: 24px;
  background: rgba(255, 255, 255, 0.7);
  border: 1px solid rgba(245, 87, 108, 0.2);
  border-radius: 16px;
  overflow: auto;
}
.head {
  position: sticky;
  top: 0;
  background: #ffffff;
  border-bottom: 1px solid rgba(0, 0, 0, 0.06);
  display: flex;
  align-items: center;
  justify-content: center;
  font-size: 14px;
  font-weight: 600;
  padding: 6px 0;
}
.head.time { color: var(--accent); }
.time-label {
  display: flex;
  align-items: center;
  justify-content: center;
  color: var(--accent);
  font-size: 11px;
  font-weight: 600;
  border-right: 1px solid var(--line);
  border-bottom: 1px solid var(--line);
}
.cell {
  border-right: 1px solid var(--line);
  border-bottom: 1px solid var(--line);
}
.slot {
  position: relative;
  padding: 6px;
}
.block {
  position: absolute;
  top: 2px;
  bottom: 2px;
  display: flex;
  flex-direction: column;
  justify-content: center;
  padding: 6px 8px;
  border-radius: 8px;
  background: linear-gradient(90deg, var(--accent), var(--accent-soft));
  box-shadow: 0 6px 14px rgba(245, 87, 108, 0.12);
  color: #ffffff;
  font-size: 12px;
  line-height: 1.05;
  overflow: hidden;
}
.block .title {
  font-weight: 700;
  white-space: nowrap;
  overflow: hidden;
  text-overflow: ellipsis;
}
.block .meta {
  margin-top: 4px;
  font-size: 11px;
  opacity: 0.9;
}
.block .meta:empty {
  display: none;
}
"""


def render_grid_html(
    grid: GridLayout,
    heading: str = "Weekly Schedule",
    subtitle: str = "",
    display_options: dict | None = None,
    title_max_length: int | None = None,
) -> str:
    display, default_length = layout_config.get_display_settings(None)
    display.update(display_options or {})
    if title_max_length is None:
        title_max_length = default_length

    html_parts = [
        "<!DOCTYPE html>",
        "<html lang=\"en\">",
        "<head>",
        "<meta charset=\"utf-8\">",
        f"<title>{html.escape(heading)}</title>",
        "<meta name=\"viewport\" content=\"width=device-width, initial-scale=1\">",
        f"<style>{GRID_CSS}</style>",
        "</head>",
        "<body>",
        "<div class=\"page\">",
        "<header>",
        f"<h1>{html.escape(heading)}</h1>",
        f"<div class=\"subtitle\">{html.escape(subtitle)}</div>",
        "</header>",
        (
            f"<div class=\"week\" style=\"grid-template-columns: {grid.template_columns}; "
            f"grid-template-rows: {grid.template_rows};\">"
        ),
        "<div class=\"head time\" style=\"grid-column: 1; grid-row: 1;\">Time</div>",
    ]
    for day_index, day in enumerate(DAY_CODES):
        html_parts.append(
            f"<div class=\"head\" style=\"grid-column: {day_index + 2}; grid-row: 1;\">{day}</div>"
        )

    for label in grid.time_labels:
        html_parts.append(
            f"<div class=\"time-label\" style=\"grid-column: 1; grid-row: {label.row};\">"
            f"{html.escape(label.label)}</div>"
        )
        for day_index in range(len(DAY_CODES)):
            html_parts.append(
                f"<div class=\"cell\" style=\"grid-column: {day_index + 2}; grid-row: {label.row};\"></div>"
            )

    for cell in grid.cells:
        block = cell.block
        title = html.escape(truncate_text(block.title, title_max_length))
        tooltip = html.escape(
            f"{block.title} • {block.room} • {format_clock(block.start_minute)}"
        )
        html_parts.append(
            """
<div class="slot" style="grid-column: {column}; grid-row: {row_start} / {row_end}; z-index: {z_index};">
  <div class="block" style="left: {inset}px; right: {inset}px;" title="{tooltip}" data-key="{key}">
    <div class="title">{title}</div>
    <div class="meta">{meta}</div>
  </div>
</div>
""".format(
                column=cell.column,
                row_start=cell.row_start,
                row_end=cell.row_end,
                z_index=cell.z_index,
                inset=f"{cell.inset:g}",
                tooltip=tooltip,
                key=html.escape(block.key),
                title=title,
                meta=html.escape(block_caption(block, display)),
            )
        )

    html_parts.extend([
        "</div>",
        "</div>",
        "</body>",
        "</html>",
    ])
    return "\n".join(html_parts)


def render_week_html(
    blocks_by_day: dict[str, list[ScheduleBlock]],
    layout: dict,
    teacher: TeacherIdentity | None = None,
) -> str:
    grid = layout_grid(
        blocks_by_day,
        layout_config.window_from_layout(layout),
        row_height_px=layout["row_height_px"],
        stack_step=layout["stack_step_px"],
        max_stack_levels=layout["grid_max_stack_levels"],
    )
    display_options, title_max_length = layout_config.get_display_settings(layout)
    subtitle = "Your class overview for the week"
    if teacher and teacher.name != "Unknown":
        subtitle = f"{teacher.name} • Monday – Saturday"
    return render_grid_html(
        grid,
        subtitle=subtitle,
        display_options=display_options,
        title_max_length=title_max_length,
    )


def render_html(
    classes_path: Path,
    outdir: Path,
    layout_path: Path | None = None,
) -> tuple[Path, list[SkippedEntry]]:
    outdir.mkdir(parents=True, exist_ok=True)
    layout = (
        layout_config.load_layout(layout_path)
        if layout_path
        else layout_config.normalize_layout(None)
    )
    blocks_by_day, teacher, diagnostics = load_week(classes_path, layout)
    filepath = outdir / "schedule.html"
    filepath.write_text(render_week_html(blocks_by_day, layout, teacher), encoding="utf-8")
    return filepath, diagnostics


def report_skipped(diagnostics: list[SkippedEntry], verbose: bool) -> None:
    skipped = [item for item in diagnostics if item.omitted]
    warnings = [item for item in diagnostics if not item.omitted]
    if skipped:
        print(f"Skipped {len(skipped)} schedule entries or days", file=sys.stderr)
    if warnings:
        print(f"Rendered {len(warnings)} entries with warnings", file=sys.stderr)
    if verbose:
        for item in skipped:
            print(f"- {item}", file=sys.stderr)
        for item in warnings:
            print(f"- warning: {item}", file=sys.stderr)


def require_file(path: Path) -> None:
    if not path.exists():
        raise SystemExit(f"Class records not found: {path}")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Build weekly schedule blocks from class records and render the grid."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    blocks_parser = subparsers.add_parser("blocks", help="Print the block map as JSON")
    blocks_parser.add_argument("classes", type=Path, help="Exported class rows (JSON)")
    blocks_parser.add_argument("--json", type=Path, help="Write JSON here instead of stdout")

    render_parser = subparsers.add_parser("render", help="Render the weekly HTML grid")
    render_parser.add_argument("classes", type=Path, help="Exported class rows (JSON)")
    render_parser.add_argument("--outdir", type=Path, default=Path("output"))

    for sub in (blocks_parser, render_parser):
        sub.add_argument(
            "--layout",
            type=Path,
            default=Path("layout.json"),
            help="Layout overrides JSON",
        )
        sub.add_argument("--verbose", action="store_true", help="List skipped entries")

    args = parser.parse_args()
    require_file(args.classes)

    try:
        if args.command == "blocks":
            layout = layout_config.load_layout(args.layout)
            blocks_by_day, _, diagnostics = load_week(args.classes, layout)
            payload = json.dumps(blocks_to_dict(blocks_by_day), indent=2)
            if args.json:
                args.json.write_text(payload, encoding="utf-8")
                count = sum(len(blocks) for blocks in blocks_by_day.values())
                print(f"Wrote {count} blocks to {args.json}")
            else:
                print(payload)
            report_skipped(diagnostics, args.verbose)
            return

        if args.command == "render":
            output, diagnostics = render_html(args.classes, args.outdir, args.layout)
            print(f"Rendered {output}")
            report_skipped(diagnostics, args.verbose)
    except ValueError as exc:
        raise SystemExit(str(exc))


if __name__ == "__main__":
    main()
