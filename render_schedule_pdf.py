#!/usr/bin/env python3
"""Render the weekly class timetable as a single-page PDF."""

from __future__ import annotations

import argparse
import sys
import unicodedata
from dataclasses import dataclass, field
from pathlib import Path

from fpdf import FPDF

import layout_config
from class_records import TeacherIdentity
from schedule_blocks import (
    DAY_CODES,
    DisplayWindow,
    ScheduleBlock,
    format_hour_label,
    format_time_range,
    stack_offset,
)
from schedule_tool import load_week, report_skipped, require_file

ACCENT = (245, 87, 108)
INK = (51, 51, 51)
MUTED = (136, 136, 136)
WHITE = (255, 255, 255)
LINE_SPACING = 1.15


@dataclass
class PdfConfig:
    margin: float = 36.0
    top: float = 80.0
    header_height: float = 40.0
    bottom_reserve: float = 60.0
    time_col_width: float = 60.0
    column_gap: float = 6.0
    padding: float = 6.0
    min_block_height: float = 12.0
    corner_radius: float = 4.0
    title_font_size: float = 10.0
    title_max_lines: int = 2
    info_font_size: float = 8.0
    info_max_lines: int = 2
    stack_step: float = 6.0
    max_stack_levels: int = 3
    footer_text: str = "Generated by CoTeacher"


@dataclass
class PageText:
    x: float
    y: float
    text: str
    font_size: float
    bold: bool = False
    color: tuple[int, int, int] = INK


@dataclass
class PageLine:
    x1: float
    y1: float
    x2: float
    y2: float
    gray: int
    width: float


@dataclass
class PageBlock:
    block: ScheduleBlock
    x: float
    y: float
    width: float
    height: float
    title_lines: list[str]
    info_lines: list[str]


@dataclass
class PageLayout:
    width: float
    height: float
    table_x: float
    table_y: float
    table_width: float
    table_height: float
    day_col_width: float
    pixels_per_minute: float
    texts: list[PageText] = field(default_factory=list)
    lines: list[PageLine] = field(default_factory=list)
    blocks: list[PageBlock] = field(default_factory=list)

    @property
    def table_bottom(self) -> float:
        return self.table_y + self.table_height


def sanitize_text(value: str | None) -> str:
    if not value:
        return ""
    text = str(value)
    replacements = {
        "\u2013": "-",
        "\u2014": "-",
        "\u2018": "'",
        "\u2019": "'",
        "\u201c": "\"",
        "\u201d": "\"",
        "\u2022": "|",
        "\u2026": "...",
    }
    for src, dest in replacements.items():
        text = text.replace(src, dest)
    text = unicodedata.normalize("NFKD", text)
    text = text.encode("ascii", "ignore").decode("ascii")
    return " ".join(text.split())


def wrap_text(pdf: FPDF, text: str, max_width: float) -> list[str]:
    words = text.split()
    if not words:
        return []
    lines: list[str] = []
    current = ""
    for word in words:
        candidate = f"{current} {word}".strip()
        if pdf.get_string_width(candidate) <= max_width:
            current = candidate
            continue
        if current:
            lines.append(current)
        if pdf.get_string_width(word) <= max_width:
            current = word
            continue
        chunk = ""
        for char in word:
            test = chunk + char
            if pdf.get_string_width(test) <= max_width:
                chunk = test
            else:
                if chunk:
                    lines.append(chunk)
                chunk = char
        current = chunk
    if current:
        lines.append(current)
    return lines


def shorten_line(pdf: FPDF, text: str, max_width: float, suffix: str = "...") -> str:
    if pdf.get_string_width(text) <= max_width:
        return text
    trimmed = text
    while trimmed and pdf.get_string_width(trimmed + suffix) > max_width:
        trimmed = trimmed[:-1]
    if not trimmed:
        return suffix
    return trimmed.rstrip() + suffix


def truncate_lines(
    pdf: FPDF, lines: list[str], max_width: float, max_lines: int
) -> list[str]:
    if len(lines) <= max_lines:
        return lines
    trimmed = lines[:max_lines]
    trimmed[-1] = shorten_line(pdf, trimmed[-1], max_width)
    return trimmed


def block_info(block: ScheduleBlock) -> str:
    parts = []
    if block.room:
        parts.append(f"Room {block.room}")
    parts.append(format_time_range(block, twelve_hour=True))
    return " | ".join(parts)


def title_baseline(page_block: PageBlock, config: PdfConfig) -> float:
    return page_block.y + config.padding + 8


def info_baseline(page_block: PageBlock, config: PdfConfig) -> float:
    title_step = config.title_font_size * LINE_SPACING
    return title_baseline(page_block, config) + len(page_block.title_lines) * title_step


def fit_lines(
    lines: list[str], first_baseline: float, step: float, bottom: float
) -> list[str]:
    kept = []
    for idx, line in enumerate(lines):
        if first_baseline + idx * step > bottom:
            break
        kept.append(line)
    return kept


def layout_block_text(
    pdf: FPDF, page_block: PageBlock, config: PdfConfig
) -> None:
    """Wrap title and room/time text into the block, dropping what won't fit."""
    max_width = page_block.width - 2 * config.padding
    bottom = page_block.y + page_block.height - 2

    pdf.set_font("Helvetica", style="B", size=config.title_font_size)
    title = sanitize_text(page_block.block.title) or "Untitled"
    title_lines = truncate_lines(
        pdf, wrap_text(pdf, title, max_width), max_width, config.title_max_lines
    )
    page_block.title_lines = fit_lines(
        title_lines,
        title_baseline(page_block, config),
        config.title_font_size * LINE_SPACING,
        bottom,
    )

    pdf.set_font("Helvetica", size=config.info_font_size)
    info_lines = truncate_lines(
        pdf,
        wrap_text(pdf, sanitize_text(block_info(page_block.block)), max_width),
        max_width,
        config.info_max_lines,
    )
    page_block.info_lines = fit_lines(
        info_lines,
        info_baseline(page_block, config),
        config.info_font_size * LINE_SPACING,
        bottom,
    )


def build_page_layout(
    pdf: FPDF,
    blocks_by_day: dict[str, list[ScheduleBlock]],
    window: DisplayWindow,
    config: PdfConfig,
    teacher: TeacherIdentity | None = None,
) -> PageLayout:
    """Project the block map onto one page.

    ``pdf`` supplies the page size and font metrics for wrapping; nothing is
    drawn on it here.
    """
    teacher = teacher or TeacherIdentity()
    table_x = config.margin
    table_y = config.top + config.header_height
    table_width = pdf.w - 2 * config.margin
    table_height = pdf.h - table_y - config.bottom_reserve
    day_col_width = (table_width - config.time_col_width) / len(DAY_CODES)
    pixels_per_minute = table_height / window.total_minutes

    layout = PageLayout(
        width=pdf.w,
        height=pdf.h,
        table_x=table_x,
        table_y=table_y,
        table_width=table_width,
        table_height=table_height,
        day_col_width=day_col_width,
        pixels_per_minute=pixels_per_minute,
    )

    layout.texts.append(
        PageText(config.margin, config.top, "Weekly Class Schedule", 18, bold=True, color=ACCENT)
    )
    layout.texts.append(
        PageText(config.margin, config.top + 18, f"Teacher: {sanitize_text(teacher.name)}", 11)
    )
    layout.texts.append(
        PageText(
            config.margin + 200,
            config.top + 18,
            f"Email: {sanitize_text(teacher.email)}",
            11,
        )
    )

    grid_left = table_x + config.time_col_width
    for idx, day in enumerate(DAY_CODES):
        layout.texts.append(
            PageText(grid_left + idx * day_col_width + config.column_gap, table_y + 12, day, 10, bold=True)
        )

    layout.lines.append(
        PageLine(grid_left, table_y - 4, grid_left, layout.table_bottom, gray=220, width=0.5)
    )
    for idx in range(len(DAY_CODES) + 1):
        x = grid_left + idx * day_col_width
        layout.lines.append(PageLine(x, table_y - 6, x, layout.table_bottom, gray=240, width=0.4))

    for minute in range(window.start_minute, window.end_minute + 1, 60):
        y = table_y + (minute - window.start_minute) * pixels_per_minute
        layout.lines.append(PageLine(table_x, y, table_x + table_width, y, gray=200, width=0.6))
        layout.texts.append(
            PageText(table_x + 4, y - 2, format_hour_label(minute), 8, color=ACCENT)
        )

    for day_idx, day in enumerate(DAY_CODES):
        for idx, block in enumerate(blocks_by_day.get(day, [])):
            inset = stack_offset(idx, config.stack_step, config.max_stack_levels)
            y = table_y + (block.start_minute - window.start_minute) * pixels_per_minute
            height = max(config.min_block_height, block.duration_minutes * pixels_per_minute)
            height = min(height, max(config.min_block_height, layout.table_bottom - y))
            page_block = PageBlock(
                block=block,
                x=grid_left + day_idx * day_col_width + config.column_gap + inset,
                y=y,
                width=day_col_width - 2 * config.column_gap - inset,
                height=height,
                title_lines=[],
                info_lines=[],
            )
            layout_block_text(pdf, page_block, config)
            layout.blocks.append(page_block)

    layout.texts.append(
        PageText(config.margin, pdf.h - 28, config.footer_text, 10, color=MUTED)
    )
    return layout


def draw_text(pdf: FPDF, text: PageText) -> None:
    pdf.set_font("Helvetica", style="B" if text.bold else "", size=text.font_size)
    pdf.set_text_color(*text.color)
    pdf.text(text.x, text.y, text.text)


def draw_page_layout(pdf: FPDF, layout: PageLayout, config: PdfConfig) -> None:
    pdf.add_page()
    pdf.set_auto_page_break(auto=False, margin=0)

    for line in layout.lines:
        pdf.set_draw_color(line.gray)
        pdf.set_line_width(line.width)
        pdf.line(line.x1, line.y1, line.x2, line.y2)

    for text in layout.texts:
        draw_text(pdf, text)

    for page_block in layout.blocks:
        pdf.set_fill_color(*ACCENT)
        pdf.rect(
            page_block.x,
            page_block.y + 2,
            page_block.width,
            page_block.height - 4,
            style="F",
            round_corners=True,
            corner_radius=config.corner_radius,
        )
        text_x = page_block.x + config.padding
        baseline = title_baseline(page_block, config)
        for line in page_block.title_lines:
            draw_text(pdf, PageText(text_x, baseline, line, config.title_font_size, bold=True, color=WHITE))
            baseline += config.title_font_size * LINE_SPACING
        baseline = info_baseline(page_block, config)
        for line in page_block.info_lines:
            draw_text(pdf, PageText(text_x, baseline, line, config.info_font_size, color=WHITE))
            baseline += config.info_font_size * LINE_SPACING


def pdf_config_from_layout(layout: dict) -> PdfConfig:
    return PdfConfig(
        stack_step=float(layout["stack_step_px"]),
        max_stack_levels=layout["pdf_max_stack_levels"],
    )


def output_filename(teacher: TeacherIdentity) -> str:
    name = sanitize_text(teacher.name).replace("/", "-") or "Unknown"
    return f"{name}_Weekly_Timetable.pdf"


def render_schedule_pdf(
    blocks_by_day: dict[str, list[ScheduleBlock]],
    teacher: TeacherIdentity,
    outdir: Path,
    window: DisplayWindow | None = None,
    config: PdfConfig | None = None,
    page_size: str = "A4",
    orientation: str = "portrait",
) -> Path:
    window = window or DisplayWindow()
    config = config or PdfConfig()
    pdf = FPDF(orientation=orientation[0].upper(), unit="pt", format=page_size)
    layout = build_page_layout(pdf, blocks_by_day, window, config, teacher)
    draw_page_layout(pdf, layout, config)
    outdir.mkdir(parents=True, exist_ok=True)
    output_path = outdir / output_filename(teacher)
    pdf.output(str(output_path))
    return output_path


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Render the weekly class timetable PDF from exported class rows."
    )
    parser.add_argument("classes", type=Path, help="Exported class rows (JSON)")
    parser.add_argument("--outdir", type=Path, default=Path("output-pdf"))
    parser.add_argument("--page-size", default="A4")
    parser.add_argument(
        "--orientation", choices=["portrait", "landscape"], default="portrait"
    )
    parser.add_argument(
        "--layout",
        type=Path,
        default=Path("layout.json"),
        help="Layout overrides JSON",
    )
    parser.add_argument("--verbose", action="store_true", help="List skipped entries")
    args = parser.parse_args()

    require_file(args.classes)
    layout = layout_config.load_layout(args.layout)
    try:
        blocks_by_day, teacher, diagnostics = load_week(args.classes, layout)
    except ValueError as exc:
        raise SystemExit(str(exc))

    config = pdf_config_from_layout(layout)
    output_path = render_schedule_pdf(
        blocks_by_day,
        teacher,
        args.outdir,
        window=layout_config.window_from_layout(layout),
        config=config,
        page_size=args.page_size,
        orientation=args.orientation,
    )
    count = sum(len(blocks) for blocks in blocks_by_day.values())
    if count:
        print(f"Rendered {count} blocks to {output_path}")
    else:
        print(f"No classes fall on the weekly grid; wrote empty timetable {output_path}", file=sys.stderr)
    report_skipped(diagnostics, args.verbose)


if __name__ == "__main__":
    main()
