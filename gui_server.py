#!/usr/bin/env python3
"""Local preview server for the weekly grid and its layout overrides."""

from __future__ import annotations

import argparse
import json
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from urllib.parse import parse_qs, urlparse

import layout_config
from schedule_blocks import DAY_CODES
from schedule_tool import load_week, render_week_html


class ScheduleHandler(SimpleHTTPRequestHandler):
    def __init__(self, *args, directory: Path, classes_path: Path, layout_path: Path, **kwargs):
        self.classes_path = classes_path
        self.layout_path = layout_path
        super().__init__(*args, directory=str(directory), **kwargs)

    def log_message(self, format: str, *args) -> None:
        return

    def send_json(self, status: int, payload: dict | list) -> None:
        body = json.dumps(payload, indent=2).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def send_html(self, content: str) -> None:
        body = content.encode("utf-8")
        self.send_response(200)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def load(self):
        # class file is reread per request
        layout = layout_config.load_layout(self.layout_path)
        return layout, load_week(self.classes_path, layout)

    def do_GET(self) -> None:
        parsed = urlparse(self.path)
        routes = {
            "/": self.handle_grid,
            "/api/days": self.handle_days,
            "/api/blocks": lambda: self.handle_blocks(parsed.query),
            "/api/diagnostics": self.handle_diagnostics,
            "/api/layout": self.handle_layout,
        }
        handler = routes.get(parsed.path)
        if handler is None:
            super().do_GET()
            return
        try:
            handler()
        except ValueError as exc:
            self.send_json(500, {"error": str(exc)})

    def do_POST(self) -> None:
        parsed = urlparse(self.path)
        if parsed.path == "/api/layout":
            self.handle_layout_update()
            return
        self.send_error(404, "Unknown endpoint")

    def handle_grid(self) -> None:
        layout, (blocks_by_day, teacher, _) = self.load()
        self.send_html(render_week_html(blocks_by_day, layout, teacher))

    def handle_days(self) -> None:
        _, (blocks_by_day, _, _) = self.load()
        days = [day for day in DAY_CODES if blocks_by_day.get(day)]
        self.send_json(200, {"days": days})

    def handle_blocks(self, query: str) -> None:
        params = parse_qs(query)
        day = params.get("day", [""])[0]
        if day not in DAY_CODES:
            self.send_json(400, {"error": f"Unknown day: {day}"})
            return
        _, (blocks_by_day, _, _) = self.load()
        blocks = [block.to_dict() for block in blocks_by_day.get(day, [])]
        self.send_json(200, {"day": day, "blocks": blocks})

    def handle_diagnostics(self) -> None:
        _, (_, _, diagnostics) = self.load()
        rows = [
            {"class_id": item.class_id, "reason": item.reason, "detail": item.detail}
            for item in diagnostics
        ]
        skipped = [row for row, item in zip(rows, diagnostics) if item.omitted]
        warnings = [row for row, item in zip(rows, diagnostics) if not item.omitted]
        self.send_json(200, {"skipped": skipped, "warnings": warnings})

    def handle_layout(self) -> None:
        layout = layout_config.load_layout(self.layout_path)
        self.send_json(200, layout)

    def handle_layout_update(self) -> None:
        length = int(self.headers.get("Content-Length", "0"))
        raw = self.rfile.read(length).decode("utf-8") if length else ""
        try:
            payload = json.loads(raw) if raw else {}
        except json.JSONDecodeError:
            self.send_json(400, {"error": "Invalid JSON"})
            return
        layout_config.save_layout(self.layout_path, payload)
        self.send_json(200, {"ok": True})


def run_server(
    host: str, port: int, classes_path: Path, layout_path: Path, static_dir: Path
) -> None:
    handler = lambda *args, **kwargs: ScheduleHandler(
        *args,
        directory=static_dir,
        classes_path=classes_path,
        layout_path=layout_path,
        **kwargs,
    )
    server = ThreadingHTTPServer((host, port), handler)
    print(f"Schedule preview running at http://{host}:{port}")
    server.serve_forever()


def main() -> None:
    parser = argparse.ArgumentParser(description="Preview the weekly schedule grid.")
    parser.add_argument("classes", type=Path, help="Exported class rows (JSON)")
    parser.add_argument("--layout", type=Path, default=Path("layout.json"))
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8787)
    parser.add_argument(
        "--static-dir",
        type=Path,
        default=Path("output-pdf"),
        help="Directory served for other paths (e.g. exported PDFs)",
    )
    args = parser.parse_args()

    if not args.classes.exists():
        raise SystemExit(f"Class records not found: {args.classes}")
    args.static_dir.mkdir(parents=True, exist_ok=True)

    run_server(args.host, args.port, args.classes, args.layout, args.static_dir)


if __name__ == "__main__":
    main()
