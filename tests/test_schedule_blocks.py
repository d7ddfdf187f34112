from schedule_blocks import (
    DAY_CODES,
    ClassScheduleEntry,
    DisplayWindow,
    build_schedule_blocks,
    format_clock,
    format_hour_label,
    minutes_to_sessions,
    normalize_day,
    parse_time_to_minutes,
    stack_offset,
)


def make_entry(
    class_id: str,
    days,
    start: str | None,
    end: str | None,
    title: str = "Math",
    room: str = "201",
) -> ClassScheduleEntry:
    return ClassScheduleEntry(
        id=class_id,
        title=title,
        days=days,
        start_time=start,
        end_time=end,
        room=room,
    )


def test_parse_time_accepts_minutes_and_seconds() -> None:
    assert parse_time_to_minutes("09:00") == 540
    assert parse_time_to_minutes("09:30:15") == 570
    assert parse_time_to_minutes("7:05") == 425


def test_parse_time_rejects_malformed_input() -> None:
    assert parse_time_to_minutes(None) is None
    assert parse_time_to_minutes("") is None
    assert parse_time_to_minutes("9") is None
    assert parse_time_to_minutes("ab:cd") is None
    assert parse_time_to_minutes("09:xx") is None


def test_parse_time_rejects_meridiem_suffix() -> None:
    assert parse_time_to_minutes("09:00 AM") is None
    assert parse_time_to_minutes("9:30am") is None


def test_parse_time_does_not_range_check() -> None:
    assert parse_time_to_minutes("25:75") == 25 * 60 + 75


def test_sessions_quantize_to_fifty_five_minutes() -> None:
    for minutes in (50, 55, 60):
        assert minutes_to_sessions(minutes) == 1
    for minutes in range(100, 115):
        assert minutes_to_sessions(minutes) == 2
    for minutes in (150, 165, 200, 400):
        assert minutes_to_sessions(minutes) == 3


def test_sessions_floor_to_one_for_empty_durations() -> None:
    assert minutes_to_sessions(0) == 1
    assert minutes_to_sessions(-30) == 1
    assert minutes_to_sessions(None) == 1
    assert minutes_to_sessions(10) == 1


def test_sessions_round_half_up() -> None:
    assert minutes_to_sessions(82) == 1
    assert minutes_to_sessions(83) == 2


def test_normalize_day_spellings() -> None:
    assert normalize_day("Mon") == "Mon"
    assert normalize_day("Monday") == "Mon"
    assert normalize_day("Tues") == "Tue"
    assert normalize_day("Sat.") == "Sat"
    assert normalize_day("  Fri  ") == "Fri"


def test_normalize_day_is_case_sensitive() -> None:
    assert normalize_day("monday") is None
    assert normalize_day("Funday") is None
    assert normalize_day("Sun") is None
    assert normalize_day(None) is None


def test_clock_labels() -> None:
    assert format_clock(540) == "9:00"
    assert format_clock(13 * 60 + 5) == "13:05"
    assert format_clock(13 * 60 + 5, twelve_hour=True) == "1:05"
    assert format_hour_label(7 * 60) == "7:00 AM"
    assert format_hour_label(12 * 60) == "12:00 PM"
    assert format_hour_label(21 * 60) == "9:00 PM"


def test_window_geometry() -> None:
    window = DisplayWindow()
    assert window.start_minute == 420
    assert window.end_minute == 22 * 60
    assert window.rows_per_day == 180


def test_single_class_block() -> None:
    entries = [make_entry("c1", ["Mon"], "09:00", "10:00")]
    blocks = build_schedule_blocks(entries, DisplayWindow())
    assert set(blocks) == set(DAY_CODES)
    assert len(blocks["Mon"]) == 1
    block = blocks["Mon"][0]
    assert block.row_start == 24
    assert block.row_span == 11
    assert block.start_minute == 540
    assert block.duration_minutes == 55
    assert block.title == "Math"
    assert block.room == "201"
    assert block.key == "c1-Mon"


def test_start_before_window_is_clipped() -> None:
    blocks = build_schedule_blocks([make_entry("c1", ["Tue"], "06:00", "08:00")])
    block = blocks["Tue"][0]
    assert block.start_minute == 420
    assert block.row_start == 0
    assert block.duration_minutes == 110
    assert block.row_span == 22


def test_days_fan_out_with_identical_geometry() -> None:
    blocks = build_schedule_blocks(
        [make_entry("c1", ["Mon", "Wed", "Fri"], "09:00", "10:00")]
    )
    produced = [block for day in DAY_CODES for block in blocks[day]]
    assert len(produced) == 3
    assert [block.day_code for block in produced] == ["Mon", "Wed", "Fri"]
    assert {(block.row_start, block.row_span) for block in produced} == {(24, 11)}


def test_single_day_string() -> None:
    blocks = build_schedule_blocks([make_entry("c1", "Wednesday", "09:00", "10:00")])
    assert len(blocks["Wed"]) == 1


def test_invalid_day_produces_nothing() -> None:
    diagnostics = []
    blocks = build_schedule_blocks(
        [make_entry("c1", ["Funday"], "09:00", "10:00")], diagnostics=diagnostics
    )
    assert all(not day_blocks for day_blocks in blocks.values())
    assert [item.reason for item in diagnostics] == ["day"]


def test_invalid_day_keeps_other_days() -> None:
    blocks = build_schedule_blocks(
        [make_entry("c1", ["Mon", "Funday", "Thursday"], "09:00", "10:00")]
    )
    assert len(blocks["Mon"]) == 1
    assert len(blocks["Thu"]) == 1


def test_blocks_sorted_by_start_per_day() -> None:
    entries = [
        make_entry("late", ["Tue"], "10:00", "11:00"),
        make_entry("early", ["Tue"], "09:00", "10:00"),
    ]
    blocks = build_schedule_blocks(entries)
    assert [block.class_id for block in blocks["Tue"]] == ["early", "late"]


def test_equal_starts_keep_input_order() -> None:
    entries = [
        make_entry("b", ["Thu"], "09:00", "10:00"),
        make_entry("a", ["Thu"], "09:00", "11:00"),
    ]
    blocks = build_schedule_blocks(entries)
    assert [block.class_id for block in blocks["Thu"]] == ["b", "a"]


def test_repeated_passes_are_identical() -> None:
    entries = [
        make_entry("c1", ["Mon", "Wed"], "09:00", "10:00"),
        make_entry("c2", ["Mon"], "08:15", "10:05"),
        make_entry("c3", ["Sat"], "13:00", "16:00"),
    ]
    assert build_schedule_blocks(entries) == build_schedule_blocks(entries)


def test_malformed_times_are_skipped_and_reported() -> None:
    diagnostics = []
    entries = [
        make_entry("bad-start", ["Mon"], "nine", "10:00"),
        make_entry("bad-end", ["Mon"], "09:00", None),
        make_entry("good", ["Mon"], "09:00", "10:00"),
    ]
    blocks = build_schedule_blocks(entries, diagnostics=diagnostics)
    assert [block.class_id for block in blocks["Mon"]] == ["good"]
    assert [(item.class_id, item.reason) for item in diagnostics] == [
        ("bad-start", "start_time"),
        ("bad-end", "end_time"),
    ]


def test_day_set_fans_out_to_each_day() -> None:
    diagnostics = []
    blocks = build_schedule_blocks(
        [make_entry("c1", {"Mon", "Wed"}, "09:00", "10:00")], diagnostics=diagnostics
    )
    assert [block.key for block in blocks["Mon"]] == ["c1-Mon"]
    assert [block.key for block in blocks["Wed"]] == ["c1-Wed"]
    assert diagnostics == []


def test_days_from_generator_and_frozenset() -> None:
    entries = [
        make_entry("gen", (day for day in ["Tue", "Thu"]), "09:00", "10:00"),
        make_entry("frozen", frozenset({"Sat"}), "11:00", "12:00"),
    ]
    blocks = build_schedule_blocks(entries)
    assert [block.class_id for block in blocks["Tue"]] == ["gen"]
    assert [block.class_id for block in blocks["Thu"]] == ["gen"]
    assert [block.class_id for block in blocks["Sat"]] == ["frozen"]


def test_non_iterable_days_are_reported() -> None:
    diagnostics = []
    blocks = build_schedule_blocks(
        [make_entry("c1", 5, "09:00", "10:00")], diagnostics=diagnostics
    )
    assert all(not day_blocks for day_blocks in blocks.values())
    assert [item.reason for item in diagnostics] == ["no_days"]
    assert diagnostics[0].omitted


def test_degenerate_range_still_gets_a_block() -> None:
    diagnostics = []
    blocks = build_schedule_blocks(
        [make_entry("c1", ["Fri"], "10:00", "09:00")], diagnostics=diagnostics
    )
    block = blocks["Fri"][0]
    assert block.duration_minutes == 55
    assert block.row_span == 11
    assert [item.reason for item in diagnostics] == ["degenerate_range"]
    assert not diagnostics[0].omitted


def test_start_after_window_is_skipped() -> None:
    diagnostics = []
    entries = [
        make_entry("night", ["Mon"], "22:00", "23:00"),
        make_entry("last-row", ["Mon"], "21:55", "22:30"),
    ]
    blocks = build_schedule_blocks(entries, diagnostics=diagnostics)
    assert [block.class_id for block in blocks["Mon"]] == ["last-row"]
    assert blocks["Mon"][0].row_start == 179
    assert [item.reason for item in diagnostics] == ["after_window"]


def test_repeated_day_yields_one_block() -> None:
    diagnostics = []
    blocks = build_schedule_blocks(
        [make_entry("c1", ["Mon", "Monday"], "09:00", "10:00")],
        diagnostics=diagnostics,
    )
    assert len(blocks["Mon"]) == 1
    assert [item.reason for item in diagnostics] == ["duplicate_day"]


def test_missing_days_are_reported() -> None:
    diagnostics = []
    blocks = build_schedule_blocks(
        [make_entry("c1", [], "09:00", "10:00"), make_entry("c2", None, "09:00", "10:00")],
        diagnostics=diagnostics,
    )
    assert all(not day_blocks for day_blocks in blocks.values())
    assert [item.reason for item in diagnostics] == ["no_days", "no_days"]


def test_custom_window() -> None:
    window = DisplayWindow(start_hour=8, end_hour=20)
    blocks = build_schedule_blocks([make_entry("c1", ["Sat"], "09:00", "10:00")], window)
    assert window.rows_per_day == 156
    assert blocks["Sat"][0].row_start == 12


def test_stack_offset() -> None:
    assert stack_offset(0, 6) == 0
    assert stack_offset(2, 6) == 12
    assert stack_offset(5, 6, 0) == 30
    assert stack_offset(4, 6, 3) == 6
