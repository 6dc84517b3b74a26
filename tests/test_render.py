from __future__ import annotations

import allure
import click

from stepwise.runtime import ExecutionStatus, GroupFailure, UnitSnapshot
from stepwise.runtime.render import (
    CLEAR_LINE,
    SPINNER_FRAMES,
    glyph_for,
    redraw,
    render_failure,
    render_group_lines,
    render_header,
    render_unit_line,
)

pytestmark = [
    allure.epic("Terminal View"),
    allure.feature("Rendering"),
]


def test_spinner_cycles_through_frames_for_running_units() -> None:
    glyphs = [glyph_for(ExecutionStatus.RUNNING, tick) for tick in range(6)]
    assert glyphs == ["—", "\\", "|", "/", "—", "\\"]
    assert len(SPINNER_FRAMES) == 4


def test_terminal_glyphs_do_not_animate() -> None:
    assert {glyph_for(ExecutionStatus.COMPLETED, tick) for tick in range(4)} == {"✔"}
    assert {glyph_for(ExecutionStatus.FAILED, tick) for tick in range(4)} == {"✘"}
    assert glyph_for(ExecutionStatus.INCOMPLETE) == "?"


def test_unit_line_without_color_is_plain_text() -> None:
    line = render_unit_line(
        UnitSnapshot("Push image", ExecutionStatus.COMPLETED),
        stage=2,
        total_stages=3,
        color=False,
    )
    assert line == "[2/3] Push image ✔"


def test_unit_line_with_color_uses_status_colors() -> None:
    completed = render_unit_line(
        UnitSnapshot("ok", ExecutionStatus.COMPLETED),
        stage=1,
        total_stages=1,
    )
    failed = render_unit_line(UnitSnapshot("bad", ExecutionStatus.FAILED), stage=1, total_stages=1)

    assert completed == click.style("[1/1] ok ✔", fg="green")
    assert failed == click.style("[1/1] bad ✘", fg="red")
    assert click.unstyle(failed) == "[1/1] bad ✘"


def test_group_lines_follow_insertion_order_and_are_pure() -> None:
    snapshots = [
        UnitSnapshot("a", ExecutionStatus.RUNNING),
        UnitSnapshot("b", ExecutionStatus.PENDING),
        UnitSnapshot("c", ExecutionStatus.FAILED),
    ]

    first = render_group_lines(snapshots, stage=1, total_stages=2, tick=2, color=False)
    second = render_group_lines(snapshots, stage=1, total_stages=2, tick=2, color=False)

    assert first == second == ["[1/2] a |", "[1/2] b ·", "[1/2] c ✘"]


def test_header_and_failure_messages() -> None:
    assert render_header(1, 3, "Build", color=False) == "==> Stage 1/3: Build"
    assert render_header(2, 3, "", color=False) == "==> Stage 2/3"

    failure = GroupFailure(label="Migrate", index=1, status=ExecutionStatus.FAILED)
    assert render_failure(2, failure, color=False) == "stage 2 failed: Migrate"

    hung = GroupFailure(
        label="Wait",
        index=0,
        status=ExecutionStatus.RUNNING,
        reason="timeout",
    )
    assert render_failure(3, hung, color=False) == "stage 3 failed: Wait (timeout)"


def test_redraw_first_frame_has_no_cursor_movement() -> None:
    assert redraw(0, ["one", "two"]) == f"{CLEAR_LINE}one\n{CLEAR_LINE}two\n"


def test_redraw_moves_cursor_over_previous_frame() -> None:
    payload = redraw(2, ["one", "two"])
    assert payload == f"\x1b[2F{CLEAR_LINE}one\n{CLEAR_LINE}two\n"


def test_redraw_clears_leftover_lines_of_longer_previous_frame() -> None:
    payload = redraw(3, ["only"])
    assert payload == f"\x1b[3F{CLEAR_LINE}only\n{CLEAR_LINE}\n{CLEAR_LINE}\n"


def test_unit_line_is_shortened_to_fit_width() -> None:
    line = render_unit_line(
        UnitSnapshot("Roll out the service to every region", ExecutionStatus.RUNNING),
        stage=1,
        total_stages=2,
        color=False,
        width=20,
    )

    assert line == "[1/2] Roll out t… —"
    assert len(line) == 19


def test_unit_line_within_width_is_unchanged() -> None:
    line = render_unit_line(
        UnitSnapshot("Push", ExecutionStatus.COMPLETED),
        stage=1,
        total_stages=1,
        color=False,
        width=80,
    )
    assert line == "[1/1] Push ✔"
