"""Pure rendering: unit snapshots in, terminal text out.

Nothing here touches a stream or a clock, so the same inputs always render
the same lines.
"""

from __future__ import annotations

from collections.abc import Sequence

import click

from stepwise.runtime.models import ExecutionStatus, GroupFailure, UnitSnapshot

SPINNER_FRAMES = ("—", "\\", "|", "/")

GLYPH_COMPLETED = "✔"
GLYPH_FAILED = "✘"
GLYPH_INCOMPLETE = "?"
GLYPH_PENDING = "·"
ELLIPSIS = "…"

RUNNING_COLOR = (121, 115, 118)

CURSOR_PREVIOUS_LINE = "\x1b[{count}F"
CLEAR_LINE = "\x1b[2K"


def spinner_frame(tick: int) -> str:
    return SPINNER_FRAMES[tick % len(SPINNER_FRAMES)]


def glyph_for(status: ExecutionStatus, tick: int = 0) -> str:
    if status == ExecutionStatus.RUNNING:
        return spinner_frame(tick)
    if status == ExecutionStatus.COMPLETED:
        return GLYPH_COMPLETED
    if status == ExecutionStatus.FAILED:
        return GLYPH_FAILED
    if status == ExecutionStatus.INCOMPLETE:
        return GLYPH_INCOMPLETE
    return GLYPH_PENDING


def _decorate(text: str, status: ExecutionStatus, *, color: bool) -> str:
    if not color:
        return text
    if status == ExecutionStatus.RUNNING:
        return click.style(text, fg=RUNNING_COLOR)
    if status == ExecutionStatus.COMPLETED:
        return click.style(text, fg="green")
    if status.is_failure:
        return click.style(text, fg="red")
    return click.style(text, dim=True)


def render_unit_line(
    snapshot: UnitSnapshot,
    *,
    stage: int,
    total_stages: int,
    tick: int = 0,
    color: bool = True,
    width: int | None = None,
) -> str:
    """Render ``[stage/total] label glyph`` for one unit.

    With ``width`` set, the label is shortened so the line fits in fewer than
    ``width`` columns and never wraps.
    """

    prefix = f"[{stage}/{total_stages}] "
    suffix = f" {glyph_for(snapshot.status, tick)}"
    label = snapshot.label
    if width is not None:
        label = _truncate(label, width - 1 - len(prefix) - len(suffix))
    text = f"{prefix}{label}{suffix}"
    return _decorate(text, snapshot.status, color=color)


def render_group_lines(
    snapshots: Sequence[UnitSnapshot],
    *,
    stage: int,
    total_stages: int,
    tick: int = 0,
    color: bool = True,
    width: int | None = None,
) -> list[str]:
    return [
        render_unit_line(
            snapshot,
            stage=stage,
            total_stages=total_stages,
            tick=tick,
            color=color,
            width=width,
        )
        for snapshot in snapshots
    ]


def render_header(stage: int, total_stages: int, title: str, *, color: bool = True) -> str:
    text = f"==> Stage {stage}/{total_stages}"
    if title:
        text = f"{text}: {title}"
    return click.style(text, bold=True) if color else text


def render_failure(stage: int, failure: GroupFailure, *, color: bool = True) -> str:
    text = f"stage {stage} failed: {failure.label}"
    if failure.reason != ExecutionStatus.FAILED.value:
        text = f"{text} ({failure.reason})"
    return click.style(text, fg="red", bold=True) if color else text


def redraw(previous_line_count: int, lines: Sequence[str]) -> str:
    """Build the payload that overwrites the previous frame with ``lines``.

    The cursor is expected to sit at the start of the line below the previous
    frame, and is left at the start of the line below the new one.
    """

    parts: list[str] = []
    if previous_line_count > 0:
        parts.append(CURSOR_PREVIOUS_LINE.format(count=previous_line_count))
    parts.extend(f"{CLEAR_LINE}{line}\n" for line in lines)
    # Clear leftovers when the new frame is shorter than the previous one.
    parts.extend(f"{CLEAR_LINE}\n" for _ in range(previous_line_count - len(lines)))
    return "".join(parts)


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    if limit <= 1:
        return ELLIPSIS[: max(limit, 0)]
    return text[: limit - 1] + ELLIPSIS
