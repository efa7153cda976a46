"""Plain-text rendering of the calendar view."""

from .grid import WEEKDAY_LABELS, MonthGrid
from .state import ViewState

CELL_WIDTH = 5


def render_grid(grid: MonthGrid) -> list[str]:
    lines = ["".join(label.rjust(CELL_WIDTH) for label in WEEKDAY_LABELS)]
    for week in grid.weeks():
        row = []
        for day in week:
            if day is None:
                row.append(" " * CELL_WIDTH)
                continue
            text = f"[{day}]" if grid.is_today(day) else str(day)
            if grid.events_for_day(day):
                text += "*"
            row.append(text.rjust(CELL_WIDTH))
        lines.append("".join(row).rstrip())
    return lines


def render_event_list(grid: MonthGrid) -> list[str]:
    entries = grid.days_with_events()
    if not entries:
        return ["  No events this month."]

    lines = []
    for day, events in entries:
        lines.append(f"  {grid.month.day_key(day)}")
        for event in events:
            lines.append(f"    - {event.title or '(untitled)'}  [id: {event.id}]")
    return lines


def render_view(state: ViewState, grid: MonthGrid) -> str:
    """
    Render the whole screen.

    Args:
        state: Current view state
        grid: Grid computed for ``state.reference_month``

    Returns:
        Multi-line string ready to print
    """
    header = grid.month.label
    if state.user_id:
        header += f"    (user: {state.user_id})"

    lines = [header, "=" * max(len(header), 7 * CELL_WIDTH)]
    lines += render_grid(grid)
    lines.append("")
    lines.append("Events:")
    lines += ["  Loading..."] if state.loading else render_event_list(grid)
    lines.append("")
    lines.append(f"New event: title={state.draft.title!r} date={state.draft.date!r}")
    if state.status_message:
        lines.append(f"Status: {state.status_message}")
    return "\n".join(lines)
