"""Tests for plain-text rendering."""

from datetime import date

from event_calendar.models.event import Event, EventDraft
from event_calendar.models.month import Month
from event_calendar.view.grid import compute_month_grid
from event_calendar.view.render import render_event_list, render_grid, render_view
from event_calendar.view.state import ViewState

MARCH_2024 = Month(year=2024, month=3)
EVENTS = (
    Event(id="evt-1", title="Dentist", date="2024-03-05"),
    Event(id="evt-2", title="", date="2024-03-05"),
    Event(id="evt-3", title="Elsewhere", date="2024-04-05"),
)


def march_grid(events=EVENTS):
    return compute_month_grid(MARCH_2024, events, today=date(2024, 3, 6))


class TestRenderGrid:
    def test_header_and_first_week(self):
        lines = render_grid(march_grid())

        assert lines[0] == "   Su   Mo   Tu   We   Th   Fr   Sa"
        # March 1st 2024 is a Friday
        assert lines[1] == "                             1    2"

    def test_marks_today_and_event_days(self):
        lines = render_grid(march_grid())
        second_week = lines[2]

        assert "  5*" in second_week
        assert " [6]" in second_week
        assert len(lines) == 1 + 6


class TestRenderEventList:
    def test_groups_by_day(self):
        assert render_event_list(march_grid()) == [
            "  2024-03-05",
            "    - Dentist  [id: evt-1]",
            "    - (untitled)  [id: evt-2]",
        ]

    def test_empty_month(self):
        assert render_event_list(march_grid(events=())) == ["  No events this month."]


class TestRenderView:
    def test_full_screen(self):
        state = ViewState(
            reference_month=MARCH_2024,
            events=EVENTS,
            draft=EventDraft(title="Gym", date=""),
            status_message="Event added!",
            user_id="uid-1",
            loading=False,
        )
        text = render_view(state, march_grid())

        assert text.startswith("March 2024    (user: uid-1)\n")
        assert "    - Dentist  [id: evt-1]" in text
        assert "New event: title='Gym' date=''" in text
        assert text.endswith("Status: Event added!")

    def test_loading_hides_event_list(self):
        state = ViewState(reference_month=MARCH_2024)
        text = render_view(state, march_grid())

        assert "  Loading..." in text
        assert "Dentist" not in text
        assert "user:" not in text
        assert "Status:" not in text
