from __future__ import annotations

from datetime import datetime, timezone

import pytest

from deeptalk.constants import DEFAULT_EVENT_COLOR
from deeptalk.data.mapping import (
    backend_priority,
    backend_status,
    calculate_progress,
    display_priority,
    display_status,
    event_to_payload,
    format_time,
    priority_color,
    priority_label,
    status_color,
    task_to_event,
)
from deeptalk.schemas import BackendTask, CalendarEvent

from .fakes import task_payload


@pytest.mark.parametrize(
    "backend, display",
    [(1, "urgent"), (2, "high"), (3, "medium"), (4, "medium"), (5, "low"), (9, "medium"), (None, "medium")],
)
def test_display_priority(backend, display):
    assert display_priority(backend) == display


def test_medium_writes_back_as_three():
    assert backend_priority(display_priority(4)) == 3
    assert backend_priority("unknown") == 3


def test_status_maps_are_inverse():
    for status in ["pending", "in_progress", "completed", "cancelled", "on_hold"]:
        assert backend_status(display_status(status)) == status
    assert display_status("pending") == "not_started"
    assert display_status("archived") == "not_started"


def test_task_without_schedule_shows_on_creation_date():
    event = task_to_event(BackendTask.model_validate(task_payload()))

    assert event.title == "Write report"
    assert event.date == datetime(2024, 3, 10, 9, 30)
    assert event.time is None
    assert event.id == "7"
    assert event.color == DEFAULT_EVENT_COLOR


def test_priority_four_pending_is_medium_not_started():
    event = task_to_event(task_payload(priority=4, status="pending"))

    assert event.priority == "medium"
    assert event.status == "not_started"
    assert not event.completed


def test_specific_time_sets_date_and_clock():
    event = task_to_event(task_payload(specific_time="2024-03-12T14:05:00", deadline="2024-03-15T00:00:00"))

    assert event.date == datetime(2024, 3, 12, 14, 5)
    assert event.time == "14:05"
    assert event.deadline == datetime(2024, 3, 15)


def test_deadline_used_when_no_specific_time():
    event = task_to_event(task_payload(deadline="2024-04-01T08:00:00"))

    assert event.date == datetime(2024, 4, 1, 8, 0)


def test_aware_timestamps_become_local_naive():
    event = task_to_event(task_payload(specific_time="2024-03-12T14:05:00+00:00"))

    expected = datetime(2024, 3, 12, 14, 5, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    assert event.date.tzinfo is None
    assert event.date == expected


def test_missing_dates_fall_back_to_now():
    now = datetime(2024, 5, 1, 12, 0)

    event = task_to_event(task_payload(created_at=None), now=now)

    assert event.date == now


def test_completed_task_and_category():
    event = task_to_event(
        task_payload(
            status="completed",
            completion_percentage=150,
            category={"id": 3, "name": "Work", "color_hex": "#123456"},
        )
    )

    assert event.completed
    assert event.status == "completed"
    assert event.progress == 100
    assert event.category == "Work"
    assert event.color == "#123456"


def test_event_to_payload_shares_level_and_resolves_category():
    event = CalendarEvent(
        title="Plan trip",
        date=datetime(2024, 6, 1),
        time="09:15",
        priority="high",
        status="in_progress",
        category="Travel",
        tags=["fun"],
        duration=45,
        progress=50,
    )

    payload = event_to_payload(event, category_ids={"Travel": "12"})
    body = payload.to_request()

    assert body["name"] == "Plan trip"
    assert body["priority"] == 2
    assert body["urgency"] == 2
    assert body["status"] == "in_progress"
    assert body["category"] == "12"
    assert body["duration_minutes"] == 45
    assert body["completion_percentage"] == 50
    local_specific = payload.specific_time.replace(tzinfo=None)
    assert local_specific == datetime(2024, 6, 1, 9, 15)
    assert payload.specific_time.tzinfo is not None
    assert payload.deadline.replace(tzinfo=None) == datetime(2024, 6, 1)


def test_event_to_payload_without_time_or_known_category():
    event = CalendarEvent(title="Call", date=datetime(2024, 6, 1), category="Nope")

    body = event_to_payload(event).to_request()

    assert "specific_time" not in body
    assert "category" not in body
    assert body["status"] == "pending"
    assert body["priority"] == 3


def test_display_helpers():
    assert priority_color(1) == "#ef4444"
    assert priority_color(42) == priority_color(3)
    assert priority_label(5) == "Lowest"
    assert priority_label(None) == "Medium"
    assert status_color("pending") == status_color("not_started")
    assert format_time(datetime(2024, 1, 1, 0, 5)) == "12:05 AM"
    assert format_time(datetime(2024, 1, 1, 13, 30)) == "1:30 PM"
    assert format_time(None) == ""
    assert calculate_progress("in_progress") == 50
    assert calculate_progress("pending") == 0
