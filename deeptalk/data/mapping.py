"""Translation between backend task records and calendar view models.

Backend priorities run 1 (most urgent) to 5; the calendar shows four
levels. Priorities 3 and 4 both display as ``medium`` and ``medium`` always
writes back as 3, so a task saved from the calendar loses a stored 4.
"""

from __future__ import annotations

from datetime import datetime

from deeptalk.constants import (
    BACKEND_PRIORITY_META,
    DEFAULT_BACKEND_PRIORITY,
    DEFAULT_EVENT_COLOR,
    STATUS_COLORS,
)
from deeptalk.schemas import BackendTask, CalendarEvent, TaskWritePayload

PRIORITY_TO_DISPLAY = {
    1: "urgent",
    2: "high",
    3: "medium",
    4: "medium",
    5: "low",
}

DISPLAY_TO_PRIORITY = {
    "urgent": 1,
    "high": 2,
    "medium": 3,
    "low": 5,
}

STATUS_TO_DISPLAY = {
    "pending": "not_started",
    "in_progress": "in_progress",
    "completed": "completed",
    "cancelled": "cancelled",
    "on_hold": "on_hold",
}

DISPLAY_TO_STATUS = {display: backend for backend, display in STATUS_TO_DISPLAY.items()}


def to_local(value):
    """Drop tzinfo after converting to local time; naive values pass through."""
    if value is None:
        return None
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def display_priority(priority):
    try:
        return PRIORITY_TO_DISPLAY.get(int(priority), "medium")
    except (TypeError, ValueError):
        return "medium"


def backend_priority(priority):
    return DISPLAY_TO_PRIORITY.get(priority, DEFAULT_BACKEND_PRIORITY)


def display_status(status):
    return STATUS_TO_DISPLAY.get(status, "not_started")


def backend_status(status):
    return DISPLAY_TO_STATUS.get(status, "pending")


def display_date(task: BackendTask, now=None):
    for value in (task.specific_time, task.deadline, task.created_at):
        if value is not None:
            return to_local(value)
    return now or datetime.now()


def task_to_event(task, now=None) -> CalendarEvent:
    if not isinstance(task, BackendTask):
        task = BackendTask.model_validate(task)
    specific_time = to_local(task.specific_time)
    category = task.category
    return CalendarEvent(
        id=task.id,
        title=task.name,
        description=task.description,
        date=display_date(task, now=now),
        time=specific_time.strftime("%H:%M") if specific_time else None,
        deadline=to_local(task.deadline),
        duration=task.duration_minutes,
        priority=display_priority(task.priority),
        status=display_status(task.status),
        category=category.name if category else None,
        tags=list(task.tags),
        location=task.location,
        color=(category.color_hex if category else None) or DEFAULT_EVENT_COLOR,
        type="task",
        completed=task.status == "completed",
        progress=max(0, min(100, int(task.completion_percentage or 0))),
    )


def _parse_clock(value):
    hours, _, minutes = str(value).strip().partition(":")
    return int(hours), int(minutes or 0)


def event_to_payload(event, category_ids=None) -> TaskWritePayload:
    if not isinstance(event, CalendarEvent):
        event = CalendarEvent.model_validate(event)

    level = backend_priority(event.priority)
    payload = TaskWritePayload(
        name=event.title or "",
        description=event.description or "",
        tags=list(event.tags or []),
        location=event.location or "",
        priority=level,
        urgency=level,
        status=backend_status(event.status),
    )

    if event.date is not None:
        if event.time:
            hours, minutes = _parse_clock(event.time)
            specific = event.date.replace(hour=hours, minute=minutes, second=0, microsecond=0)
            payload.specific_time = specific.astimezone()
        payload.deadline = (event.deadline or event.date).astimezone()

    if event.duration:
        payload.duration_minutes = event.duration
    if event.progress is not None:
        payload.completion_percentage = event.progress
    if event.category:
        lookup = category_ids or {}
        payload.category = lookup.get(event.category)
    return payload


def priority_color(priority):
    meta = BACKEND_PRIORITY_META.get(priority) or BACKEND_PRIORITY_META[DEFAULT_BACKEND_PRIORITY]
    return meta["color"]


def priority_label(priority):
    meta = BACKEND_PRIORITY_META.get(priority)
    return meta["label"] if meta else "Medium"


def status_color(status):
    # Accepts either vocabulary.
    if status in STATUS_TO_DISPLAY:
        status = STATUS_TO_DISPLAY[status]
    return STATUS_COLORS.get(status, STATUS_COLORS["not_started"])


def format_time(value):
    if value is None:
        return ""
    value = to_local(value)
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"


def calculate_progress(status):
    if status == "completed":
        return 100
    if status == "in_progress":
        return 50
    return 0
