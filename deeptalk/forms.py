from __future__ import annotations

from datetime import date, datetime, time

from pydantic import ValidationError

from deeptalk.schemas import CalendarEvent


def parse_tags(raw):
    if not raw:
        return []
    return [tag.strip() for tag in str(raw).split(",") if tag.strip()]


def _parse_clock(value):
    if not value:
        return None
    try:
        return datetime.strptime(str(value).strip(), "%H:%M").time()
    except ValueError:
        return None


def validate_event(values):
    """Return a list of human readable problems with a task form.

    ``values`` is a dict with the form fields: title, date, start_time,
    end_time, deadline, progress, estimated_hours.
    """
    errors = []
    title = str(values.get("title") or "").strip()
    if not title:
        errors.append("Title is required")

    event_date = values.get("date")
    if not event_date:
        errors.append("Date is required")

    start_raw = str(values.get("start_time") or "").strip()
    end_raw = str(values.get("end_time") or "").strip()
    start = _parse_clock(start_raw)
    end = _parse_clock(end_raw)
    if (start_raw and start is None) or (end_raw and end is None):
        errors.append("Times must use HH:MM")
    elif start is not None and end is not None and start >= end:
        errors.append("End time must be after start time")

    deadline = values.get("deadline")
    if deadline and event_date and _day(deadline) < _day(event_date):
        errors.append("Deadline cannot be before event date")

    progress = values.get("progress")
    if progress is not None and not (0 <= progress <= 100):
        errors.append("Progress must be between 0 and 100")

    estimated = values.get("estimated_hours")
    if estimated is not None and estimated < 0:
        errors.append("Estimated hours cannot be negative")
    return errors


def _day(value):
    if isinstance(value, datetime):
        return value.date()
    return value


def _at(day, clock=None):
    if isinstance(day, datetime):
        day = day.date()
    return datetime.combine(day, clock or time(0, 0))


def build_event_from_form(values, event_id=""):
    """Turn validated dialog values into a CalendarEvent.

    Raises ValueError carrying every problem found.
    """
    problems = validate_event(values)
    if problems:
        raise ValueError("; ".join(problems))

    event_date = values["date"]
    clock = _parse_clock(values.get("start_time"))
    status = values.get("status") or "not_started"
    deadline = values.get("deadline")
    if isinstance(deadline, date) and not isinstance(deadline, datetime):
        deadline = _at(deadline)

    try:
        return CalendarEvent(
            id=event_id or "",
            title=str(values["title"]).strip(),
            description=(values.get("description") or None),
            date=_at(event_date, clock),
            time=clock.strftime("%H:%M") if clock else None,
            deadline=deadline,
            duration=values.get("duration") or None,
            priority=values.get("priority") or "medium",
            status=status,
            category=values.get("category") or None,
            tags=parse_tags(values.get("tags")),
            location=values.get("location") or None,
            type="task",
            completed=status == "completed",
            progress=100 if status == "completed" else 0,
        )
    except ValidationError as exc:
        raise ValueError(f"Invalid task: {exc.error_count()} field error(s)") from exc
