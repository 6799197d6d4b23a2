from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta

import pandas as pd

from deeptalk.calendar_grid import month_range, week_range
from deeptalk.constants import DISPLAY_PRIORITIES, DISPLAY_STATUSES


def _now(now=None):
    return now or datetime.now()


def is_overdue(event, now=None):
    if event.deadline is None or event.status == "completed":
        return False
    return event.deadline < _now(now)


def overdue_events(events, now=None):
    return [event for event in events if is_overdue(event, now)]


def today_events(events, now=None):
    today = _now(now).date()
    return [event for event in events if event.date.date() == today]


def filter_by_priority(events, priority):
    return [event for event in events if event.priority == priority]


def filter_by_type(events, event_type):
    return [event for event in events if event.type == event_type]


def filter_by_status(events, status):
    if not status or status == "all":
        return list(events)
    return [event for event in events if event.status == status]


def completion_rate(events):
    tasks = filter_by_type(events, "task")
    if not tasks:
        return 0
    completed = sum(1 for task in tasks if task.status == "completed")
    return round(completed / len(tasks) * 100)


def upcoming_deadlines(events, days=7, now=None):
    now = _now(now)
    horizon = now + timedelta(days=days)
    upcoming = [
        event
        for event in events
        if event.deadline is not None and event.status != "completed" and now <= event.deadline <= horizon
    ]
    return sorted(upcoming, key=lambda event: event.deadline)


def compute_calendar_stats(events, now=None):
    now = _now(now)
    today = now.date()
    week_start, week_end = week_range(today)
    month_start, month_end = month_range(today)
    tasks = filter_by_type(events, "task")

    by_priority = {priority: 0 for priority in DISPLAY_PRIORITIES}
    by_priority.update(Counter(event.priority for event in tasks))
    by_status = {status: 0 for status in DISPLAY_STATUSES}
    by_status.update(Counter(event.status for event in tasks))
    by_category = dict(Counter(event.category or "Uncategorized" for event in events))

    progress_values = [event.progress for event in tasks if event.progress is not None]
    estimated_minutes = sum(event.duration or 0 for event in tasks)

    return {
        "total_events": len(events),
        "total_tasks": len(tasks),
        "completed_tasks": by_status.get("completed", 0),
        "overdue_tasks": len(overdue_events(tasks, now)),
        "upcoming_deadlines": len(upcoming_deadlines(tasks, now=now)),
        "today_events": sum(1 for event in events if event.date.date() == today),
        "this_week_events": sum(1 for event in events if week_start <= event.date.date() <= week_end),
        "this_month_events": sum(1 for event in events if month_start <= event.date.date() <= month_end),
        "average_progress": round(sum(progress_values) / len(progress_values), 1) if progress_values else 0,
        "total_estimated_hours": round(estimated_minutes / 60, 1),
        "completion_rate": completion_rate(events),
        "events_by_category": by_category,
        "tasks_by_priority": by_priority,
        "tasks_by_status": by_status,
    }


EVENT_COLUMNS = ["id", "title", "date", "time", "deadline", "priority", "status", "category", "progress", "completed"]


def events_frame(events):
    if not events:
        return pd.DataFrame(columns=EVENT_COLUMNS)
    rows = [event.model_dump(include=set(EVENT_COLUMNS)) for event in events]
    frame = pd.DataFrame(rows, columns=EVENT_COLUMNS)
    frame["date"] = pd.to_datetime(frame["date"])
    frame["deadline"] = pd.to_datetime(frame["deadline"])
    return frame.sort_values("date").reset_index(drop=True)
