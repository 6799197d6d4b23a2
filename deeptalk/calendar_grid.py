from __future__ import annotations

import calendar as _calendar
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from deeptalk.constants import MAX_EVENTS_PER_CELL


@dataclass
class DayCell:
    day: date
    in_month: bool
    is_today: bool
    is_weekend: bool
    events: list = field(default_factory=list)

    @property
    def visible_events(self):
        return self.events[:MAX_EVENTS_PER_CELL]

    @property
    def overflow(self):
        return max(0, len(self.events) - MAX_EVENTS_PER_CELL)


def _as_date(value):
    if isinstance(value, datetime):
        return value.date()
    return value


def month_last_day(reference_date):
    days = _calendar.monthrange(reference_date.year, reference_date.month)[1]
    return reference_date.replace(day=days)


def start_of_week(day):
    # Sunday-first weeks; date.weekday() has Monday == 0.
    return day - timedelta(days=(day.weekday() + 1) % 7)


def end_of_week(day):
    return start_of_week(day) + timedelta(days=6)


def week_range(day):
    start = start_of_week(_as_date(day))
    return start, start + timedelta(days=6)


def month_range(day):
    day = _as_date(day)
    start = day.replace(day=1)
    return start, month_last_day(start)


def shift_month(day, months):
    day = _as_date(day)
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last = _calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last))


def events_for_date(events, day):
    day = _as_date(day)
    return [event for event in events if _as_date(event.date) == day]


def bucket_events(events):
    buckets = {}
    for event in events:
        buckets.setdefault(_as_date(event.date), []).append(event)
    for items in buckets.values():
        items.sort(key=lambda event: (event.time or "", event.title.lower()))
    return buckets


def month_grid(reference, events=(), today=None):
    """Weeks of DayCells covering the month of ``reference``.

    The grid starts on the Sunday on or before the 1st and ends on the
    Saturday on or after the last day, so leading and trailing days of the
    neighbouring months are included with ``in_month`` False.
    """
    reference = _as_date(reference)
    today = _as_date(today) if today else date.today()
    month_start, month_end = month_range(reference)
    grid_start = start_of_week(month_start)
    grid_end = end_of_week(month_end)
    buckets = bucket_events(events)

    weeks = []
    current = grid_start
    while current <= grid_end:
        week = []
        for _ in range(7):
            week.append(
                DayCell(
                    day=current,
                    in_month=current.month == reference.month,
                    is_today=current == today,
                    is_weekend=current.weekday() >= 5,
                    events=buckets.get(current, []),
                )
            )
            current += timedelta(days=1)
        weeks.append(week)
    return weeks


def events_in_range(events, start_day, end_day):
    start_day = _as_date(start_day)
    end_day = _as_date(end_day)
    return [event for event in events if start_day <= _as_date(event.date) <= end_day]


def build_week_hour_board(events, start_day):
    columns = [(start_day + timedelta(days=i)) for i in range(7)]
    index = {}
    for item in events:
        if not item.time:
            continue
        hour_key = item.time[:2]
        index.setdefault((_as_date(item.date), hour_key), []).append(f"{item.time} • {item.title}")

    hour_rows = []
    for hour in range(0, 24):
        hour_label = f"{hour:02d}"
        row = {"Hour": f"{hour_label}:00"}
        for day in columns:
            row[day.strftime("%a %d/%m")] = " | ".join(index.get((day, hour_label), []))
        hour_rows.append(row)
    return hour_rows
