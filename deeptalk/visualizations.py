from __future__ import annotations

import html

from deeptalk.constants import (
    PRIORITY_COLORS,
    STATUS_COLORS,
    STATUS_LABELS,
    WEEKDAY_LABELS,
)

THEME = {
    "text_main": "#1f2937",
    "text_soft": "#6b7280",
    "plot_grid": "rgba(107,114,128,0.15)",
    "border": "rgba(107,114,128,0.35)",
}


def apply_common_plot_style(fig, title, show_xgrid=False, show_ygrid=True):
    fig.update_layout(
        title=title,
        title_font=dict(color=THEME["text_main"], size=16),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        font=dict(color=THEME["text_main"]),
        margin=dict(l=40, r=20, t=40, b=30),
        xaxis=dict(
            showgrid=show_xgrid,
            gridcolor=THEME["plot_grid"],
            tickfont=dict(color=THEME["text_soft"]),
            zeroline=False,
        ),
        yaxis=dict(
            showgrid=show_ygrid,
            gridcolor=THEME["plot_grid"],
            tickfont=dict(color=THEME["text_soft"]),
            zeroline=False,
        ),
    )
    return fig


def status_bar_chart(tasks_by_status, title="Tasks by status", height=280):
    import plotly.graph_objects as go

    keys = list(tasks_by_status.keys())
    fig = go.Figure(
        data=go.Bar(
            x=[STATUS_LABELS.get(key, key) for key in keys],
            y=[tasks_by_status[key] for key in keys],
            marker=dict(color=[STATUS_COLORS.get(key, "#6b7280") for key in keys]),
        )
    )
    apply_common_plot_style(fig, title)
    fig.update_layout(height=height)
    return fig


def priority_pie_chart(tasks_by_priority, title="Tasks by priority", height=280):
    import plotly.graph_objects as go

    keys = [key for key, value in tasks_by_priority.items() if value]
    fig = go.Figure(
        data=go.Pie(
            labels=[key.title() for key in keys],
            values=[tasks_by_priority[key] for key in keys],
            marker=dict(colors=[PRIORITY_COLORS.get(key, "#6b7280") for key in keys]),
            hole=0.45,
            sort=False,
        )
    )
    apply_common_plot_style(fig, title)
    fig.update_layout(height=height, showlegend=True)
    return fig


def _event_chip(event):
    color = PRIORITY_COLORS.get(event.priority, event.color or "#3b82f6")
    label = html.escape(event.title)
    if event.time:
        label = f"{html.escape(event.time)} {label}"
    done = " done" if event.completed else ""
    return f"<div class='cal-chip{done}' style='border-left:3px solid {color};'>{label}</div>"


def build_month_calendar_html(weeks, selected_day=None):
    header_cells = "".join([f"<th>{label}</th>" for label in WEEKDAY_LABELS])
    rows = []
    for week in weeks:
        cells = []
        for cell in week:
            classes = ["calendar-cell"]
            if not cell.in_month:
                classes.append("outside")
            if cell.is_today:
                classes.append("today")
            if cell.is_weekend:
                classes.append("weekend")
            if selected_day is not None and cell.day == selected_day:
                classes.append("selected")
            chips = "".join(_event_chip(event) for event in cell.visible_events)
            if cell.overflow:
                chips += f"<div class='cal-more'>+{cell.overflow} more</div>"
            cells.append(
                f"<td class='{' '.join(classes)}'>"
                f"<div class='calendar-day'>{cell.day.day}</div>"
                f"{chips}"
                "</td>"
            )
        rows.append(f"<tr>{''.join(cells)}</tr>")
    return (
        "<div class='calendar-month'>"
        "<table class='calendar-table'>"
        f"<thead><tr>{header_cells}</tr></thead>"
        f"<tbody>{''.join(rows)}</tbody>"
        "</table>"
        "</div>"
    )


CALENDAR_CSS = """
<style>
.calendar-table { width: 100%; border-collapse: collapse; table-layout: fixed; }
.calendar-table th { font-size: 12px; color: #6b7280; padding: 4px; }
.calendar-cell { vertical-align: top; height: 96px; border: 1px solid rgba(107,114,128,0.2); padding: 4px; }
.calendar-cell.outside { opacity: 0.45; }
.calendar-cell.weekend { background: rgba(243,244,246,0.6); }
.calendar-cell.today .calendar-day { background: #6366f1; color: #fff; border-radius: 999px; width: 22px; text-align: center; }
.calendar-cell.selected { outline: 2px solid #6366f1; }
.calendar-day { font-size: 12px; font-weight: 600; margin-bottom: 2px; }
.cal-chip { font-size: 11px; padding: 1px 4px; margin: 1px 0; background: #f9fafb; border-radius: 4px; overflow: hidden; white-space: nowrap; text-overflow: ellipsis; }
.cal-chip.done { text-decoration: line-through; opacity: 0.7; }
.cal-more { font-size: 10px; color: #6b7280; }
</style>
"""
