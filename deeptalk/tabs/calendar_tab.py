from datetime import date

import pandas as pd
import streamlit as st

from deeptalk import calendar_grid
from deeptalk.state import session_slices
from deeptalk.tabs.event_list import render_event_rows
from deeptalk.tabs.task_form import render_task_form
from deeptalk.visualizations import build_month_calendar_html


def _current_month():
    state = st.session_state
    current = session_slices.get_value(state, session_slices.CALENDAR, "month")
    if current is None:
        current = date.today().replace(day=1)
        session_slices.set_value(state, session_slices.CALENDAR, "month", current)
    return current


def _navigate(months):
    current = _current_month()
    shifted = calendar_grid.shift_month(current, months).replace(day=1)
    session_slices.set_value(st.session_state, session_slices.CALENDAR, "month", shifted)


def _go_today():
    state = st.session_state
    session_slices.set_value(state, session_slices.CALENDAR, "month", date.today().replace(day=1))
    session_slices.set_value(state, session_slices.CALENDAR, "selected_day", date.today())


def render_calendar_tab(ctx):
    store = ctx.store
    state = st.session_state

    st.markdown("### Calendar")
    month = _current_month()
    selected_day = session_slices.get_value(state, session_slices.CALENDAR, "selected_day") or date.today()

    nav = st.columns([1, 1, 1, 2, 1.2])
    nav[0].button("‹ Prev", key="calendar.prev", on_click=_navigate, args=(-1,))
    nav[1].button("Today", key="calendar.today", on_click=_go_today)
    nav[2].button("Next ›", key="calendar.next", on_click=_navigate, args=(1,))
    nav[3].markdown(f"**{month.strftime('%B %Y')}**")
    if nav[4].button("Refresh", key="calendar.refresh"):
        store.refresh()
        st.rerun()

    view_mode = st.radio("View", ["Month", "Week"], horizontal=True, key="calendar.view_mode")

    if view_mode == "Month":
        weeks = calendar_grid.month_grid(month, store.events)
        st.markdown(build_month_calendar_html(weeks, selected_day=selected_day), unsafe_allow_html=True)
    else:
        start_day, _ = calendar_grid.week_range(selected_day)
        rows = calendar_grid.build_week_hour_board(store.events, start_day)
        st.dataframe(pd.DataFrame(rows), hide_index=True, use_container_width=True)

    picked = st.date_input("Selected day", value=selected_day)
    if picked != selected_day:
        session_slices.set_value(state, session_slices.CALENDAR, "selected_day", picked)
        session_slices.set_value(state, session_slices.CALENDAR, "month", picked.replace(day=1))
        st.rerun()

    day_events = calendar_grid.events_for_date(store.events, selected_day)
    header_cols = st.columns([4, 1])
    header_cols[0].markdown(f"**{selected_day.strftime('%A, %B %d, %Y')}**")
    if header_cols[1].button("Add task", key="calendar.add", type="primary"):
        session_slices.open_dialog(state, selected_day)
        st.rerun()

    render_task_form(ctx)
    render_event_rows(ctx, day_events, "calendar")

    pending = sum(1 for event in store.events if event.type == "task" and not event.completed)
    st.caption(f"{pending} pending tasks")
