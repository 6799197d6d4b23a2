import streamlit as st

from deeptalk.tabs.calendar_tab import render_calendar_tab
from deeptalk.tabs.tasks_tab import render_tasks_tab


TAB_OPTIONS = [
    "Calendar",
    "Tasks",
]


def render_router(ctx):
    active = st.session_state.get("ui.active_tab", TAB_OPTIONS[0])
    active = st.segmented_control(
        "Workspace",
        TAB_OPTIONS,
        key="ui.active_tab",
        default=active,
    )

    if active == "Tasks":
        return _render_tasks(ctx)

    return _render_calendar(ctx)


@st.fragment
def _render_calendar(ctx):
    render_calendar_tab(ctx)


@st.fragment
def _render_tasks(ctx):
    render_tasks_tab(ctx)
