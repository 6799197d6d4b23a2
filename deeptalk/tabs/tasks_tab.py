import streamlit as st

from deeptalk.constants import DISPLAY_PRIORITIES, DISPLAY_STATUSES, PRIORITY_LABELS, STATUS_LABELS
from deeptalk.data.mapping import backend_priority, backend_status
from deeptalk.metrics import compute_calendar_stats, events_frame, filter_by_priority, filter_by_status
from deeptalk.state import session_slices
from deeptalk.tabs.event_list import render_event_rows
from deeptalk.tabs.task_form import render_task_form
from deeptalk.visualizations import priority_pie_chart, status_bar_chart

STATUS_FILTERS = ["all"] + DISPLAY_STATUSES
PRIORITY_FILTERS = ["all"] + DISPLAY_PRIORITIES


def _filter_label(key):
    if key == "all":
        return "All"
    return STATUS_LABELS.get(key) or PRIORITY_LABELS.get(key, key)


def _render_summary(ctx):
    stats = ctx.store.stats
    cols = st.columns(4)
    cols[0].metric("Total", stats.total)
    cols[1].metric("Pending", stats.pending)
    cols[2].metric("In progress", stats.in_progress)
    cols[3].metric("Completed", stats.completed)
    if stats.overdue:
        st.caption(f"{stats.overdue} overdue • {stats.completion_rate:.0f}% complete")

    local = compute_calendar_stats(ctx.store.events)
    if not local["total_tasks"]:
        return
    chart_cols = st.columns(2)
    with chart_cols[0]:
        st.plotly_chart(status_bar_chart(local["tasks_by_status"]), use_container_width=True)
    with chart_cols[1]:
        st.plotly_chart(priority_pie_chart(local["tasks_by_priority"]), use_container_width=True)
    st.caption(
        f"Completion rate {local['completion_rate']}% • "
        f"{local['overdue_tasks']} overdue • {local['upcoming_deadlines']} due this week"
    )


def render_tasks_tab(ctx):
    store = ctx.store
    st.markdown("### Tasks")
    _render_summary(ctx)

    controls = st.columns([3, 2, 2, 1])
    query = controls[0].text_input("Search", key="tasks.query", placeholder="Search tasks...")
    status = controls[1].selectbox("Status", STATUS_FILTERS, key="tasks.status", format_func=_filter_label)
    priority = controls[2].selectbox("Priority", PRIORITY_FILTERS, key="tasks.priority", format_func=_filter_label)
    if controls[3].button("New", key="tasks.new", type="primary"):
        session_slices.open_dialog(st.session_state, None)
        st.rerun()

    render_task_form(ctx)

    if query.strip():
        events = store.search_events(
            query.strip(),
            status=None if status == "all" else backend_status(status),
            priority=None if priority == "all" else backend_priority(priority),
        )
    else:
        events = filter_by_status(store.events, status)
        if priority != "all":
            events = filter_by_priority(events, priority)

    events = sorted(events, key=lambda event: (event.completed, event.date))
    st.caption(f"{len(events)} tasks")
    render_event_rows(ctx, events, "tasks")

    if events:
        st.download_button(
            "Export CSV",
            events_frame(events).to_csv(index=False),
            file_name="deeptalk_tasks.csv",
            mime="text/csv",
            key="tasks.export",
        )
