import html

import streamlit as st

from deeptalk.constants import PRIORITY_COLORS, STATUS_LABELS
from deeptalk.data.api_client import DeepTalkError
from deeptalk.data.mapping import status_color
from deeptalk.metrics import is_overdue
from deeptalk.state import session_slices


def _describe(event):
    parts = [event.date.strftime("%b %d, %Y")]
    if event.time:
        parts.append(event.time)
    if event.category:
        parts.append(event.category)
    if event.location:
        parts.append(event.location)
    return " • ".join(parts)


def render_event_rows(ctx, events, key_prefix):
    store = ctx.store
    if not events:
        st.caption("No tasks.")
        return
    for event in events:
        color = PRIORITY_COLORS.get(event.priority, "#6b7280")
        title = html.escape(event.title)
        if event.completed:
            title = f"~~{title}~~"
        overdue = " :red[overdue]" if is_overdue(event) else ""
        cols = st.columns([5, 1, 1, 1])
        with cols[0]:
            badge = f"<span style='color:{status_color(event.status)};font-size:12px;'>{STATUS_LABELS.get(event.status, '')}</span>"
            st.markdown(
                f"<span style='color:{color};'>●</span> **{title}**{overdue} {badge}",
                unsafe_allow_html=True,
            )
            st.caption(_describe(event))
        toggle_label = "Reopen" if event.completed else "Done"
        if cols[1].button(toggle_label, key=f"{key_prefix}.toggle.{event.id}"):
            try:
                store.mark_task_completed(event.id)
                store.fetch_stats()
            except DeepTalkError as exc:
                st.error(f"Could not update task: {exc}")
            else:
                st.rerun()
        if cols[2].button("Edit", key=f"{key_prefix}.edit.{event.id}"):
            session_slices.open_dialog(st.session_state, event.date.date(), event_id=event.id)
            st.rerun()
        if cols[3].button("Delete", key=f"{key_prefix}.delete.{event.id}"):
            try:
                store.delete_event(event.id)
                store.fetch_stats()
            except DeepTalkError as exc:
                st.error(f"Could not delete task: {exc}")
            else:
                st.rerun()
