from datetime import date, datetime

import streamlit as st

from deeptalk.constants import DISPLAY_PRIORITIES, DISPLAY_STATUSES, PRIORITY_LABELS, STATUS_LABELS
from deeptalk.data.api_client import DeepTalkError
from deeptalk.forms import build_event_from_form
from deeptalk.state import session_slices


def _defaults(event, day):
    if event is None:
        return {
            "title": "",
            "description": "",
            "date": day or date.today(),
            "start_time": "",
            "deadline": None,
            "duration": 60,
            "priority": "medium",
            "status": "not_started",
            "category": "",
            "tags": "",
            "location": "",
        }
    return {
        "title": event.title,
        "description": event.description or "",
        "date": event.date.date(),
        "start_time": event.time or "",
        "deadline": event.deadline.date() if event.deadline else None,
        "duration": event.duration or 60,
        "priority": event.priority,
        "status": event.status,
        "category": event.category or "",
        "tags": ", ".join(event.tags or []),
        "location": event.location or "",
    }


def render_task_form(ctx):
    state = st.session_state
    dialog = session_slices.dialog_state(state)
    if not dialog["open"]:
        return

    store = ctx.store
    event = store.find(dialog["event_id"]) if dialog["event_id"] else None
    if dialog["event_id"] and event is None:
        st.warning("That task is no longer loaded. Refresh and try again.")
        session_slices.close_dialog(state)
        return
    values = _defaults(event, dialog["day"])
    category_names = [""] + [category.name for category in store.categories]
    if values["category"] and values["category"] not in category_names:
        category_names.append(values["category"])

    heading = "Edit Task" if event else "Create New Task"
    st.markdown(f"#### {heading}")
    if dialog["error"]:
        st.error(dialog["error"])

    with st.form("task_form", clear_on_submit=False):
        title = st.text_input("Task Name *", value=values["title"], placeholder="Enter task name...")
        description = st.text_area("Description", value=values["description"], height=80)
        cols = st.columns(3)
        with cols[0]:
            event_day = st.date_input("Date", value=values["date"])
        with cols[1]:
            start_time = st.text_input("Specific time (HH:MM)", value=values["start_time"])
        with cols[2]:
            deadline = st.date_input("Deadline", value=values["deadline"])
        cols = st.columns(3)
        with cols[0]:
            priority = st.selectbox(
                "Priority",
                DISPLAY_PRIORITIES,
                index=DISPLAY_PRIORITIES.index(values["priority"]),
                format_func=lambda key: PRIORITY_LABELS[key],
            )
        with cols[1]:
            status = st.selectbox(
                "Status",
                DISPLAY_STATUSES,
                index=DISPLAY_STATUSES.index(values["status"]),
                format_func=lambda key: STATUS_LABELS[key],
            )
        with cols[2]:
            duration = st.number_input("Duration (minutes)", min_value=0, step=15, value=int(values["duration"]))
        cols = st.columns(3)
        with cols[0]:
            category = st.selectbox("Category", category_names, index=category_names.index(values["category"]))
        with cols[1]:
            tags = st.text_input("Tags (comma separated)", value=values["tags"])
        with cols[2]:
            location = st.text_input("Location", value=values["location"])

        action_cols = st.columns([1, 1, 4])
        submitted = action_cols[0].form_submit_button("Save", type="primary")
        cancelled = action_cols[1].form_submit_button("Cancel")

    if cancelled:
        session_slices.close_dialog(state)
        st.rerun()
    if not submitted:
        return

    form_values = {
        "title": title,
        "description": description,
        "date": event_day,
        "start_time": start_time,
        "deadline": deadline,
        "duration": int(duration) or None,
        "priority": priority,
        "status": status,
        "category": category,
        "tags": tags,
        "location": location,
    }
    try:
        draft = build_event_from_form(form_values, event_id=event.id if event else "")
        if event:
            store.update_event(event.id, draft)
        else:
            store.add_event(draft)
    except (ValueError, DeepTalkError) as exc:
        session_slices.set_dialog_error(state, str(exc) or "Failed to save task")
        st.rerun()
        return
    session_slices.close_dialog(state)
    store.fetch_stats()
    st.toast(f"Saved '{draft.title}' at {datetime.now().strftime('%H:%M')}")
    st.rerun()
