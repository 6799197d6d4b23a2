"""Namespaced view state kept in ``st.session_state``.

Every helper takes the backing mapping explicitly so the same code runs
against a plain dict in tests.
"""

PREFIX = "slice"

CALENDAR = "calendar"
DIALOG = "dialog"
BANNER = "banner"


def _key(slice_name):
    return f"{PREFIX}.{slice_name}"


def get_slice(state, slice_name):
    key = _key(slice_name)
    if key not in state:
        state[key] = {}
    return state[key]


def get_value(state, slice_name, name, default=None):
    return get_slice(state, slice_name).get(name, default)


def set_value(state, slice_name, name, value):
    get_slice(state, slice_name)[name] = value


def clear_slice(state, slice_name):
    key = _key(slice_name)
    if key in state:
        del state[key]


# ---- task dialog ----
def open_dialog(state, day, event_id=None):
    slice_obj = get_slice(state, DIALOG)
    slice_obj.update({"open": True, "day": day, "event_id": event_id, "error": None})


def close_dialog(state):
    clear_slice(state, DIALOG)


def dialog_state(state):
    slice_obj = get_slice(state, DIALOG)
    return {
        "open": bool(slice_obj.get("open")),
        "day": slice_obj.get("day"),
        "event_id": slice_obj.get("event_id"),
        "error": slice_obj.get("error"),
    }


def set_dialog_error(state, message):
    # The dialog stays open so the user can correct the form.
    set_value(state, DIALOG, "error", message)


# ---- error banner ----
def show_banner(state, message, retry=None):
    get_slice(state, BANNER).update({"message": message, "retry": retry})


def banner(state):
    slice_obj = get_slice(state, BANNER)
    return slice_obj.get("message"), slice_obj.get("retry")


def dismiss_banner(state):
    clear_slice(state, BANNER)
