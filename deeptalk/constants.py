TOKEN_KEY = "deeptalk_token"
TOKEN_TIMESTAMP_KEY = "deeptalk_token_timestamp"
LEGACY_TOKEN_KEY = "gmail_token"
LEGACY_TOKEN_TIMESTAMP_KEY = "gmail_token_timestamp"
ALL_TOKEN_KEYS = (
    TOKEN_KEY,
    TOKEN_TIMESTAMP_KEY,
    LEGACY_TOKEN_KEY,
    LEGACY_TOKEN_TIMESTAMP_KEY,
)

TOKEN_TTL_MS = 7 * 24 * 60 * 60 * 1000

DISPLAY_STATUSES = ["not_started", "in_progress", "completed", "cancelled", "on_hold"]
DISPLAY_PRIORITIES = ["low", "medium", "high", "urgent"]

DEFAULT_BACKEND_PRIORITY = 3
DEFAULT_EVENT_COLOR = "#3b82f6"

# Keyed by backend priority (1 = most urgent).
BACKEND_PRIORITY_META = {
    1: {"label": "Critical", "color": "#ef4444"},
    2: {"label": "High", "color": "#f97316"},
    3: {"label": "Medium", "color": "#eab308"},
    4: {"label": "Low", "color": "#3b82f6"},
    5: {"label": "Lowest", "color": "#6b7280"},
}

PRIORITY_COLORS = {
    "low": "#10b981",
    "medium": "#f59e0b",
    "high": "#ef4444",
    "urgent": "#dc2626",
}
PRIORITY_LABELS = {
    "low": "Low Priority",
    "medium": "Medium Priority",
    "high": "High Priority",
    "urgent": "Urgent",
}

STATUS_COLORS = {
    "not_started": "#6b7280",
    "in_progress": "#3b82f6",
    "completed": "#10b981",
    "cancelled": "#ef4444",
    "on_hold": "#f59e0b",
}
STATUS_LABELS = {
    "not_started": "Not Started",
    "in_progress": "In Progress",
    "completed": "Completed",
    "on_hold": "On Hold",
    "cancelled": "Cancelled",
}

WEEKDAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
MAX_EVENTS_PER_CELL = 3

AVATAR_URL_TEMPLATE = "https://ui-avatars.com/api/?name={name}&background=6366f1&color=fff&size=100"

