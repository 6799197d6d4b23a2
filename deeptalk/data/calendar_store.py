import logging

from deeptalk.data.api_client import AuthenticationError, DeepTalkError
from deeptalk.data.mapping import event_to_payload, task_to_event
from deeptalk.data.repositories import CategoryRepository, TaskRepository
from deeptalk.schemas import TaskStats

logger = logging.getLogger(__name__)


class CalendarStore:
    """In-memory view of the user's tasks as calendar events.

    Reads swallow backend failures into ``error`` and return empty data so
    the view can render a banner. Writes record ``error`` and re-raise so
    the initiating form can keep its dialog open. Concurrent writes are not
    coordinated: whichever response arrives last is applied.
    """

    def __init__(self, tasks: TaskRepository, categories: CategoryRepository, now_fn=None):
        self.tasks = tasks
        self.category_repo = categories
        self.now_fn = now_fn
        self.events = []
        self.categories = []
        self.stats = TaskStats()
        self.loading = False
        self.error = None
        self.auth_failed = False

    @classmethod
    def from_client(cls, client, now_fn=None):
        return cls(TaskRepository(client), CategoryRepository(client), now_fn=now_fn)

    def _now(self):
        return self.now_fn() if self.now_fn else None

    def _to_events(self, tasks):
        now = self._now()
        return [task_to_event(task, now=now) for task in tasks]

    def _category_ids(self):
        return {category.name: category.id for category in self.categories}

    def clear_error(self):
        self.error = None

    def _fail(self, exc, fallback):
        if isinstance(exc, AuthenticationError):
            self.auth_failed = True
        self.error = str(exc) or fallback

    # ---- reads ----
    def fetch_events(self, status=None):
        self.loading = True
        self.error = None
        try:
            self.events = self._to_events(self.tasks.list_tasks(status))
            logger.info("Loaded %d tasks as calendar events", len(self.events))
        except DeepTalkError as exc:
            logger.error("Failed to fetch tasks: %s", exc)
            self._fail(exc, "Failed to fetch tasks")
            self.events = []
        finally:
            self.loading = False
        return self.events

    def search_events(self, query, status=None, priority=None):
        try:
            return self._to_events(self.tasks.search_tasks(query, status=status, priority=priority))
        except DeepTalkError as exc:
            logger.error("Failed to search tasks: %s", exc)
            self._fail(exc, "Failed to search tasks")
            return []

    def fetch_stats(self):
        try:
            self.stats = self.tasks.stats()
        except DeepTalkError as exc:
            logger.error("Failed to fetch task stats: %s", exc)
            self._fail(exc, "Failed to fetch task stats")
            self.stats = TaskStats()
        return self.stats

    def fetch_categories(self):
        try:
            self.categories = self.category_repo.list_categories()
        except DeepTalkError as exc:
            logger.error("Failed to fetch categories: %s", exc)
            self._fail(exc, "Failed to fetch categories")
            self.categories = []
        return self.categories

    def refresh(self, status=None):
        self.fetch_events(status)
        self.fetch_stats()
        self.fetch_categories()

    # ---- writes ----
    def _write(self, action, label):
        self.loading = True
        self.error = None
        try:
            return action()
        except DeepTalkError as exc:
            logger.error("Failed to %s: %s", label, exc)
            self._fail(exc, f"Failed to {label}")
            raise
        finally:
            self.loading = False

    def _replace(self, event_id, updated):
        self.events = [updated if event.id == event_id else event for event in self.events]

    def add_event(self, event):
        def action():
            payload = event_to_payload(event, category_ids=self._category_ids())
            created = task_to_event(self.tasks.create_task(payload), now=self._now())
            self.events = self.events + [created]
            return created

        return self._write(action, "add task")

    def update_event(self, event_id, event):
        def action():
            payload = event_to_payload(event, category_ids=self._category_ids())
            updated = task_to_event(self.tasks.update_task(event_id, payload), now=self._now())
            self._replace(event_id, updated)
            return updated

        return self._write(action, "update task")

    def delete_event(self, event_id):
        def action():
            self.tasks.delete_task(event_id)
            self.events = [event for event in self.events if event.id != event_id]
            return True

        return self._write(action, "delete task")

    def mark_task_completed(self, event_id):
        def action():
            updated = task_to_event(self.tasks.toggle_status(event_id), now=self._now())
            self._replace(event_id, updated)
            return updated

        return self._write(action, "toggle task status")

    def find(self, event_id):
        for event in self.events:
            if event.id == event_id:
                return event
        return None
