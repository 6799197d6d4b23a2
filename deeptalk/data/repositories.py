import logging

from pydantic import ValidationError

from deeptalk.data.api_client import MalformedResponseError
from deeptalk.schemas import BackendTask, Category, TaskStats

logger = logging.getLogger(__name__)

TASKS_PATH = "/api/tasks/"
SEARCH_PATH = "/api/search-tasks/"
STATS_PATH = "/api/task-stats/"
BULK_UPDATE_PATH = "/api/tasks/bulk/update/"
BULK_DELETE_PATH = "/api/tasks/bulk/delete/"
CATEGORIES_PATH = "/api/categories/"


def _task_path(task_id):
    return f"{TASKS_PATH}{task_id}/"


def _category_path(category_id):
    return f"{CATEGORIES_PATH}{category_id}/"


def _items(payload, key):
    if payload is None:
        return []
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        raise MalformedResponseError(f"Expected an object with '{key}'")
    items = payload.get(key) or []
    if not isinstance(items, list):
        raise MalformedResponseError(f"Expected '{key}' to be a list")
    return items


def _single(payload, key):
    # Some endpoints wrap the record ({"task": {...}}), others return it bare.
    if isinstance(payload, dict) and isinstance(payload.get(key), dict):
        return payload[key]
    if isinstance(payload, dict):
        return payload
    raise MalformedResponseError(f"Expected a {key} object")


def parse_task(raw) -> BackendTask:
    try:
        return BackendTask.model_validate(raw)
    except ValidationError as exc:
        raise MalformedResponseError(f"Invalid task record: {exc.error_count()} error(s)") from exc


def parse_tasks(raw_items):
    return [parse_task(item) for item in raw_items]


def parse_category(raw) -> Category:
    try:
        return Category.model_validate(raw)
    except ValidationError as exc:
        raise MalformedResponseError("Invalid category record") from exc


def _as_dict(payload):
    if hasattr(payload, "to_request"):
        return payload.to_request()
    return dict(payload or {})


class TaskRepository:
    def __init__(self, client):
        self.client = client

    def list_tasks(self, status=None):
        params = {"status": status} if status and status != "all" else None
        payload = self.client.get(TASKS_PATH, params=params)
        return parse_tasks(_items(payload, "tasks"))

    def search_tasks(self, query, status=None, priority=None):
        params = {"q": query}
        if status:
            params["status"] = status
        if priority:
            params["priority"] = str(priority)
        payload = self.client.get(SEARCH_PATH, params=params)
        return parse_tasks(_items(payload, "tasks"))

    def create_task(self, payload):
        body = _as_dict(payload)
        logger.info("Creating task: %s", body.get("name"))
        response = self.client.post(TASKS_PATH, json=body)
        return parse_task(_single(response, "task"))

    def update_task(self, task_id, payload):
        body = _as_dict(payload)
        logger.info("Updating task %s", task_id)
        response = self.client.put(_task_path(task_id), json=body)
        return parse_task(_single(response, "task"))

    def delete_task(self, task_id):
        logger.info("Deleting task %s", task_id)
        self.client.delete(_task_path(task_id))
        return True

    def toggle_status(self, task_id):
        logger.info("Toggling task status %s", task_id)
        response = self.client.post(f"{_task_path(task_id)}toggle-status/")
        return parse_task(_single(response, "task"))

    def stats(self):
        payload = self.client.get(STATS_PATH)
        if not isinstance(payload, dict):
            raise MalformedResponseError("Expected a stats object")
        try:
            return TaskStats.model_validate(payload)
        except ValidationError as exc:
            raise MalformedResponseError("Invalid task statistics") from exc

    def bulk_update(self, task_ids, updates):
        response = self.client.post(
            BULK_UPDATE_PATH,
            json={"task_ids": list(task_ids), "updates": dict(updates or {})},
        )
        return parse_tasks(_items(response, "updated_tasks"))

    def bulk_delete(self, task_ids):
        self.client.post(BULK_DELETE_PATH, json={"task_ids": list(task_ids)})
        return True


class CategoryRepository:
    def __init__(self, client):
        self.client = client

    def list_categories(self):
        payload = self.client.get(CATEGORIES_PATH)
        return [parse_category(item) for item in _items(payload, "categories")]

    def create_category(self, data):
        response = self.client.post(CATEGORIES_PATH, json=dict(data))
        return parse_category(_single(response, "category"))

    def update_category(self, category_id, data):
        response = self.client.put(_category_path(category_id), json=dict(data))
        return parse_category(_single(response, "category"))

    def delete_category(self, category_id):
        self.client.delete(_category_path(category_id))
        return True
