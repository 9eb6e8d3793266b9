"""Test factories for the notification pipeline.

Factory functions for raw webhook payloads and tracker API documents, and
an in-memory TrackerLookup.
"""

from typing import Any, Dict, List, Optional

from infrastructure.notifications.lookup import TrackerLookup


def make_webhook_payload(
    event_name: str = "task.created",
    time: str = "2024-03-01T09:30:00Z",
    data: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Create a raw tracker webhook payload.

    Example:
        >>> make_webhook_payload("task.created", data={"task": {"id": 42}})
        {'event_name': 'task.created', 'time': '2024-03-01T09:30:00Z', 'data': {'task': {'id': 42}}}
    """
    payload: Dict[str, Any] = {"event_name": event_name, "time": time}
    if data is not None:
        payload["data"] = data
    return payload


def make_tracker_task(task_id: int = 42, project_id: int = 7, **overrides) -> Dict[str, Any]:
    """Create a tracker API task document."""
    task = {
        "id": task_id,
        "title": "Write spec",
        "description": "First draft",
        "done": False,
        "due_date": "0001-01-01T00:00:00Z",
        "priority": 2,
        "project_id": project_id,
    }
    task.update(overrides)
    return task


def make_tracker_project(project_id: int = 7, **overrides) -> Dict[str, Any]:
    """Create a tracker API project document."""
    project = {"id": project_id, "title": "Docs", "description": "Documentation"}
    project.update(overrides)
    return project


def make_tracker_users(n: int = 2) -> List[Dict[str, Any]]:
    """Create tracker API user documents."""
    return [
        {
            "id": i + 1,
            "name": f"User {i + 1}",
            "username": f"user{i + 1}",
            "email": f"user{i + 1}@example.com",
        }
        for i in range(n)
    ]


class StubTrackerLookup(TrackerLookup):
    """In-memory TrackerLookup.

    Values are returned as configured; an Exception instance is raised
    instead of returned. Calls are recorded as (lookup name, id).
    """

    def __init__(
        self,
        project: Any = None,
        task: Any = None,
        user: Any = None,
        assignees: Any = None,
        labels: Any = None,
    ):
        self.values = {
            "project": project,
            "task": task,
            "user": user,
            "assignees": assignees,
            "labels": labels,
        }
        self.calls: List[tuple] = []

    def _lookup(self, name: str, entity_id: int):
        self.calls.append((name, entity_id))
        value = self.values[name]
        if isinstance(value, Exception):
            raise value
        return value

    def get_project(self, project_id):
        return self._lookup("project", project_id)

    def get_task(self, task_id):
        return self._lookup("task", task_id)

    def get_user(self, user_id):
        return self._lookup("user", user_id)

    def get_task_assignees(self, task_id):
        return self._lookup("assignees", task_id)

    def get_task_labels(self, task_id):
        return self._lookup("labels", task_id)
