"""Tracker lookup collaborator interface.

The enricher reads related entities through this interface only. Every
method returns the value, or None when the entity is absent or the lookup
failed; implementations catch their own transport errors.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from infrastructure.notifications.models import (
    ProjectSummary,
    TaskSummary,
    UserSummary,
)


class TrackerLookup(ABC):
    """Read access to the project tracker, keyed by integer id.

    Methods are blocking; the enricher runs them in worker threads.
    """

    @abstractmethod
    def get_project(self, project_id: int) -> Optional[ProjectSummary]:
        pass

    @abstractmethod
    def get_task(self, task_id: int) -> Optional[TaskSummary]:
        pass

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[UserSummary]:
        pass

    @abstractmethod
    def get_task_assignees(self, task_id: int) -> Optional[List[str]]:
        """Return assignee display names (name, else username)."""
        pass

    @abstractmethod
    def get_task_labels(self, task_id: int) -> Optional[List[str]]:
        """Return label titles."""
        pass
