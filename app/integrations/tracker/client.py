"""Project tracker REST API client.

Implements the TrackerLookup interface used by the context enricher
against a Vikunja-compatible API:

    GET {base}/api/v1/projects/{id}
    GET {base}/api/v1/tasks/{id}
    GET {base}/api/v1/users/{id}
    GET {base}/api/v1/tasks/{id}/assignees
    GET {base}/api/v1/tasks/{id}/labels

Every lookup returns None when the entity is absent or the call fails; the
failure is logged and never raised.
"""

import threading
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import requests
import structlog

from infrastructure.notifications.lookup import TrackerLookup
from infrastructure.notifications.models import (
    ProjectSummary,
    TaskSummary,
    UserSummary,
)
from infrastructure.operations import (
    OperationResult,
    classify_http_status,
    classify_requests_error,
)

if TYPE_CHECKING:
    from infrastructure.configuration import TrackerSettings

logger = structlog.get_logger(__name__)

API_PREFIX = "/api/v1"
DEFAULT_TIMEOUT = 10.0

# Zero time the tracker reports for unset dates
_UNSET_DATE_PREFIX = "0001-01-01"


class TrackerApiClient(TrackerLookup):
    """HTTP client for tracker lookups.

    Lookups run concurrently in worker threads and requests.Session is not
    documented as thread-safe, so each thread gets its own session. An
    injected session is used as-is by every thread.

    Attributes:
        base_url: Tracker base URL, also used to build entity links
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._headers = {"Accept": "application/json"}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"
        self._shared_session = session
        if session is not None:
            session.headers.update(self._headers)
        self._local = threading.local()
        self._logger = logger.bind(component="tracker_api_client")

    @classmethod
    def from_settings(cls, settings: "TrackerSettings") -> Optional["TrackerApiClient"]:
        """Build a client from settings; None when the tracker is not configured."""
        if not settings.is_configured:
            logger.info("tracker_lookup_disabled")
            return None
        return cls(
            base_url=settings.TRACKER_API_URL,
            token=settings.TRACKER_API_TOKEN,
            timeout=settings.TRACKER_TIMEOUT_SECONDS,
        )

    @property
    def session(self) -> requests.Session:
        """Session for the calling thread, or the injected session."""
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers.update(self._headers)
            self._local.session = session
        return session

    def project_url(self, project_id: int) -> str:
        return f"{self.base_url}/projects/{project_id}"

    def task_url(self, task_id: int) -> str:
        return f"{self.base_url}/tasks/{task_id}"

    def get_project(self, project_id: int) -> Optional[ProjectSummary]:
        data = self._get_object(f"/projects/{project_id}")
        if data is None:
            return None
        return ProjectSummary(
            id=data.get("id") or project_id,
            title=data.get("title") or "",
            description=data.get("description") or "",
            url=self.project_url(project_id),
        )

    def get_task(self, task_id: int) -> Optional[TaskSummary]:
        data = self._get_object(f"/tasks/{task_id}")
        if data is None:
            return None
        return TaskSummary(
            id=data.get("id") or task_id,
            title=data.get("title") or "",
            description=data.get("description") or "",
            done=bool(data.get("done")),
            due_date=_date_or_empty(data.get("due_date")),
            priority=data.get("priority") or 0,
            project_id=data.get("project_id"),
            url=self.task_url(task_id),
        )

    def get_user(self, user_id: int) -> Optional[UserSummary]:
        data = self._get_object(f"/users/{user_id}")
        if data is None:
            return None
        return _user_from(data, user_id)

    def get_task_assignees(self, task_id: int) -> Optional[List[str]]:
        items = self._get_list(f"/tasks/{task_id}/assignees")
        if items is None:
            return None
        names = []
        for item in items:
            user = _user_from(item, item.get("id") or 0)
            if user.display_name:
                names.append(user.display_name)
        return names

    def get_task_labels(self, task_id: int) -> Optional[List[str]]:
        items = self._get_list(f"/tasks/{task_id}/labels")
        if items is None:
            return None
        return [item["title"] for item in items if item.get("title")]

    def _get_object(self, path: str) -> Optional[Dict[str, Any]]:
        result = self._get(path)
        if not result.is_success:
            return None
        if not isinstance(result.data, dict):
            self._logger.warning("tracker_unexpected_response", path=path)
            return None
        return result.data

    def _get_list(self, path: str) -> Optional[List[Dict[str, Any]]]:
        result = self._get(path)
        if not result.is_success:
            return None
        if result.data is None:
            return []
        if not isinstance(result.data, list):
            self._logger.warning("tracker_unexpected_response", path=path)
            return None
        return [item for item in result.data if isinstance(item, dict)]

    def _get(self, path: str) -> OperationResult:
        url = f"{self.base_url}{API_PREFIX}{path}"
        log = self._logger.bind(method="GET", path=path)

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            result = classify_requests_error(e, service="Tracker API")
            log.warning(
                "tracker_request_failed",
                error=result.message,
                error_code=result.error_code,
            )
            return result

        data = None
        if 200 <= response.status_code < 300 and response.content:
            try:
                data = response.json()
            except ValueError:
                log.warning("non_json_response", content=response.text[:200])
                return OperationResult.permanent_error(
                    "Tracker API returned a non-JSON body", error_code="INVALID_BODY"
                )

        result = classify_http_status(
            response.status_code,
            response.text if not 200 <= response.status_code < 300 else "",
            retry_after=response.headers.get("Retry-After"),
            data=data,
            service="Tracker API",
        )
        if not result.is_success:
            log.warning(
                "tracker_request_failed",
                status_code=response.status_code,
                error=result.message,
                error_code=result.error_code,
            )
        return result


def _date_or_empty(value: Any) -> str:
    if not value or not isinstance(value, str) or value.startswith(_UNSET_DATE_PREFIX):
        return ""
    return value


def _user_from(data: Dict[str, Any], user_id: int) -> UserSummary:
    return UserSummary(
        id=data.get("id") or user_id,
        name=data.get("name") or "",
        username=data.get("username") or "",
        email=data.get("email") or "",
    )
