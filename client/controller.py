"""
Client-side list controller.

Create, toggle and delete are optimistic: the local list changes first,
then the server call either confirms the change or rolls it back. Update
waits for the server and reloads. Requests are never cancelled.
"""
from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from . import state as reducers
from .api import ClientError, TodoAPIClient
from .state import ListState, TodoItem

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 30
DRIFT_THRESHOLD = 2

# Local attribute -> API field
WIRE_FIELDS = {
    'title': 'title',
    'description': 'description',
    'priority': 'priority',
    'deadline': 'deadline',
    'is_done': 'isDone',
}


class TodoListController:
    def __init__(self, api: TodoAPIClient, page_size: int = 10, user_id: Optional[str] = None):
        self.api = api
        self.page = 1
        self.page_size = page_size
        self.total_pages = 0
        self.filters: Dict[str, Any] = {}
        self.user_id = user_id
        self.state = ListState()
        self.error: Optional[str] = None
        self._lock = threading.Lock()

    # -- loading ------------------------------------------------------------

    def load(self) -> ListState:
        """Full reload of the current page from the server."""
        try:
            result = self.api.list_todos(page=self.page, limit=self.page_size, **self.filters)
        except ClientError as e:
            self.error = e.message
            return self.state

        todos = [TodoItem.from_json(item) for item in result['data']]
        with self._lock:
            self.state = reducers.replace_all(self.state, todos, result['pagination']['total'])
            self.total_pages = result['pagination']['totalPages']
            self.error = None
        return self.state

    def set_filters(self, **filters) -> ListState:
        self.filters.update(filters)
        self.filters = {k: v for k, v in self.filters.items() if v is not None}
        self.page = 1
        return self.load()

    def go_to_page(self, page: int) -> ListState:
        self.page = max(1, page)
        return self.load()

    # -- optimistic operations ------------------------------------------------

    def create_todo(
        self,
        title: str,
        description: Optional[str] = None,
        priority: str = 'MEDIUM',
        deadline: Optional[str] = None,
    ) -> Optional[TodoItem]:
        temp_id = reducers.make_temp_id()
        now = datetime.now(timezone.utc).isoformat()
        draft = TodoItem(
            id=temp_id,
            title=title.strip(),
            description=description,
            priority=priority,
            deadline=deadline,
            created_at=now,
            updated_at=now,
            user_id=self.user_id,
        )
        with self._lock:
            self.state = reducers.begin_create(self.state, temp_id, draft)

        try:
            saved = self.api.create_todo(title, description=description, priority=priority, deadline=deadline)
        except ClientError as e:
            self._fail(temp_id, e)
            return None

        with self._lock:
            self.state = reducers.confirm_create(self.state, temp_id, saved)
        self.load()
        return saved

    def toggle_todo(self, todo_id: str, is_done: bool) -> bool:
        with self._lock:
            if self.state.find(todo_id) is None:
                return False
            self.state = reducers.begin_toggle(self.state, todo_id, is_done)

        try:
            saved = self.api.update_todo(todo_id, {'isDone': is_done})
        except ClientError as e:
            self._fail(todo_id, e)
            return False

        with self._lock:
            self.state = reducers.confirm(self.state, todo_id, saved)
        self.load()
        return True

    def delete_todo(self, todo_id: str) -> bool:
        with self._lock:
            if self.state.find(todo_id) is None:
                return False
            self.state = reducers.begin_delete(self.state, todo_id)

        try:
            self.api.delete_todo(todo_id)
        except ClientError as e:
            self._fail(todo_id, e)
            return False

        with self._lock:
            self.state = reducers.confirm(self.state, todo_id)
        self.load()
        return True

    def update_todo(self, todo_id: str, **changes) -> Optional[TodoItem]:
        """Non-optimistic: send, then reload on success."""
        patch = {WIRE_FIELDS[key]: value for key, value in changes.items() if key in WIRE_FIELDS}
        try:
            saved = self.api.update_todo(todo_id, patch)
        except ClientError as e:
            self.error = e.message
            return None
        self.load()
        return saved

    def _fail(self, todo_id: str, error: ClientError) -> None:
        logger.warning(f"Rolling back {todo_id}: {error.message}")
        with self._lock:
            self.state = reducers.rollback(self.state, todo_id)
            self.error = error.message

    # -- drift correction -----------------------------------------------------

    def observed_total(self) -> int:
        """Server-side total for the current view."""
        if not self.filters:
            return self.api.stats('all')['total']
        result = self.api.list_todos(page=1, limit=1, **self.filters)
        return result['pagination']['total']

    def check_drift(self) -> bool:
        """
        Reload when the server total differs from the local one by more
        than DRIFT_THRESHOLD. Returns True if a reload happened.
        """
        try:
            observed = self.observed_total()
        except ClientError as e:
            self.error = e.message
            return False

        if abs(observed - self.state.total) > DRIFT_THRESHOLD:
            logger.info(f"Total drifted (local {self.state.total}, server {observed}); reloading")
            self.load()
            return True
        return False


class DriftPoller:
    """Calls controller.check_drift() every interval seconds until stopped."""

    def __init__(self, controller: TodoListController, interval: float = POLL_INTERVAL_SECONDS):
        self.controller = controller
        self.interval = interval
        self._timer: Optional[threading.Timer] = None
        self._stopped = threading.Event()

    def _tick(self) -> None:
        if self._stopped.is_set():
            return
        try:
            self.controller.check_drift()
        finally:
            self._schedule()

    def _schedule(self) -> None:
        if self._stopped.is_set():
            return
        self._timer = threading.Timer(self.interval, self._tick)
        self._timer.daemon = True
        self._timer.start()

    def start(self) -> None:
        self._stopped.clear()
        self._schedule()

    def stop(self) -> None:
        self._stopped.set()
        if self._timer is not None:
            self._timer.cancel()
