"""
Typed wrapper over the todo tracker HTTP API.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from .state import TodoItem
from .transport import ApiResponse, Transport


class ClientError(Exception):
    """Raised for non-2xx responses and transport failures (status 0)."""

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


class TodoAPIClient:
    def __init__(self, transport: Transport):
        self.transport = transport

    def _call(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        body: Optional[Any] = None,
    ) -> Any:
        try:
            response: ApiResponse = self.transport.request(method, path, params=params, body=body)
        except OSError as e:
            raise ClientError(0, f"Network error: {e}") from e

        if not response.ok:
            message = 'Request failed'
            if isinstance(response.data, dict):
                message = response.data.get('error') or response.data.get('detail') or message
            raise ClientError(response.status, str(message))
        return response.data

    # -- auth ---------------------------------------------------------------

    def register(self, email: str, password: str, name: str) -> dict:
        return self._call('POST', '/api/auth/register', body={'email': email, 'password': password, 'name': name})

    def login(self, email: str, password: str) -> dict:
        return self._call('POST', '/api/auth/login', body={'email': email, 'password': password})

    def logout(self) -> dict:
        return self._call('POST', '/api/auth/logout')

    def me(self) -> dict:
        return self._call('GET', '/api/auth/me')

    # -- todos --------------------------------------------------------------

    def list_todos(self, page: int = 1, limit: int = 10, **filters) -> dict:
        params = {'page': page, 'limit': limit}
        params.update(filters)
        return self._call('GET', '/api/todos', params=params)

    def get_todo(self, todo_id: str) -> TodoItem:
        return TodoItem.from_json(self._call('GET', f'/api/todos/{todo_id}'))

    def create_todo(
        self,
        title: str,
        description: Optional[str] = None,
        priority: Optional[str] = None,
        deadline: Optional[str] = None,
    ) -> TodoItem:
        body: Dict[str, Any] = {'title': title}
        if description is not None:
            body['description'] = description
        if priority is not None:
            body['priority'] = priority
        if deadline is not None:
            body['deadline'] = deadline
        return TodoItem.from_json(self._call('POST', '/api/todos', body=body))

    def update_todo(self, todo_id: str, patch: Dict[str, Any]) -> TodoItem:
        """patch uses the wire names (title, description, priority, deadline, isDone)."""
        return TodoItem.from_json(self._call('PUT', f'/api/todos/{todo_id}', body=patch))

    def delete_todo(self, todo_id: str) -> dict:
        return self._call('DELETE', f'/api/todos/{todo_id}')

    def bulk(self, action: str, todo_ids: List[str]) -> dict:
        return self._call('POST', '/api/todos/bulk', body={'action': action, 'todoIds': list(todo_ids)})

    def stats(self, period: str = 'all') -> dict:
        return self._call('GET', '/api/todos/stats', params={'period': period})
