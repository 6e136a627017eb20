"""
Optimistic list state for the todo client.

ListState holds the last server-confirmed view of the list together with
the operations still waiting for a server answer. Each pending operation
keeps the snapshot needed to undo it. The functions below are reducers:
they never mutate their input and always return a new ListState.
"""
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional, Tuple


class PendingKind:
    CREATE = 'create'
    UPDATE = 'update'
    DELETE = 'delete'
    TOGGLE = 'toggle'


TEMP_ID_PREFIX = 'temp-'


@dataclass(frozen=True)
class TodoItem:
    id: str
    title: str
    priority: str = 'MEDIUM'
    description: Optional[str] = None
    deadline: Optional[str] = None
    is_done: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    user_id: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "TodoItem":
        return cls(
            id=str(data['id']),
            title=data['title'],
            priority=data.get('priority', 'MEDIUM'),
            description=data.get('description'),
            deadline=data.get('deadline'),
            is_done=bool(data.get('isDone', False)),
            created_at=data.get('createdAt'),
            updated_at=data.get('updatedAt'),
            user_id=data.get('userId'),
        )

    @property
    def is_temporary(self) -> bool:
        return self.id.startswith(TEMP_ID_PREFIX)


@dataclass(frozen=True)
class PendingOperation:
    kind: str
    original: Optional[TodoItem] = None
    patch: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class ListState:
    todos: Tuple[TodoItem, ...] = ()
    total: int = 0
    pending: Dict[str, PendingOperation] = field(default_factory=dict)

    def find(self, todo_id: str) -> Optional[TodoItem]:
        for todo in self.todos:
            if todo.id == todo_id:
                return todo
        return None

    def is_pending(self, todo_id: str) -> bool:
        return todo_id in self.pending


def make_temp_id() -> str:
    return f"{TEMP_ID_PREFIX}{uuid.uuid4().hex}"


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def _with_pending(state: ListState, todo_id: str, operation: PendingOperation) -> Dict[str, PendingOperation]:
    pending = dict(state.pending)
    pending[todo_id] = operation
    return pending


def _without_pending(state: ListState, todo_id: str) -> Dict[str, PendingOperation]:
    pending = dict(state.pending)
    pending.pop(todo_id, None)
    return pending


def _replace_item(todos: Tuple[TodoItem, ...], todo_id: str, item: TodoItem) -> Tuple[TodoItem, ...]:
    return tuple(item if todo.id == todo_id else todo for todo in todos)


def _insert_by_created_at(todos: Tuple[TodoItem, ...], item: TodoItem) -> Tuple[TodoItem, ...]:
    """Put item back before the first todo created after it (end if none)."""
    created = _parse_timestamp(item.created_at)
    items = list(todos)
    if created is not None:
        for index, todo in enumerate(items):
            other = _parse_timestamp(todo.created_at)
            if other is not None and other > created:
                items.insert(index, item)
                return tuple(items)
    items.append(item)
    return tuple(items)


# =============================================================================
# Reducers
# =============================================================================

def replace_all(state: ListState, todos, total: int) -> ListState:
    """Adopt a full server reload. Outstanding operations stay tracked."""
    return replace(state, todos=tuple(todos), total=total)


def begin_create(state: ListState, temp_id: str, draft: TodoItem) -> ListState:
    item = replace(draft, id=temp_id)
    return ListState(
        todos=(item,) + state.todos,
        total=state.total + 1,
        pending=_with_pending(state, temp_id, PendingOperation(PendingKind.CREATE, patch={'title': item.title})),
    )


def confirm_create(state: ListState, temp_id: str, saved: TodoItem) -> ListState:
    """Swap the temporary entry for the server's record."""
    if state.find(temp_id) is not None:
        todos = _replace_item(state.todos, temp_id, saved)
    elif state.find(saved.id) is None:
        todos = (saved,) + state.todos
    else:
        todos = state.todos
    return ListState(todos=todos, total=state.total, pending=_without_pending(state, temp_id))


def _begin_change(state: ListState, todo_id: str, kind: str, patch: Dict[str, Any]) -> ListState:
    original = state.find(todo_id)
    if original is None:
        return state
    # Keep the oldest snapshot if a second change lands before the first resolves
    previous = state.pending.get(todo_id)
    snapshot = previous.original if previous and previous.original else original
    return ListState(
        todos=_replace_item(state.todos, todo_id, replace(original, **patch)),
        total=state.total,
        pending=_with_pending(state, todo_id, PendingOperation(kind, original=snapshot, patch=dict(patch))),
    )


def begin_toggle(state: ListState, todo_id: str, is_done: bool) -> ListState:
    return _begin_change(state, todo_id, PendingKind.TOGGLE, {'is_done': is_done})


def begin_update(state: ListState, todo_id: str, patch: Dict[str, Any]) -> ListState:
    return _begin_change(state, todo_id, PendingKind.UPDATE, patch)


def begin_delete(state: ListState, todo_id: str) -> ListState:
    original = state.find(todo_id)
    if original is None:
        return state
    return ListState(
        todos=tuple(todo for todo in state.todos if todo.id != todo_id),
        total=state.total - 1,
        pending=_with_pending(state, todo_id, PendingOperation(PendingKind.DELETE, original=original)),
    )


def confirm(state: ListState, todo_id: str, saved: Optional[TodoItem] = None) -> ListState:
    """Server accepted the operation on todo_id; adopt its record if given."""
    todos = state.todos
    if saved is not None and state.find(todo_id) is not None:
        todos = _replace_item(todos, todo_id, saved)
    return ListState(todos=todos, total=state.total, pending=_without_pending(state, todo_id))


def rollback(state: ListState, todo_id: str) -> ListState:
    """Undo the pending operation on todo_id using its snapshot."""
    operation = state.pending.get(todo_id)
    if operation is None:
        return state

    pending = _without_pending(state, todo_id)

    if operation.kind == PendingKind.CREATE:
        if state.find(todo_id) is None:
            return ListState(todos=state.todos, total=state.total, pending=pending)
        return ListState(
            todos=tuple(todo for todo in state.todos if todo.id != todo_id),
            total=state.total - 1,
            pending=pending,
        )

    if operation.kind == PendingKind.DELETE:
        if state.find(todo_id) is not None:
            return ListState(todos=state.todos, total=state.total, pending=pending)
        return ListState(
            todos=_insert_by_created_at(state.todos, operation.original),
            total=state.total + 1,
            pending=pending,
        )

    # TOGGLE / UPDATE
    return ListState(
        todos=_replace_item(state.todos, todo_id, operation.original),
        total=state.total,
        pending=pending,
    )
