"""
Todos API endpoints.

Every operation requires a session and works only on the session owner's
todos. Routes with fixed segments (stats, bulk) are declared before
/{todo_id} so they are not swallowed by it.
"""
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.http import HttpRequest
from ninja import Router

from apps.core.errors import AuthenticationError, ValidationError
from apps.identity.api import require_session
from . import services
from .dtos import (
    BulkActionIn, BulkResultOut, MessageOut, PageRequest, PaginationOut,
    PriorityBreakdownOut, RecentTodoOut, TodoFilters, TodoIn, TodoListOut,
    TodoOut, TodoPatchIn, TodoStatsOut,
)
from .models import Priority
from .stats_service import get_todo_stats

router = Router(tags=["Todos"])

# Largest OFFSET the database backends accept (signed 64-bit)
MAX_OFFSET = 2 ** 63 - 1


def _owner_id(request: HttpRequest) -> UUID:
    session = require_session(request)
    try:
        return UUID(session.user_id)
    except ValueError:
        raise AuthenticationError("Unauthorized")


def _page_request(page: Optional[int], limit: Optional[int]) -> PageRequest:
    page = 1 if page is None else page
    limit = settings.TODO_DEFAULT_PAGE_SIZE if limit is None else limit
    if page < 1:
        raise ValidationError("page must be at least 1")
    if limit < 1:
        raise ValidationError("limit must be at least 1")
    limit = min(limit, settings.TODO_MAX_PAGE_SIZE)
    if (page - 1) * limit > MAX_OFFSET:
        raise ValidationError("page is too large")
    return PageRequest(page=page, limit=limit)


# =============================================================================
# Collection Endpoints
# =============================================================================

@router.get("", response=TodoListOut, auth=None)
def list_todos(
    request: HttpRequest,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    sortBy: Optional[str] = None,
    sortOrder: Optional[str] = None,
    priority: Optional[str] = None,
    isDone: Optional[str] = None,
    search: Optional[str] = None,
    deadlineFrom: Optional[str] = None,
    deadlineTo: Optional[str] = None,
):
    """
    List the caller's todos.

    Query Parameters:
    - page, limit: pagination (defaults 1 and 10)
    - sortBy: createdAt, title, priority, deadline, isDone, updatedAt
    - sortOrder: asc or desc (default desc)
    - priority: LOW, MEDIUM or HIGH
    - isDone: "true" or "false"
    - search: case-insensitive match on title or description
    - deadlineFrom / deadlineTo: inclusive deadline bounds
    """
    owner_id = _owner_id(request)

    if priority and priority not in Priority.values:
        raise ValidationError("Invalid priority. Must be LOW, MEDIUM, or HIGH")

    filters = TodoFilters(
        priority=priority or None,
        is_done=services.parse_bool_flag(isDone),
        search=search or None,
        deadline_from=services.parse_deadline(deadlineFrom) if deadlineFrom else None,
        deadline_to=services.parse_deadline(deadlineTo) if deadlineTo else None,
    )
    result = services.list_todos(
        owner_id,
        filters=filters,
        sort=services.resolve_sort(sortBy, sortOrder),
        page=_page_request(page, limit),
    )

    pagination = result.pagination
    return TodoListOut(
        data=[TodoOut.from_model(todo) for todo in result.items],
        pagination=PaginationOut(
            page=pagination.page,
            limit=pagination.limit,
            total=pagination.total,
            totalPages=pagination.total_pages,
            hasNextPage=pagination.has_next_page,
            hasPrevPage=pagination.has_prev_page,
        ),
    )


@router.post("", response={201: TodoOut}, auth=None)
def create_todo(request: HttpRequest, payload: TodoIn):
    """Create a todo owned by the caller."""
    owner_id = _owner_id(request)
    todo = services.create_todo(
        owner_id,
        title=payload.title,
        description=payload.description,
        priority=payload.priority,
        deadline=payload.deadline,
    )
    return 201, TodoOut.from_model(todo)


@router.get("/stats", response=TodoStatsOut, auth=None)
def todo_stats(request: HttpRequest, period: Optional[str] = None):
    """
    Summary figures for the caller's todos.
    period: all (default), week or month, by creation date.
    """
    owner_id = _owner_id(request)
    stats = get_todo_stats(owner_id, period)

    return TodoStatsOut(
        period=stats.period,
        total=stats.total,
        completed=stats.completed,
        pending=stats.pending,
        overdue=stats.overdue,
        completionRate=stats.completion_rate,
        priorityBreakdown=PriorityBreakdownOut(
            low=stats.priority_breakdown.low,
            medium=stats.priority_breakdown.medium,
            high=stats.priority_breakdown.high,
        ),
        recentTodos=[
            RecentTodoOut(
                id=row['id'],
                title=row['title'],
                priority=row['priority'],
                isDone=row['is_done'],
                createdAt=row['created_at'],
            )
            for row in stats.recent_todos
        ],
    )


@router.post("/bulk", response=BulkResultOut, auth=None)
def bulk_action(request: HttpRequest, payload: BulkActionIn):
    """
    Apply markComplete, markIncomplete or delete to a list of todos.
    All ids must belong to the caller or nothing changes.
    """
    owner_id = _owner_id(request)
    affected = services.apply_bulk_action(payload.action, payload.todoIds, owner_id)
    return BulkResultOut(message=f"Bulk {payload.action} completed", affectedCount=affected)


# =============================================================================
# Item Endpoints
# =============================================================================

@router.get("/{todo_id}", response=TodoOut, auth=None)
def get_todo(request: HttpRequest, todo_id: str):
    owner_id = _owner_id(request)
    return TodoOut.from_model(services.find_todo_by_id(todo_id, owner_id))


@router.put("/{todo_id}", response=TodoOut, auth=None)
def update_todo(request: HttpRequest, todo_id: str, payload: TodoPatchIn):
    """
    Partial update. Only fields present in the body change;
    "deadline": null clears the deadline.
    """
    owner_id = _owner_id(request)
    todo = services.update_todo(todo_id, owner_id, payload.model_dump(exclude_unset=True))
    return TodoOut.from_model(todo)


@router.delete("/{todo_id}", response=MessageOut, auth=None)
def delete_todo(request: HttpRequest, todo_id: str):
    owner_id = _owner_id(request)
    services.delete_todo(todo_id, owner_id)
    return MessageOut(message="Todo deleted successfully")
