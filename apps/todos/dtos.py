"""DTOs and API schemas for the Todos app."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from ninja import Schema


# =============================================================================
# Service-level DTOs
# =============================================================================

@dataclass(frozen=True)
class TodoFilters:
    priority: Optional[str] = None
    is_done: Optional[bool] = None
    search: Optional[str] = None
    deadline_from: Optional[datetime] = None
    deadline_to: Optional[datetime] = None
    created_since: Optional[datetime] = None


@dataclass(frozen=True)
class TodoSort:
    field: Optional[str] = 'created_at'
    descending: bool = True


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


@dataclass(frozen=True)
class TodoPage:
    items: list
    pagination: Pagination


@dataclass(frozen=True)
class SeedTodo:
    title: str
    priority: str
    deadline: Optional[datetime]
    is_done: bool = False
    description: Optional[str] = None


@dataclass(frozen=True)
class PriorityBreakdownDTO:
    low: int = 0
    medium: int = 0
    high: int = 0


@dataclass(frozen=True)
class TodoStatsDTO:
    period: str
    total: int
    completed: int
    pending: int
    overdue: int
    completion_rate: float
    priority_breakdown: PriorityBreakdownDTO
    recent_todos: list = field(default_factory=list)


# =============================================================================
# Response Schemas (camelCase on the wire)
# =============================================================================

class TodoOut(Schema):
    id: UUID
    title: str
    description: Optional[str] = None
    priority: str
    deadline: Optional[datetime] = None
    isDone: bool
    createdAt: datetime
    updatedAt: datetime
    userId: UUID

    @staticmethod
    def from_model(todo) -> "TodoOut":
        return TodoOut(
            id=todo.id,
            title=todo.title,
            description=todo.description,
            priority=todo.priority,
            deadline=todo.deadline,
            isDone=todo.is_done,
            createdAt=todo.created_at,
            updatedAt=todo.updated_at,
            userId=todo.user_id,
        )


class PaginationOut(Schema):
    page: int
    limit: int
    total: int
    totalPages: int
    hasNextPage: bool
    hasPrevPage: bool


class TodoListOut(Schema):
    data: List[TodoOut]
    pagination: PaginationOut


class MessageOut(Schema):
    message: str


class BulkResultOut(Schema):
    message: str
    affectedCount: int


class RecentTodoOut(Schema):
    id: UUID
    title: str
    priority: str
    isDone: bool
    createdAt: datetime


class PriorityBreakdownOut(Schema):
    low: int
    medium: int
    high: int


class TodoStatsOut(Schema):
    period: str
    total: int
    completed: int
    pending: int
    overdue: int
    completionRate: float
    priorityBreakdown: PriorityBreakdownOut
    recentTodos: List[RecentTodoOut]


# =============================================================================
# Request Schemas
# =============================================================================
# Loosely typed on purpose: the service layer validates and answers 400 with
# field-specific messages.

class TodoIn(Schema):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    deadline: Optional[str] = None


class TodoPatchIn(Schema):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    deadline: Optional[str] = None
    isDone: Any = None


class BulkActionIn(Schema):
    action: Optional[str] = None
    todoIds: Optional[List[Any]] = None
