"""
Core services for the Todos app.

Every query is scoped to the owner: there is no function here that can
read or write a todo without the owner's id in its WHERE clause.
"""
import logging
import math
from datetime import datetime, time
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Case, Count, IntegerField, Q, QuerySet, Value, When
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from apps.core.errors import NotFoundError, ValidationError
from .dtos import PageRequest, Pagination, TodoFilters, TodoPage, TodoSort
from .models import PRIORITY_RANK, Priority, Todo

logger = logging.getLogger(__name__)

TODO_NOT_FOUND = "Todo not found"

# API sort key -> model field
SORT_FIELDS = {
    'createdAt': 'created_at',
    'title': 'title',
    'priority': 'priority_rank',
    'deadline': 'deadline',
    'isDone': 'is_done',
    'updatedAt': 'updated_at',
}


# =============================================================================
# Input Validation
# =============================================================================

def clean_title(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Title is required")
    title = title.strip()
    if len(title) > Todo._meta.get_field('title').max_length:
        raise ValidationError("Title is too long")
    return title


def clean_description(description: Any) -> Optional[str]:
    """Trimmed description; blank collapses to None."""
    if description is None:
        return None
    if not isinstance(description, str):
        raise ValidationError("Description must be a string")
    return description.strip() or None


def clean_priority(priority: Any) -> str:
    if priority not in Priority.values:
        raise ValidationError("Invalid priority. Must be LOW, MEDIUM, or HIGH")
    return priority


def parse_deadline(value: Any) -> Optional[datetime]:
    """
    Parse an ISO date or datetime string into an aware datetime.
    Dates become midnight in the current timezone.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        raw = value.strip()
        try:
            parsed = parse_datetime(raw)
            if parsed is None:
                day = parse_date(raw)
                parsed = datetime.combine(day, time.min) if day else None
        except ValueError:
            parsed = None
        if parsed is None:
            raise ValidationError("Invalid deadline format")
    else:
        raise ValidationError("Invalid deadline format")

    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def parse_bool_flag(value: Optional[str]) -> Optional[bool]:
    """Query-string flag: "true" means True, any other given value False."""
    if value is None:
        return None
    return value == 'true'


def _parse_todo_id(todo_id: Any) -> Optional[UUID]:
    if isinstance(todo_id, UUID):
        return todo_id
    try:
        return UUID(str(todo_id))
    except (TypeError, ValueError, AttributeError):
        return None


# =============================================================================
# Query Construction
# =============================================================================

def owned_todos(owner_id: UUID) -> QuerySet:
    return Todo.objects.filter(user_id=owner_id)


def apply_filters(queryset: QuerySet, filters: Optional[TodoFilters]) -> QuerySet:
    if not filters:
        return queryset

    if filters.priority:
        queryset = queryset.filter(priority=filters.priority)
    if filters.is_done is not None:
        queryset = queryset.filter(is_done=filters.is_done)
    if filters.search:
        queryset = queryset.filter(
            Q(title__icontains=filters.search) |
            Q(description__icontains=filters.search)
        )
    if filters.deadline_from:
        queryset = queryset.filter(deadline__gte=filters.deadline_from)
    if filters.deadline_to:
        queryset = queryset.filter(deadline__lte=filters.deadline_to)
    if filters.created_since:
        queryset = queryset.filter(created_at__gte=filters.created_since)
    return queryset


def apply_sort(queryset: QuerySet, sort: Optional[TodoSort]) -> QuerySet:
    """Order by a known field; anything else leaves the query unordered."""
    if not sort or sort.field not in SORT_FIELDS.values():
        return queryset

    if sort.field == 'priority_rank':
        queryset = queryset.annotate(
            priority_rank=Case(
                *[When(priority=value, then=Value(rank)) for value, rank in PRIORITY_RANK.items()],
                output_field=IntegerField(),
            )
        )
    prefix = '-' if sort.descending else ''
    return queryset.order_by(f"{prefix}{sort.field}")


def resolve_sort(sort_by: Optional[str], sort_order: Optional[str]) -> TodoSort:
    """Map API sortBy/sortOrder onto a TodoSort. Unknown keys mean no ordering."""
    return TodoSort(
        field=SORT_FIELDS.get(sort_by or 'createdAt'),
        descending=(sort_order or 'desc') != 'asc',
    )


def build_pagination(page: PageRequest, total: int) -> Pagination:
    total_pages = math.ceil(total / page.limit) if page.limit else 0
    return Pagination(
        page=page.page,
        limit=page.limit,
        total=total,
        total_pages=total_pages,
        has_next_page=page.page < total_pages,
        has_prev_page=page.page > 1,
    )


# =============================================================================
# Data Store Gateway
# =============================================================================

def find_todo_by_id(todo_id: Any, owner_id: UUID) -> Todo:
    """Fetch an owned todo. Missing and not-owned are the same 404."""
    parsed = _parse_todo_id(todo_id)
    if parsed is None:
        raise NotFoundError(TODO_NOT_FOUND)
    try:
        return owned_todos(owner_id).get(id=parsed)
    except Todo.DoesNotExist:
        raise NotFoundError(TODO_NOT_FOUND)


def list_todos(
    owner_id: UUID,
    filters: Optional[TodoFilters] = None,
    sort: Optional[TodoSort] = None,
    page: Optional[PageRequest] = None,
) -> TodoPage:
    page = page or PageRequest()
    queryset = apply_filters(owned_todos(owner_id), filters)
    total = queryset.count()
    items = list(apply_sort(queryset, sort)[page.offset:page.offset + page.limit])
    return TodoPage(items=items, pagination=build_pagination(page, total))


def count_todos(owner_id: UUID, filters: Optional[TodoFilters] = None) -> int:
    return apply_filters(owned_todos(owner_id), filters).count()


def group_by_priority(owner_id: UUID, filters: Optional[TodoFilters] = None) -> Dict[str, int]:
    """Counts per priority; priorities with no todos are reported as 0."""
    rows = (
        apply_filters(owned_todos(owner_id), filters)
        .order_by()
        .values('priority')
        .annotate(count=Count('id'))
    )
    counts = {value: 0 for value in Priority.values}
    for row in rows:
        counts[row['priority']] = row['count']
    return counts


def create_todo(
    owner_id: UUID,
    title: Any,
    description: Any = None,
    priority: Any = None,
    deadline: Any = None,
) -> Todo:
    """Validate and persist a new todo for owner_id."""
    cleaned_title = clean_title(title)
    cleaned_priority = clean_priority(priority) if priority else Priority.MEDIUM
    cleaned_deadline = parse_deadline(deadline) if deadline else None

    return Todo.objects.create(
        user_id=owner_id,
        title=cleaned_title,
        description=clean_description(description),
        priority=cleaned_priority,
        deadline=cleaned_deadline,
    )


def clean_patch(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate the fields present in a partial update and map them onto
    model fields. Absent keys are left out; deadline=None clears.
    """
    changes: Dict[str, Any] = {}

    if 'title' in data:
        changes['title'] = clean_title(data['title'])
    if 'description' in data:
        changes['description'] = clean_description(data['description'])
    if 'priority' in data and data['priority'] is not None:
        changes['priority'] = clean_priority(data['priority'])
    if 'deadline' in data:
        changes['deadline'] = parse_deadline(data['deadline'])
    if 'isDone' in data and data['isDone'] is not None:
        if not isinstance(data['isDone'], bool):
            raise ValidationError("isDone must be a boolean")
        changes['is_done'] = data['isDone']

    return changes


def update_todo(todo_id: Any, owner_id: UUID, data: Dict[str, Any]) -> Todo:
    """
    Partial update: only supplied fields change, updated_at always moves.
    """
    todo = find_todo_by_id(todo_id, owner_id)
    changes = clean_patch(data)

    for attr, value in changes.items():
        setattr(todo, attr, value)
    todo.save()
    return todo


def delete_todo(todo_id: Any, owner_id: UUID) -> None:
    todo = find_todo_by_id(todo_id, owner_id)
    todo.delete()


# =============================================================================
# Bulk Operations
# =============================================================================

class BulkAction:
    MARK_COMPLETE = 'markComplete'
    MARK_INCOMPLETE = 'markIncomplete'
    DELETE = 'delete'

    ALL = (MARK_COMPLETE, MARK_INCOMPLETE, DELETE)


def _resolve_owned_ids(ids: Iterable[Any], owner_id: UUID) -> List[UUID]:
    """
    Membership check for a batch. Every id must be a todo of owner_id,
    otherwise nothing is touched.
    """
    parsed = []
    for raw in ids:
        todo_id = _parse_todo_id(raw)
        if todo_id is None:
            raise ValidationError("Some todos not found or not accessible")
        parsed.append(todo_id)

    unique_ids = list(dict.fromkeys(parsed))
    owned = set(owned_todos(owner_id).filter(id__in=unique_ids).values_list('id', flat=True))
    if len(owned) != len(unique_ids):
        raise ValidationError("Some todos not found or not accessible")
    return unique_ids


def bulk_update_todos(ids: Iterable[Any], owner_id: UUID, patch: Dict[str, Any]) -> int:
    with transaction.atomic():
        todo_ids = _resolve_owned_ids(ids, owner_id)
        # queryset.update() skips auto_now, so bump updated_at explicitly
        return owned_todos(owner_id).filter(id__in=todo_ids).update(
            **patch, updated_at=timezone.now()
        )


def bulk_delete_todos(ids: Iterable[Any], owner_id: UUID) -> int:
    with transaction.atomic():
        todo_ids = _resolve_owned_ids(ids, owner_id)
        deleted, _ = owned_todos(owner_id).filter(id__in=todo_ids).delete()
        return deleted


def apply_bulk_action(action: Optional[str], todo_ids: Optional[list], owner_id: UUID) -> int:
    """Run a bulk action for owner_id and return the affected row count."""
    if not action or not isinstance(todo_ids, list) or not todo_ids:
        raise ValidationError("Action and todoIds are required")

    if action == BulkAction.MARK_COMPLETE:
        affected = bulk_update_todos(todo_ids, owner_id, {'is_done': True})
    elif action == BulkAction.MARK_INCOMPLETE:
        affected = bulk_update_todos(todo_ids, owner_id, {'is_done': False})
    elif action == BulkAction.DELETE:
        affected = bulk_delete_todos(todo_ids, owner_id)
    else:
        raise ValidationError(
            "Invalid action. Supported actions: markComplete, markIncomplete, delete"
        )

    logger.info(f"Bulk {action} by user {owner_id}: {affected} todos")
    return affected
