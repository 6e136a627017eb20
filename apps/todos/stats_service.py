"""
Statistics for a user's todo list.

All figures share one base filter (owner + period). Counts are computed in a
single aggregate query; the priority breakdown and recent items are two more
reads and may observe a slightly later state. Stats are advisory.
"""
import calendar
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from django.db.models import Count, Q
from django.utils import timezone

from .dtos import PriorityBreakdownDTO, TodoFilters, TodoStatsDTO
from .models import Priority
from .services import apply_filters, group_by_priority, owned_todos

RECENT_TODOS_LIMIT = 5


class Period:
    ALL = 'all'
    WEEK = 'week'
    MONTH = 'month'

    CHOICES = (ALL, WEEK, MONTH)


def subtract_one_month(moment: datetime) -> datetime:
    """Same instant one calendar month earlier, clamping the day (Mar 31 -> Feb 28/29)."""
    year, month = (moment.year, moment.month - 1) if moment.month > 1 else (moment.year - 1, 12)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def period_start(period: str, now: Optional[datetime] = None) -> Optional[datetime]:
    now = now or timezone.now()
    if period == Period.WEEK:
        return now - timedelta(days=7)
    if period == Period.MONTH:
        return subtract_one_month(now)
    return None


def normalize_period(period: Optional[str]) -> str:
    return period if period in Period.CHOICES else Period.ALL


def completion_rate(completed: int, total: int) -> float:
    if total == 0:
        return 0
    return round(completed / total * 100, 2)


def get_todo_stats(owner_id: UUID, period: Optional[str] = None) -> TodoStatsDTO:
    """
    Totals, completion rate, overdue count, priority breakdown and the five
    newest todos for owner_id within the period (by created_at).
    """
    period = normalize_period(period)
    now = timezone.now()
    filters = TodoFilters(created_since=period_start(period, now))
    base = apply_filters(owned_todos(owner_id), filters)

    aggregated = base.aggregate(
        total=Count('id'),
        completed=Count('id', filter=Q(is_done=True)),
        pending=Count('id', filter=Q(is_done=False)),
        overdue=Count('id', filter=Q(is_done=False, deadline__lt=now)),
    )

    by_priority = group_by_priority(owner_id, filters)
    recent = list(
        base.order_by('-created_at')
        .values('id', 'title', 'priority', 'is_done', 'created_at')[:RECENT_TODOS_LIMIT]
    )

    return TodoStatsDTO(
        period=period,
        total=aggregated['total'],
        completed=aggregated['completed'],
        pending=aggregated['pending'],
        overdue=aggregated['overdue'],
        completion_rate=completion_rate(aggregated['completed'], aggregated['total']),
        priority_breakdown=PriorityBreakdownDTO(
            low=by_priority[Priority.LOW],
            medium=by_priority[Priority.MEDIUM],
            high=by_priority[Priority.HIGH],
        ),
        recent_todos=recent,
    )
