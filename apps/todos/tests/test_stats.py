"""
Tests for todo statistics.
"""
from datetime import datetime, timedelta, timezone as dt_timezone

from django.test import TestCase
from django.utils import timezone

from apps.identity.models import User
from apps.todos.models import Priority, Todo
from apps.todos.stats_service import (
    RECENT_TODOS_LIMIT, completion_rate, get_todo_stats, normalize_period,
    period_start, subtract_one_month,
)


class PeriodHelpersTest(TestCase):

    def test_subtract_one_month_clamps_day(self):
        self.assertEqual(
            subtract_one_month(datetime(2024, 3, 31, 9, 0, tzinfo=dt_timezone.utc)),
            datetime(2024, 2, 29, 9, 0, tzinfo=dt_timezone.utc),
        )
        self.assertEqual(
            subtract_one_month(datetime(2023, 3, 31, tzinfo=dt_timezone.utc)),
            datetime(2023, 2, 28, tzinfo=dt_timezone.utc),
        )
        self.assertEqual(
            subtract_one_month(datetime(2024, 1, 15, tzinfo=dt_timezone.utc)),
            datetime(2023, 12, 15, tzinfo=dt_timezone.utc),
        )

    def test_period_start(self):
        now = datetime(2024, 5, 20, tzinfo=dt_timezone.utc)
        self.assertEqual(period_start('week', now), datetime(2024, 5, 13, tzinfo=dt_timezone.utc))
        self.assertEqual(period_start('month', now), datetime(2024, 4, 20, tzinfo=dt_timezone.utc))
        self.assertIsNone(period_start('all', now))

    def test_normalize_period(self):
        self.assertEqual(normalize_period(None), 'all')
        self.assertEqual(normalize_period('year'), 'all')
        self.assertEqual(normalize_period('week'), 'week')

    def test_completion_rate(self):
        self.assertEqual(completion_rate(0, 0), 0)
        self.assertEqual(completion_rate(1, 3), 33.33)
        self.assertEqual(completion_rate(2, 3), 66.67)
        self.assertEqual(completion_rate(4, 4), 100)


class TodoStatsTest(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(email='ann@example.com', password='pw', name='Ann')

    def make_todo(self, age_days=0, **fields):
        todo = Todo.objects.create(user=self.user, title=fields.pop('title', 'Task'), **fields)
        if age_days:
            Todo.objects.filter(id=todo.id).update(created_at=timezone.now() - timedelta(days=age_days))
        return todo

    def test_empty(self):
        stats = get_todo_stats(self.user.id)
        self.assertEqual(stats.total, 0)
        self.assertEqual(stats.completion_rate, 0)
        self.assertEqual(stats.recent_todos, [])
        self.assertEqual((stats.priority_breakdown.low, stats.priority_breakdown.medium, stats.priority_breakdown.high), (0, 0, 0))

    def test_overdue_excludes_done_and_future(self):
        past = timezone.now() - timedelta(days=2)
        self.make_todo(deadline=past)
        self.make_todo(deadline=past, is_done=True)
        self.make_todo(deadline=timezone.now() + timedelta(days=2))
        self.make_todo()

        stats = get_todo_stats(self.user.id)
        self.assertEqual(stats.total, 4)
        self.assertEqual(stats.overdue, 1)
        self.assertEqual(stats.completed, 1)
        self.assertEqual(stats.pending, 3)
        self.assertEqual(stats.completion_rate, 25)

    def test_period_filters_by_creation(self):
        self.make_todo(title='today', priority=Priority.HIGH)
        self.make_todo(title='ten days', age_days=10, is_done=True)
        self.make_todo(title='two months', age_days=60)

        week = get_todo_stats(self.user.id, 'week')
        month = get_todo_stats(self.user.id, 'month')
        everything = get_todo_stats(self.user.id, 'all')

        self.assertEqual(week.total, 1)
        self.assertEqual(week.priority_breakdown.high, 1)
        self.assertEqual(month.total, 2)
        self.assertEqual(month.completion_rate, 50)
        self.assertEqual(everything.total, 3)
        self.assertEqual([row['title'] for row in week.recent_todos], ['today'])

    def test_recent_todos_are_newest_five(self):
        for i in range(7):
            self.make_todo(title=f'Task {i}', age_days=7 - i)

        recent = get_todo_stats(self.user.id).recent_todos
        self.assertEqual(len(recent), RECENT_TODOS_LIMIT)
        self.assertEqual([row['title'] for row in recent], ['Task 6', 'Task 5', 'Task 4', 'Task 3', 'Task 2'])
