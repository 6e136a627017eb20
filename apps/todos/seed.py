"""
Starter todos for new accounts.

settings.TODO_SEED_PROVIDER names a callable returning a list of SeedTodo;
set it to None to disable seeding.
"""
import logging
from datetime import datetime
from typing import Callable, List, Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from django.utils.module_loading import import_string

from .dtos import SeedTodo
from .models import Priority, Todo

logger = logging.getLogger(__name__)


def _day(year: int, month: int, day: int) -> datetime:
    return timezone.make_aware(datetime(year, month, day))


def default_seed_todos() -> List[SeedTodo]:
    """The demo list every new account starts with."""
    return [
        SeedTodo("Buy groceries", Priority.HIGH, _day(2024, 5, 5), is_done=True),
        SeedTodo("Finish report", Priority.MEDIUM, _day(2024, 5, 10)),
        SeedTodo("Call mom", Priority.LOW, _day(2024, 5, 7)),
        SeedTodo("Complete project proposal", Priority.HIGH, _day(2024, 5, 15)),
        SeedTodo("Pay bills", Priority.HIGH, _day(2024, 5, 8), is_done=True),
        SeedTodo("Study for exam", Priority.HIGH, _day(2024, 5, 20)),
        SeedTodo("Schedule dentist appointment", Priority.MEDIUM, _day(2024, 5, 10)),
        SeedTodo("Exercise", Priority.MEDIUM, _day(2024, 5, 12)),
        SeedTodo("Read book", Priority.MEDIUM, _day(2024, 5, 18)),
        SeedTodo("Write blog post", Priority.MEDIUM, _day(2024, 5, 14), is_done=True),
        SeedTodo("Prepare presentation", Priority.MEDIUM, _day(2024, 5, 17)),
        SeedTodo("Call friend", Priority.LOW, _day(2024, 5, 9)),
        SeedTodo("Clean house", Priority.LOW, _day(2024, 5, 11), is_done=True),
        SeedTodo("Go for a walk", Priority.LOW, _day(2024, 5, 16)),
        SeedTodo("Watch movie", Priority.LOW, _day(2024, 5, 13)),
        SeedTodo("Cook dinner", Priority.LOW, _day(2024, 5, 19)),
        SeedTodo("Water plants", Priority.LOW, _day(2024, 5, 7)),
        SeedTodo("Check emails", Priority.LOW, _day(2024, 5, 6)),
        SeedTodo("Organize files", Priority.LOW, _day(2024, 5, 21), is_done=True),
        SeedTodo("Plan weekend activities", Priority.LOW, _day(2024, 5, 22), is_done=True),
    ]


def get_seed_provider() -> Optional[Callable[[], List[SeedTodo]]]:
    path = getattr(settings, 'TODO_SEED_PROVIDER', None)
    if not path:
        return None
    return import_string(path)


def create_seed_todos(user_id: UUID, seeds: List[SeedTodo]) -> int:
    todos = [
        Todo(
            user_id=user_id,
            title=seed.title,
            description=seed.description,
            priority=seed.priority,
            deadline=seed.deadline,
            is_done=seed.is_done,
        )
        for seed in seeds
    ]
    return len(Todo.objects.bulk_create(todos))


def seed_initial_todos(user_id: UUID) -> int:
    """
    Give a new account its starter todos.

    Never raises: a failure is logged and reported as 0 so registration
    still succeeds.
    """
    try:
        provider = get_seed_provider()
        if provider is None:
            return 0
        with transaction.atomic():
            return create_seed_todos(user_id, provider())
    except Exception:
        logger.exception(f"Seeding initial todos failed for user {user_id}")
        return 0
