from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from apps.identity.services import find_user_by_email
from apps.todos.models import Todo
from apps.todos.seed import create_seed_todos, get_seed_provider


class Command(BaseCommand):
    help = 'Gives an existing user the starter todo list'

    def add_arguments(self, parser):
        parser.add_argument('email', help='Email of the account to seed')
        parser.add_argument(
            '--replace',
            action='store_true',
            help='Delete the user\'s existing todos first',
        )

    def handle(self, *args, **options):
        user = find_user_by_email(options['email'])
        if user is None:
            raise CommandError(f"No user with email {options['email']}")

        provider = get_seed_provider()
        if provider is None:
            self.stdout.write(self.style.WARNING('Seeding is disabled (TODO_SEED_PROVIDER is empty)'))
            return

        # Delete and insert commit together
        with transaction.atomic():
            deleted = 0
            if options['replace']:
                deleted, _ = Todo.objects.filter(user_id=user.id).delete()
            created = create_seed_todos(user.id, provider())

        if deleted:
            self.stdout.write(self.style.WARNING(f'Deleted {deleted} existing todos'))
        self.stdout.write(self.style.SUCCESS(f'Created {created} todos for {user.email}'))
