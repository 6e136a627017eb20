"""
Controller tests against the real API, served in-process by the Django
test client.
"""
import json
import threading

from django.test import Client, SimpleTestCase, TestCase

from apps.identity.models import User
from apps.todos.models import Todo
from client import ApiResponse, ClientError, DriftPoller, TodoAPIClient, TodoListController
from client.transport import encode_query


class DjangoClientTransport:
    """Transport that routes requests through django.test.Client."""

    def __init__(self):
        self.client = Client()

    def request(self, method, path, params=None, body=None):
        query = encode_query(params)
        if query:
            path = f"{path}?{query}"
        data = json.dumps(body) if body is not None else ''
        response = self.client.generic(method, path, data=data, content_type='application/json')
        payload = json.loads(response.content) if response.content else None
        return ApiResponse(status=response.status_code, data=payload)


class BrokenTransport:
    def request(self, method, path, params=None, body=None):
        raise ConnectionRefusedError("connection refused")


class TodoAPIClientTest(TestCase):

    def setUp(self):
        self.api = TodoAPIClient(DjangoClientTransport())

    def test_auth_round_trip(self):
        registered = self.api.register('ann@example.com', 'pw-123456', 'Ann')
        self.assertEqual(registered['initialTodosCount'], 20)
        self.assertEqual(self.api.me()['user']['email'], 'ann@example.com')

        self.api.logout()
        with self.assertRaises(ClientError) as ctx:
            self.api.me()
        self.assertEqual(ctx.exception.status, 401)

        self.api.login('ann@example.com', 'pw-123456')
        self.assertTrue(self.api.me()['success'])

    def test_errors_carry_server_message(self):
        self.api.register('ann@example.com', 'pw-123456', 'Ann')
        with self.assertRaises(ClientError) as ctx:
            self.api.create_todo('   ')
        self.assertEqual(ctx.exception.status, 400)
        self.assertEqual(ctx.exception.message, 'Title is required')

    def test_transport_failure_is_status_zero(self):
        api = TodoAPIClient(BrokenTransport())
        with self.assertRaises(ClientError) as ctx:
            api.me()
        self.assertEqual(ctx.exception.status, 0)

    def test_bulk_and_stats(self):
        self.api.register('ann@example.com', 'pw-123456', 'Ann')
        ids = [item['id'] for item in self.api.list_todos(limit=3)['data']]
        result = self.api.bulk('markComplete', ids)
        self.assertEqual(result['affectedCount'], 3)
        self.assertGreaterEqual(self.api.stats()['completed'], 3)


class TodoListControllerTest(TestCase):

    def setUp(self):
        self.api = TodoAPIClient(DjangoClientTransport())
        user = self.api.register('ann@example.com', 'pw-123456', 'Ann')['user']
        self.user = User.objects.get(email='ann@example.com')
        self.controller = TodoListController(self.api, page_size=10, user_id=user['id'])
        self.controller.load()

    def test_load(self):
        state = self.controller.state
        self.assertEqual(state.total, 20)
        self.assertEqual(len(state.todos), 10)
        self.assertEqual(self.controller.total_pages, 2)

    def test_paging_and_filters(self):
        self.controller.go_to_page(2)
        self.assertEqual(len(self.controller.state.todos), 10)

        self.controller.set_filters(priority='HIGH')
        self.assertEqual(self.controller.page, 1)
        self.assertEqual(
            self.controller.state.total,
            Todo.objects.filter(user=self.user, priority='HIGH').count(),
        )

        self.controller.set_filters(priority=None, isDone=True)
        self.assertEqual(self.controller.filters, {'isDone': True})
        self.assertTrue(all(todo.is_done for todo in self.controller.state.todos))

    def test_create(self):
        saved = self.controller.create_todo('Buy milk', priority='HIGH')

        self.assertIsNotNone(saved)
        self.assertFalse(saved.is_temporary)
        self.assertEqual(self.controller.state.total, 21)
        self.assertEqual(self.controller.state.pending, {})
        self.assertTrue(Todo.objects.filter(id=saved.id, user=self.user, priority='HIGH').exists())

    def test_failed_create_rolls_back(self):
        before = self.controller.state

        self.assertIsNone(self.controller.create_todo('   '))

        self.assertEqual(self.controller.state.todos, before.todos)
        self.assertEqual(self.controller.state.total, 20)
        self.assertEqual(self.controller.state.pending, {})
        self.assertEqual(self.controller.error, 'Title is required')

    def test_toggle(self):
        target = self.controller.state.todos[0]
        self.assertTrue(self.controller.toggle_todo(target.id, not target.is_done))
        self.assertEqual(Todo.objects.get(id=target.id).is_done, not target.is_done)

    def test_toggle_of_vanished_todo_rolls_back(self):
        target = self.controller.state.todos[0]
        Todo.objects.filter(id=target.id).delete()

        self.assertFalse(self.controller.toggle_todo(target.id, not target.is_done))
        self.assertEqual(self.controller.state.find(target.id), target)
        self.assertEqual(self.controller.error, 'Todo not found')

    def test_delete(self):
        target = self.controller.state.todos[0]
        self.assertTrue(self.controller.delete_todo(target.id))
        self.assertFalse(Todo.objects.filter(id=target.id).exists())
        self.assertEqual(self.controller.state.total, 19)

    def test_failed_delete_restores_item(self):
        target = self.controller.state.todos[3]
        Todo.objects.filter(id=target.id).delete()

        self.assertFalse(self.controller.delete_todo(target.id))
        self.assertIsNotNone(self.controller.state.find(target.id))
        self.assertEqual(self.controller.state.total, 20)

    def test_unknown_id_is_ignored(self):
        self.assertFalse(self.controller.toggle_todo('nope', True))
        self.assertFalse(self.controller.delete_todo('nope'))

    def test_update_is_not_optimistic(self):
        target = self.controller.state.todos[0]
        saved = self.controller.update_todo(target.id, title='Renamed', is_done=True)
        self.assertEqual(saved.title, 'Renamed')
        self.assertTrue(saved.is_done)

        self.assertIsNone(self.controller.update_todo(target.id, priority='URGENT'))
        self.assertEqual(self.controller.error, 'Invalid priority. Must be LOW, MEDIUM, or HIGH')

    def test_small_drift_is_tolerated(self):
        for i in range(2):
            Todo.objects.create(user=self.user, title=f'elsewhere {i}')
        self.assertFalse(self.controller.check_drift())
        self.assertEqual(self.controller.state.total, 20)

    def test_large_drift_triggers_reload(self):
        for i in range(3):
            Todo.objects.create(user=self.user, title=f'elsewhere {i}')
        self.assertTrue(self.controller.check_drift())
        self.assertEqual(self.controller.state.total, 23)

    def test_drift_uses_filtered_total(self):
        self.controller.set_filters(isDone=True)
        local = self.controller.state.total
        for i in range(3):
            Todo.objects.create(user=self.user, title=f'open {i}')
        self.assertFalse(self.controller.check_drift())
        self.assertEqual(self.controller.state.total, local)


class DriftPollerTest(SimpleTestCase):

    def test_polls_until_stopped(self):
        ticked = threading.Event()

        class Controller:
            calls = 0

            def check_drift(self):
                self.calls += 1
                ticked.set()
                return False

        controller = Controller()
        poller = DriftPoller(controller, interval=0.01)
        poller.start()
        try:
            self.assertTrue(ticked.wait(2))
        finally:
            poller.stop()
        self.assertGreaterEqual(controller.calls, 1)
