"""
Tests for the optimistic list reducers.
"""
from django.test import SimpleTestCase

from client import state as reducers
from client.state import ListState, PendingKind, TodoItem


def item(todo_id, created_at, **fields):
    return TodoItem(id=todo_id, title=fields.pop('title', todo_id), created_at=created_at, **fields)


class TodoItemTest(SimpleTestCase):

    def test_from_json_maps_wire_names(self):
        todo = TodoItem.from_json({
            'id': 'abc',
            'title': 'Buy milk',
            'priority': 'HIGH',
            'isDone': True,
            'createdAt': '2024-05-01T10:00:00Z',
            'updatedAt': '2024-05-02T10:00:00Z',
            'userId': 'u1',
        })
        self.assertEqual(todo.title, 'Buy milk')
        self.assertTrue(todo.is_done)
        self.assertEqual(todo.created_at, '2024-05-01T10:00:00Z')
        self.assertEqual(todo.user_id, 'u1')
        self.assertIsNone(todo.deadline)
        self.assertFalse(todo.is_temporary)

    def test_temp_ids(self):
        temp_id = reducers.make_temp_id()
        self.assertTrue(temp_id.startswith('temp-'))
        self.assertTrue(TodoItem(id=temp_id, title='x').is_temporary)
        self.assertNotEqual(temp_id, reducers.make_temp_id())


class ReducerTest(SimpleTestCase):

    def setUp(self):
        self.a = item('a', '2024-05-01T10:00:00Z')
        self.b = item('b', '2024-05-02T10:00:00Z')
        self.c = item('c', '2024-05-03T10:00:00Z')
        self.state = ListState(todos=(self.a, self.b, self.c), total=3)

    def test_create_then_rollback(self):
        state = reducers.begin_create(self.state, 'temp-1', TodoItem(id='draft', title='New'))
        self.assertEqual(state.todos[0].id, 'temp-1')
        self.assertEqual(state.total, 4)
        self.assertEqual(state.pending['temp-1'].kind, PendingKind.CREATE)

        state = reducers.rollback(state, 'temp-1')
        self.assertEqual(state.todos, self.state.todos)
        self.assertEqual(state.total, 3)
        self.assertEqual(state.pending, {})

    def test_confirm_create_swaps_in_server_record(self):
        state = reducers.begin_create(self.state, 'temp-1', TodoItem(id='draft', title='New'))
        saved = item('server-id', '2024-05-04T10:00:00Z', title='New')

        state = reducers.confirm_create(state, 'temp-1', saved)
        self.assertEqual(state.todos[0], saved)
        self.assertIsNone(state.find('temp-1'))
        self.assertFalse(state.is_pending('temp-1'))
        self.assertEqual(state.total, 4)

    def test_toggle_then_rollback_restores_snapshot(self):
        state = reducers.begin_toggle(self.state, 'b', True)
        self.assertTrue(state.find('b').is_done)
        self.assertTrue(state.is_pending('b'))

        state = reducers.rollback(state, 'b')
        self.assertEqual(state.find('b'), self.b)
        self.assertFalse(state.is_pending('b'))

    def test_second_change_keeps_first_snapshot(self):
        state = reducers.begin_toggle(self.state, 'b', True)
        state = reducers.begin_update(state, 'b', {'title': 'renamed'})
        self.assertEqual(state.find('b').title, 'renamed')
        self.assertTrue(state.find('b').is_done)

        state = reducers.rollback(state, 'b')
        self.assertEqual(state.find('b'), self.b)

    def test_confirm_adopts_server_record(self):
        state = reducers.begin_toggle(self.state, 'b', True)
        saved = item('b', '2024-05-02T10:00:00Z', is_done=True, updated_at='2024-05-05T00:00:00Z')
        state = reducers.confirm(state, 'b', saved)
        self.assertEqual(state.find('b'), saved)
        self.assertEqual(state.pending, {})

    def test_delete_then_rollback_restores_position(self):
        state = reducers.begin_delete(self.state, 'b')
        self.assertIsNone(state.find('b'))
        self.assertEqual(state.total, 2)

        state = reducers.rollback(state, 'b')
        self.assertEqual([t.id for t in state.todos], ['a', 'b', 'c'])
        self.assertEqual(state.total, 3)

    def test_delete_confirm(self):
        state = reducers.confirm(reducers.begin_delete(self.state, 'a'), 'a')
        self.assertEqual([t.id for t in state.todos], ['b', 'c'])
        self.assertEqual(state.total, 2)
        self.assertEqual(state.pending, {})

    def test_unknown_ids_are_no_ops(self):
        self.assertIs(reducers.begin_toggle(self.state, 'zzz', True), self.state)
        self.assertIs(reducers.begin_delete(self.state, 'zzz'), self.state)
        self.assertIs(reducers.rollback(self.state, 'zzz'), self.state)

    def test_replace_all_keeps_pending(self):
        state = reducers.begin_toggle(self.state, 'a', True)
        state = reducers.replace_all(state, [self.c], 1)
        self.assertEqual(state.todos, (self.c,))
        self.assertEqual(state.total, 1)
        self.assertTrue(state.is_pending('a'))

    def test_reducers_do_not_mutate_input(self):
        reducers.begin_delete(self.state, 'a')
        reducers.begin_toggle(self.state, 'b', True)
        self.assertEqual(self.state.todos, (self.a, self.b, self.c))
        self.assertEqual(self.state.total, 3)
        self.assertEqual(self.state.pending, {})
