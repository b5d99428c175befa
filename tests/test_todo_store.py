import unittest

from errors import NotFound, ValidationError
from models import TodoItem, db
from support import StoreTestCase


class TestTodoStore(StoreTestCase):
    def setUp(self):
        super().setUp()
        self.ws = self.registry.ensure()

    def assert_completion_consistent(self, item):
        self.assertEqual(item.is_completed, item.completed_at is not None)

    def test_create_normalizes_fields(self):
        item = self.todos.create(self.ws.id, "  Write report ", " HIGH ", "  ")
        self.assertEqual(item.title, "Write report")
        self.assertEqual(item.priority, "high")
        self.assertIsNone(item.category)
        self.assertFalse(item.is_completed)
        self.assert_completion_consistent(item)

    def test_title_length_boundary(self):
        with self.assertRaises(ValidationError) as ctx:
            self.todos.create(self.ws.id, "x" * 251, "low")
        self.assertEqual(ctx.exception.field, "title")
        item = self.todos.create(self.ws.id, "x" * 250, "low")
        self.assertEqual(len(item.title), 250)

    def test_validation_failures(self):
        with self.assertRaises(ValidationError):
            self.todos.create(self.ws.id, "   ", "low")
        with self.assertRaises(ValidationError):
            self.todos.create(self.ws.id, "Task", "urgent")
        with self.assertRaises(ValidationError):
            self.todos.create(self.ws.id, "Task", "low", "c" * 51)
        self.assertEqual(db.session.query(TodoItem).count(), 0)

    def test_create_in_unknown_workspace_fails(self):
        import uuid
        with self.assertRaises(NotFound):
            self.todos.create(uuid.uuid4(), "Task", "low")

    def test_list_newest_first(self):
        first = self.todos.create(self.ws.id, "First", "low")
        second = self.todos.create(self.ws.id, "Second", "low")
        other = self.registry.ensure()
        self.todos.create(other.id, "Elsewhere", "low")
        ids = [i.id for i in self.todos.list(self.ws.id)]
        self.assertEqual(ids, [second.id, first.id])

    def test_update(self):
        item = self.todos.create(self.ws.id, "Task", "low")
        created = item.created_at
        updated = self.todos.update(item.id, self.ws.id, "Renamed", "medium", "Work")
        self.assertEqual(updated.title, "Renamed")
        self.assertEqual(updated.priority, "medium")
        self.assertEqual(updated.category, "Work")
        self.assertEqual(updated.created_at, created)
        self.assertGreater(updated.updated_at, created)

    def test_set_status_toggles_completed_at(self):
        item = self.todos.create(self.ws.id, "Task", "low")
        done = self.todos.set_status(item.id, self.ws.id, True)
        self.assertTrue(done.is_completed)
        self.assertIsNotNone(done.completed_at)
        self.assert_completion_consistent(done)

        undone = self.todos.set_status(item.id, self.ws.id, False)
        self.assertFalse(undone.is_completed)
        self.assertIsNone(undone.completed_at)
        self.assert_completion_consistent(undone)

    def test_set_status_requires_boolean(self):
        item = self.todos.create(self.ws.id, "Task", "low")
        for value in ("false", 1, None):
            with self.assertRaises(ValidationError) as ctx:
                self.todos.set_status(item.id, self.ws.id, value)
            self.assertEqual(ctx.exception.field, "completed")
        self.assertFalse(self.todos.get(item.id, self.ws.id).is_completed)

    def test_set_status_true_twice_keeps_completion_time(self):
        item = self.todos.create(self.ws.id, "Task", "low")
        first = self.todos.set_status(item.id, self.ws.id, True).completed_at
        again = self.todos.set_status(item.id, self.ws.id, True)
        self.assertEqual(again.completed_at, first)
        self.assertGreater(again.updated_at, first)

    def test_cross_workspace_access_matches_missing_id(self):
        item = self.todos.create(self.ws.id, "Task", "low")
        other = self.registry.ensure()
        for op in (
            lambda i: self.todos.update(i, other.id, "Hijack", "low"),
            lambda i: self.todos.set_status(i, other.id, True),
            lambda i: self.todos.delete(i, other.id),
        ):
            with self.assertRaises(NotFound) as foreign:
                op(item.id)
            with self.assertRaises(NotFound) as missing:
                op(item.id + 999)
            self.assertIs(type(foreign.exception), type(missing.exception))
            self.assertEqual(str(foreign.exception), str(missing.exception))
        self.assertFalse(self.todos.get(item.id, self.ws.id).is_completed)

    def test_delete(self):
        item = self.todos.create(self.ws.id, "Task", "low")
        self.todos.delete(item.id, self.ws.id)
        self.assertEqual(self.todos.list(self.ws.id), [])

    def test_clear_completed(self):
        a = self.todos.create(self.ws.id, "A", "low")
        self.todos.create(self.ws.id, "B", "low")
        c = self.todos.create(self.ws.id, "C", "low")
        self.todos.set_status(a.id, self.ws.id, True)
        self.todos.set_status(c.id, self.ws.id, True)

        self.assertEqual(self.todos.clear_completed(self.ws.id), 2)
        self.assertEqual([i.title for i in self.todos.list(self.ws.id)], ["B"])
        self.assertEqual(self.todos.clear_completed(self.ws.id), 0)

    def test_mutations_touch_workspace(self):
        item = self.todos.create(self.ws.id, "Task", "low")
        before = self.registry.get(self.ws.id).last_active_at
        self.todos.set_status(item.id, self.ws.id, True)
        self.assertGreater(self.registry.get(self.ws.id).last_active_at, before)


if __name__ == '__main__':
    unittest.main()
