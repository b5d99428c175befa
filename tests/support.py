import unittest
from datetime import datetime, timedelta

from app import create_app
from models import db
from stores.access_gate import AccessGate
from stores.kanban_store import KanbanStore
from stores.note_store import NoteStore
from stores.todo_store import TodoStore
from stores.workspace_registry import WorkspaceRegistry


class FakeClock:
    """Returns a whole-second timestamp that advances one second per call."""

    def __init__(self, start=datetime(2025, 1, 1, 12, 0, 0)):
        self.now = start

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


class StoreTestCase(unittest.TestCase):
    def setUp(self):
        self.app = create_app({'SQLALCHEMY_DATABASE_URI': 'sqlite://', 'TESTING': True})
        self.ctx = self.app.app_context()
        self.ctx.push()
        self.clock = FakeClock()
        self.registry = WorkspaceRegistry(db, clock=self.clock)
        gate = AccessGate(db)
        self.gate = gate
        self.todos = TodoStore(db, self.registry, gate, clock=self.clock)
        self.kanban = KanbanStore(db, self.registry, gate, clock=self.clock)
        self.notes = NoteStore(db, self.registry, gate, clock=self.clock)

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        self.ctx.pop()
