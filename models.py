import sqlite3
import uuid
from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine

db = SQLAlchemy()

PRIORITIES = ('low', 'medium', 'high')
COLUMNS = ('todo', 'doing', 'done')
DEFAULT_NOTE_TITLE = 'Untitled Note'


def utcnow():
    """Naive UTC now, truncated to whole seconds."""
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


def _iso(value):
    return value.isoformat() if value else None


@event.listens_for(Engine, 'connect')
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless this is set per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()


class Workspace(db.Model):
    __tablename__ = 'productivity_workspaces'

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(80), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    last_active_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    todo_items = db.relationship('TodoItem', backref='workspace', lazy=True,
                                 cascade='all, delete-orphan')
    kanban_cards = db.relationship('KanbanCard', backref='workspace', lazy=True,
                                   cascade='all, delete-orphan')
    notes = db.relationship('Note', backref='workspace', lazy=True,
                            cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'workspaceId': str(self.id),
            'name': self.name,
            'createdAt': _iso(self.created_at),
            'lastActiveAt': _iso(self.last_active_at),
        }


class TodoItem(db.Model):
    __tablename__ = 'todo_items'

    id = db.Column(db.Integer, primary_key=True)
    workspace_id = db.Column(db.Uuid, db.ForeignKey('productivity_workspaces.id', ondelete='CASCADE'),
                             nullable=False, index=True)
    title = db.Column(db.String(250), nullable=False)
    priority = db.Column(db.String(20), nullable=False, default='medium')
    category = db.Column(db.String(50), nullable=True)
    is_completed = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    completed_at = db.Column(db.DateTime, nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'workspaceId': str(self.workspace_id),
            'title': self.title,
            'priority': self.priority,
            'category': self.category,
            'completed': self.is_completed,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
            'completedAt': _iso(self.completed_at),
        }


class KanbanCard(db.Model):
    __tablename__ = 'kanban_cards'
    __table_args__ = (
        db.Index('ix_kanban_cards_workspace_column', 'workspace_id', 'column'),
    )

    id = db.Column(db.Integer, primary_key=True)
    workspace_id = db.Column(db.Uuid, db.ForeignKey('productivity_workspaces.id', ondelete='CASCADE'),
                             nullable=False)
    title = db.Column(db.String(250), nullable=False)
    column = db.Column(db.String(30), nullable=False, default='todo')
    position = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'workspaceId': str(self.workspace_id),
            'title': self.title,
            'column': self.column,
            'position': self.position,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


class Note(db.Model):
    __tablename__ = 'notes'

    id = db.Column(db.Integer, primary_key=True)
    workspace_id = db.Column(db.Uuid, db.ForeignKey('productivity_workspaces.id', ondelete='CASCADE'),
                             nullable=False, index=True)
    title = db.Column(db.String(150), nullable=False, default=DEFAULT_NOTE_TITLE)
    content = db.Column(db.Text, nullable=False, default='')
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'workspaceId': str(self.workspace_id),
            'title': self.title,
            'content': self.content,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }
