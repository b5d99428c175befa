from errors import ValidationError
from models import PRIORITIES, TodoItem, utcnow
from stores.common import optional_text, require_choice, require_text, unit_of_work


class TodoStore:
    """To-do items scoped to a workspace."""

    def __init__(self, db, registry, gate, clock=utcnow):
        self.db = db
        self.registry = registry
        self.gate = gate
        self.clock = clock

    def _validate(self, title, priority, category):
        return (
            require_text('title', title, 250),
            require_choice('priority', priority, PRIORITIES, 20),
            optional_text('category', category, 50),
        )

    def list(self, workspace_id):
        with unit_of_work(self.db, "list todos"):
            workspace = self.registry.get(workspace_id)
            workspace.last_active_at = self.clock()
            query = (
                self.db.select(TodoItem)
                .filter_by(workspace_id=workspace.id)
                .order_by(TodoItem.created_at.desc(), TodoItem.id.desc())
            )
            return self.db.session.execute(query).scalars().all()

    def get(self, item_id, workspace_id):
        with unit_of_work(self.db, "read todo"):
            return self.gate.fetch(TodoItem, item_id, workspace_id, "Todo item")

    def create(self, workspace_id, title, priority='medium', category=None):
        title, priority, category = self._validate(title, priority, category)
        with unit_of_work(self.db, "create todo"):
            workspace = self.registry.get(workspace_id)
            now = self.clock()
            item = TodoItem(
                workspace_id=workspace.id,
                title=title,
                priority=priority,
                category=category,
                is_completed=False,
                created_at=now,
                updated_at=now,
            )
            self.db.session.add(item)
            workspace.last_active_at = now
        return item

    def update(self, item_id, workspace_id, title, priority='medium', category=None):
        title, priority, category = self._validate(title, priority, category)
        with unit_of_work(self.db, "update todo"):
            item = self.gate.fetch(TodoItem, item_id, workspace_id, "Todo item")
            item.title = title
            item.priority = priority
            item.category = category
            item.updated_at = self.clock()
            self.registry.touch(workspace_id)
        return item

    def set_status(self, item_id, workspace_id, completed):
        if not isinstance(completed, bool):
            raise ValidationError('completed', "completed must be true or false.")
        with unit_of_work(self.db, "update todo status"):
            item = self.gate.fetch(TodoItem, item_id, workspace_id, "Todo item")
            now = self.clock()
            if completed != item.is_completed:
                item.completed_at = now if completed else None
            item.is_completed = completed
            item.updated_at = now
            self.registry.touch(workspace_id)
        return item

    def delete(self, item_id, workspace_id):
        with unit_of_work(self.db, "delete todo"):
            item = self.gate.fetch(TodoItem, item_id, workspace_id, "Todo item")
            self.db.session.delete(item)
            self.registry.touch(workspace_id)

    def clear_completed(self, workspace_id):
        """Delete every completed item in the workspace; return how many went."""
        with unit_of_work(self.db, "clear completed todos"):
            workspace = self.registry.get(workspace_id)
            query = self.db.select(TodoItem).filter_by(workspace_id=workspace.id, is_completed=True)
            completed = self.db.session.execute(query).scalars().all()
            for item in completed:
                self.db.session.delete(item)
            if completed:
                workspace.last_active_at = self.clock()
        return len(completed)
