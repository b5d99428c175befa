from errors import NotFound
from models import DEFAULT_NOTE_TITLE, Note, utcnow
from stores.common import require_text, unit_of_work


class NoteStore:
    def __init__(self, db, registry, gate, clock=utcnow):
        self.db = db
        self.registry = registry
        self.gate = gate
        self.clock = clock

    def list(self, workspace_id):
        with unit_of_work(self.db, "list notes"):
            workspace = self.registry.get(workspace_id)
            workspace.last_active_at = self.clock()
            query = (
                self.db.select(Note)
                .filter_by(workspace_id=workspace.id)
                .order_by(Note.updated_at.desc(), Note.id.desc())
            )
            return self.db.session.execute(query).scalars().all()

    def get(self, note_id, workspace_id):
        with unit_of_work(self.db, "read note"):
            note = self.gate.fetch(Note, note_id, workspace_id, "Note")
            self.registry.touch(workspace_id)
        return note

    def save(self, workspace_id, note_id=None, title=DEFAULT_NOTE_TITLE, content=''):
        """Update the note in place when note_id names one of this workspace's
        notes, otherwise create a new note."""
        title = require_text('title', DEFAULT_NOTE_TITLE if title is None else title, 150)
        content = content or ''
        now = self.clock()

        with unit_of_work(self.db, "save note"):
            note = None
            if note_id is not None:
                try:
                    note = self.gate.fetch(Note, note_id, workspace_id, "Note")
                except NotFound:
                    note = None

            if note is not None:
                note.title = title
                note.content = content
                note.updated_at = now
                self.registry.touch(workspace_id)
                return note

            workspace = self.registry.get(workspace_id)
            note = Note(
                workspace_id=workspace.id,
                title=title,
                content=content,
                created_at=now,
                updated_at=now,
            )
            self.db.session.add(note)
            workspace.last_active_at = now
        return note

    def delete(self, note_id, workspace_id):
        with unit_of_work(self.db, "delete note"):
            note = self.gate.fetch(Note, note_id, workspace_id, "Note")
            self.db.session.delete(note)
            self.registry.touch(workspace_id)
