"""
Kanban cards scoped to a workspace.

Positions are 0-based and dense per (workspace, column): after every
create/update/move/delete the cards of a column sit at 0..n-1 with no gaps or
duplicates. Each mutating operation reorders in the session and commits once,
so a failure rolls back every shifted position together.
"""
import logging

from errors import ValidationError
from models import COLUMNS, KanbanCard, utcnow
from stores.common import require_choice, require_text, unit_of_work

logger = logging.getLogger(__name__)

_COLUMN_ORDER = {name: index for index, name in enumerate(COLUMNS)}


def _clamp(value, low, high):
    return max(low, min(value, high))


class KanbanStore:
    def __init__(self, db, registry, gate, clock=utcnow):
        self.db = db
        self.registry = registry
        self.gate = gate
        self.clock = clock

    def _column_cards(self, workspace_id, column, exclude_id=None):
        query = (
            self.db.select(KanbanCard)
            .filter_by(workspace_id=workspace_id, column=column)
            .order_by(KanbanCard.position, KanbanCard.id)
            .with_for_update()
        )
        if exclude_id is not None:
            query = query.filter(KanbanCard.id != exclude_id)
        return self.db.session.execute(query).scalars().all()

    def _reindex(self, cards, now):
        """Assign positions 0..n-1 in list order, touching only cards that move."""
        for index, card in enumerate(cards):
            if card.position != index:
                card.position = index
                card.updated_at = now

    def list(self, workspace_id):
        with unit_of_work(self.db, "list kanban cards"):
            workspace = self.registry.get(workspace_id)
            workspace.last_active_at = self.clock()
            query = self.db.select(KanbanCard).filter_by(workspace_id=workspace.id)
            cards = self.db.session.execute(query).scalars().all()
            cards = sorted(cards, key=lambda c: (_COLUMN_ORDER.get(c.column, len(COLUMNS)), c.column, c.position))
        return cards

    def get(self, card_id, workspace_id):
        with unit_of_work(self.db, "read kanban card"):
            return self.gate.fetch(KanbanCard, card_id, workspace_id, "Kanban card")

    def create(self, workspace_id, title, column='todo'):
        title = require_text('title', title, 250)
        column = require_choice('column', column, COLUMNS, 30)

        with unit_of_work(self.db, "create kanban card"):
            workspace = self.registry.get(workspace_id)
            now = self.clock()
            # Locking the column keeps concurrent appends from sharing a slot
            existing = self._column_cards(workspace.id, column)
            card = KanbanCard(
                workspace_id=workspace.id,
                title=title,
                column=column,
                position=len(existing),
                created_at=now,
                updated_at=now,
            )
            self.db.session.add(card)
            workspace.last_active_at = now
        return card

    def update(self, card_id, workspace_id, title, column):
        """Rename a card and/or relabel its column.

        Within the same column the position is kept. A card relabelled into a
        different column leaves its old column compacted and is appended to
        the end of the new one.
        """
        title = require_text('title', title, 250)
        column = require_choice('column', column, COLUMNS, 30)

        with unit_of_work(self.db, "update kanban card"):
            card = self.gate.fetch(KanbanCard, card_id, workspace_id, "Kanban card", lock=True)
            now = self.clock()

            if column != card.column:
                self._reindex(self._column_cards(card.workspace_id, card.column, exclude_id=card.id), now)
                card.position = len(self._column_cards(card.workspace_id, column, exclude_id=card.id))
                card.column = column

            card.title = title
            card.updated_at = now
            self.registry.touch(workspace_id)
        return card

    def move(self, card_id, workspace_id, target_column, target_position):
        target_column = require_choice('column', target_column, COLUMNS, 30)
        if isinstance(target_position, bool) or not isinstance(target_position, int):
            raise ValidationError('position', "position must be an integer.")

        with unit_of_work(self.db, "move kanban card"):
            card = self.gate.fetch(KanbanCard, card_id, workspace_id, "Kanban card", lock=True)
            now = self.clock()
            source_column = card.column

            if source_column != target_column:
                # Close the gap left in the source column
                self._reindex(self._column_cards(card.workspace_id, source_column, exclude_id=card.id), now)

            # The moved card is excluded here, so a same-column move is a single
            # remove-and-reinsert and never counts the card twice.
            target = list(self._column_cards(card.workspace_id, target_column, exclude_id=card.id))
            index = _clamp(target_position, 0, len(target))
            target.insert(index, card)

            if source_column != target_column:
                card.column = target_column
                card.updated_at = now
            self._reindex(target, now)

            self.registry.touch(workspace_id)
            logger.debug("Moving card %s to %s[%s]", card.id, card.column, card.position)
        return card

    def delete(self, card_id, workspace_id):
        with unit_of_work(self.db, "delete kanban card"):
            card = self.gate.fetch(KanbanCard, card_id, workspace_id, "Kanban card", lock=True)
            remaining = self._column_cards(card.workspace_id, card.column, exclude_id=card.id)
            self.db.session.delete(card)
            self._reindex(remaining, self.clock())
            self.registry.touch(workspace_id)
