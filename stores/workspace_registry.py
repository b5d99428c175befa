import logging
import uuid

from errors import NotFound
from models import Workspace, utcnow
from stores.common import optional_text, parse_workspace_id, unit_of_work

logger = logging.getLogger(__name__)


class WorkspaceRegistry:
    def __init__(self, db, clock=utcnow):
        self.db = db
        self.clock = clock

    def _find(self, workspace_id):
        workspace_id = parse_workspace_id(workspace_id)
        if workspace_id is None:
            return None
        return self.db.session.get(Workspace, workspace_id)

    def ensure(self, workspace_id=None, name=None):
        """Return the workspace for workspace_id, creating a fresh one if needed.

        Unknown or malformed ids never fail: the caller simply receives a new
        workspace with a newly generated id.
        """
        name = optional_text('name', name, 80)
        now = self.clock()

        with unit_of_work(self.db, "ensure workspace"):
            workspace = self._find(workspace_id)
            if workspace is not None:
                workspace.last_active_at = now
                if name:
                    workspace.name = name
                return workspace

            workspace = Workspace(id=uuid.uuid4(), name=name, created_at=now, last_active_at=now)
            self.db.session.add(workspace)
        logger.info("Created new productivity workspace %s", workspace.id)
        return workspace

    def get(self, workspace_id):
        # Joins the caller's unit of work.
        workspace = self._find(workspace_id)
        if workspace is None:
            raise NotFound("Workspace not found.")
        return workspace

    def touch(self, workspace_id):
        # Joins the caller's unit of work; the caller commits.
        workspace = self._find(workspace_id)
        if workspace is not None:
            workspace.last_active_at = self.clock()
        return workspace

    def delete(self, workspace_id):
        with unit_of_work(self.db, "delete workspace"):
            self.db.session.delete(self.get(workspace_id))
        logger.info("Deleted productivity workspace %s", workspace_id)
