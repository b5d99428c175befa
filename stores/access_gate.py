from errors import NotAuthorized
from stores.common import parse_workspace_id


class AccessGate:
    """Ownership check between a row's workspace and the caller's workspace.

    A missing row and a row owned by another workspace fail identically so
    that workspace ids cannot be used to probe for rows elsewhere.
    """

    def __init__(self, db):
        self.db = db

    def authorize(self, entity, caller_workspace_id, label="Item"):
        caller = parse_workspace_id(caller_workspace_id)
        if entity is None or caller is None or entity.workspace_id != caller:
            raise NotAuthorized(f"{label} not found.")
        return entity

    def fetch(self, model, entity_id, caller_workspace_id, label="Item", lock=False):
        query = self.db.select(model).filter_by(id=entity_id)
        if lock:
            query = query.with_for_update()
        entity = self.db.session.execute(query).scalar_one_or_none()
        return self.authorize(entity, caller_workspace_id, label)
