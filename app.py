import logging
from types import SimpleNamespace

from flask import Blueprint, Flask, current_app, jsonify, request

from config import Config
from errors import NotFound, StorageError, ValidationError
from models import db
from stores.access_gate import AccessGate
from stores.common import parse_workspace_id
from stores.kanban_store import KanbanStore
from stores.note_store import NoteStore
from stores.todo_store import TodoStore
from stores.workspace_registry import WorkspaceRegistry

api = Blueprint('productivity', __name__, url_prefix='/api/productivity')


class BadRequest(Exception):
    pass


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(level=app.config['LOG_LEVEL'])
    app.logger.setLevel(app.config['LOG_LEVEL'])

    db.init_app(app)
    with app.app_context():
        db.create_all()

    registry = WorkspaceRegistry(db)
    gate = AccessGate(db)
    app.extensions['productivity'] = SimpleNamespace(
        workspaces=registry,
        todos=TodoStore(db, registry, gate),
        kanban=KanbanStore(db, registry, gate),
        notes=NoteStore(db, registry, gate),
    )
    app.register_blueprint(api)
    app.logger.info("Productivity API ready on %s", app.config['SQLALCHEMY_DATABASE_URI'])
    return app


def _stores():
    return current_app.extensions['productivity']


def _body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequest("Request body is required.")
    return data


def _check_workspace(workspace_id, data):
    # A body may repeat the workspace id; it must agree with the path.
    given = data.get('workspaceId')
    if given is not None and parse_workspace_id(given) != parse_workspace_id(workspace_id):
        raise BadRequest("Workspace mismatch.")


def _query_workspace():
    return request.args.get('workspaceId')


# --- Errors ---
@api.errorhandler(BadRequest)
def handle_bad_request(e):
    return jsonify({'error': str(e)}), 400


@api.errorhandler(ValidationError)
def handle_validation_error(e):
    return jsonify({'error': e.message, 'field': e.field}), 400


@api.errorhandler(NotFound)
def handle_not_found(e):
    return jsonify({'error': str(e)}), 404


@api.errorhandler(StorageError)
def handle_storage_error(e):
    current_app.logger.error("Storage error: %s", e)
    return jsonify({'error': 'Storage failure.'}), 500


# --- Workspaces ---
@api.route('/workspaces/ensure', methods=['POST'])
def ensure_workspace():
    data = _body()
    workspace = _stores().workspaces.ensure(data.get('workspaceId'), data.get('name'))
    return jsonify(workspace.to_dict())


# --- Todo items ---
@api.route('/workspaces/<workspace_id>/todos', methods=['GET'])
def get_todos(workspace_id):
    items = _stores().todos.list(workspace_id)
    return jsonify([i.to_dict() for i in items])


@api.route('/workspaces/<workspace_id>/todos', methods=['POST'])
def create_todo(workspace_id):
    data = _body()
    _check_workspace(workspace_id, data)
    item = _stores().todos.create(workspace_id, data.get('title'),
                                  data.get('priority', 'medium'), data.get('category'))
    return jsonify(item.to_dict()), 201


@api.route('/todos/<int:item_id>', methods=['PUT'])
def update_todo(item_id):
    data = _body()
    item = _stores().todos.update(item_id, data.get('workspaceId'), data.get('title'),
                                  data.get('priority', 'medium'), data.get('category'))
    return jsonify(item.to_dict())


@api.route('/todos/<int:item_id>/status', methods=['PATCH'])
def update_todo_status(item_id):
    data = _body()
    item = _stores().todos.set_status(item_id, data.get('workspaceId'), data.get('completed', False))
    return jsonify(item.to_dict())


@api.route('/todos/<int:item_id>', methods=['DELETE'])
def delete_todo(item_id):
    _stores().todos.delete(item_id, _query_workspace())
    return '', 204


@api.route('/workspaces/<workspace_id>/todos/clear-completed', methods=['POST'])
def clear_completed_todos(workspace_id):
    deleted = _stores().todos.clear_completed(workspace_id)
    return jsonify({'deleted': deleted})


# --- Kanban ---
@api.route('/workspaces/<workspace_id>/kanban', methods=['GET'])
def get_kanban(workspace_id):
    cards = _stores().kanban.list(workspace_id)
    return jsonify([c.to_dict() for c in cards])


@api.route('/workspaces/<workspace_id>/kanban', methods=['POST'])
def create_card(workspace_id):
    data = _body()
    _check_workspace(workspace_id, data)
    card = _stores().kanban.create(workspace_id, data.get('title'), data.get('column', 'todo'))
    return jsonify(card.to_dict()), 201


@api.route('/kanban/<int:card_id>', methods=['PUT'])
def update_card(card_id):
    data = _body()
    card = _stores().kanban.update(card_id, data.get('workspaceId'), data.get('title'),
                                   data.get('column', 'todo'))
    return jsonify(card.to_dict())


@api.route('/kanban/<int:card_id>/move', methods=['PATCH'])
def move_card(card_id):
    data = _body()
    card = _stores().kanban.move(card_id, data.get('workspaceId'), data.get('column', 'todo'),
                                 data.get('position', 0))
    return jsonify(card.to_dict())


@api.route('/kanban/<int:card_id>', methods=['DELETE'])
def delete_card(card_id):
    _stores().kanban.delete(card_id, _query_workspace())
    return '', 204


# --- Notes ---
@api.route('/workspaces/<workspace_id>/notes', methods=['GET'])
def get_notes(workspace_id):
    notes = _stores().notes.list(workspace_id)
    return jsonify([n.to_dict() for n in notes])


@api.route('/notes/<int:note_id>', methods=['GET'])
def get_note(note_id):
    note = _stores().notes.get(note_id, _query_workspace())
    return jsonify(note.to_dict())


@api.route('/workspaces/<workspace_id>/notes', methods=['POST'])
def create_note(workspace_id):
    data = _body()
    _check_workspace(workspace_id, data)
    note = _stores().notes.save(workspace_id, None, data.get('title'), data.get('content', ''))
    return jsonify(note.to_dict()), 201


@api.route('/notes/<int:note_id>', methods=['PUT'])
def update_note(note_id):
    data = _body()
    notes = _stores().notes
    # PUT never creates; the note must already belong to the workspace
    notes.get(note_id, data.get('workspaceId'))
    note = notes.save(data.get('workspaceId'), note_id, data.get('title'), data.get('content', ''))
    return jsonify(note.to_dict())


@api.route('/notes/<int:note_id>', methods=['DELETE'])
def delete_note(note_id):
    _stores().notes.delete(note_id, _query_workspace())
    return '', 204


if __name__ == '__main__':
    create_app().run(debug=True, host='0.0.0.0', port=5000)
