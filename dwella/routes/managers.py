import uuid

from flask import Blueprint, request, jsonify

from ..entities import Manager, ManagerStatus, Permission, Property, Role
from ..services.mutations import invite_manager, set_manager_status, update_manager
from ..services.query import ascending, casefolded, field_equals, text_search
from ..services.relations import related_of
from ..services.snapshot import save_entities
from .context import paged, require_role, scoped_view

managers_bp = Blueprint('managers', __name__)


def _manager_row(store, manager):
    row = manager.to_dict()
    row['assigned_properties'] = [
        {'id': p.id, 'name': p.name} for p in related_of(store, manager, Property)
    ]
    return row


def _id_list(values):
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        return None
    return values


def _permissions(values):
    if _id_list(values) is None:
        return None
    try:
        return frozenset(Permission(v) for v in values)
    except ValueError:
        return None


@managers_bp.route('/managers', methods=['GET'])
def list_managers():
    view, _ = scoped_view()
    rows = [_manager_row(view.store, m) for m in view.store.managers.values()]
    predicates = [text_search(request.args.get('search'), 'name', 'email')]
    if request.args.get('status'):
        predicates.append(field_equals('status', request.args['status']))
    return paged(rows, predicates, ascending(casefolded('name')))


@managers_bp.route('/managers', methods=['POST'])
def create_manager():
    """Invites a manager into the acting landlord's portfolio."""
    view, store = scoped_view()
    require_role(view, Role.LANDLORD)
    data = request.json
    if not data or not data.get('name') or not data.get('email'):
        return jsonify({'error': 'name and email are required'}), 400
    permissions = _permissions(data.get('permissions', []))
    if permissions is None:
        return jsonify({'error': 'permissions must be maintenance, chat or payments'}), 400
    assigned = _id_list(data.get('assigned_property_ids', []))
    if assigned is None:
        return jsonify({'error': 'assigned_property_ids must be a list of property ids'}), 400

    manager = Manager(
        id=f"mgr-{uuid.uuid4().hex[:12]}",
        user_id=data.get('user_id') or data['email'].strip().lower(),
        landlord_id=view.user_id,
        name=data['name'].strip(),
        email=data['email'].strip(),
        phone=data.get('phone', ''),
        assigned_property_ids=frozenset(assigned),
        permissions=permissions,
        restricted=bool(data.get('restricted', True)),
    )
    updated = invite_manager(store, manager)
    save_entities([manager])
    return jsonify(_manager_row(updated, manager)), 201


@managers_bp.route('/managers/<id>', methods=['PATCH'])
def edit_manager(id):
    view, store = scoped_view()
    require_role(view, Role.LANDLORD)
    if id not in view.store.managers:
        return jsonify({'error': 'Manager not found'}), 404
    data = dict(request.json or {})
    if 'assigned_property_ids' in data and _id_list(data['assigned_property_ids']) is None:
        return jsonify({'error': 'assigned_property_ids must be a list of property ids'}), 400
    if 'permissions' in data:
        data['permissions'] = _permissions(data['permissions'])
        if data['permissions'] is None:
            return jsonify({'error': 'permissions must be maintenance, chat or payments'}), 400
    try:
        updated = update_manager(store, id, **data)
    except ValueError as exc:
        return jsonify({'error': str(exc)}), 400
    manager = updated.managers[id]
    save_entities([manager])
    return jsonify(_manager_row(updated, manager)), 200


def _set_status(id, status):
    view, store = scoped_view()
    require_role(view, Role.LANDLORD)
    if id not in view.store.managers:
        return jsonify({'error': 'Manager not found'}), 404
    updated = set_manager_status(store, id, status)
    manager = updated.managers[id]
    save_entities([manager])
    return jsonify(_manager_row(updated, manager)), 200


@managers_bp.route('/managers/<id>/activate', methods=['POST'])
def activate_manager(id):
    return _set_status(id, ManagerStatus.ACTIVE)


@managers_bp.route('/managers/<id>/deactivate', methods=['POST'])
def deactivate_manager(id):
    return _set_status(id, ManagerStatus.INACTIVE)
