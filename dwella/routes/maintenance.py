import uuid
from datetime import date

from flask import Blueprint, request, jsonify

from ..entities import MaintenanceRequest, Permission, Priority, Role
from ..services.mutations import open_maintenance_request, transition_maintenance
from ..services.query import MAINTENANCE_SORTS, field_equals, text_search
from ..services.relations import maintenance_rows
from ..services.snapshot import save_entities
from ..services.stats import maintenance_status_counts
from .context import comparator, paged, scoped_view

maintenance_bp = Blueprint('maintenance', __name__)


def _can_manage(view):
    if view.role == Role.LANDLORD:
        return True
    if view.role == Role.MANAGER:
        return any(Permission.MAINTENANCE in m.permissions for m in view.store.managers.values())
    return False


@maintenance_bp.route('/maintenance', methods=['GET'])
def list_requests():
    view, _ = scoped_view()
    predicates = [text_search(
        request.args.get('search'), 'reference', 'property_name', 'unit_label', 'tenant_name', 'type', 'sub_type',
    )]
    for arg, name in (('priority', 'priority'), ('category', 'type'), ('status', 'status')):
        if request.args.get(arg):
            predicates.append(field_equals(name, request.args[arg]))
    counts = maintenance_status_counts(view.store.maintenance_requests.values())
    return paged(
        maintenance_rows(view.store), predicates, comparator(MAINTENANCE_SORTS, 'newest'),
        extra={'counts': counts},
    )


@maintenance_bp.route('/maintenance', methods=['POST'])
def create_request():
    data = request.json
    if not data or not data.get('unit_id') or not data.get('type'):
        return jsonify({'error': 'unit_id and type are required'}), 400
    view, store = scoped_view()
    unit = view.store.units.get(data['unit_id'])
    if not unit:
        return jsonify({'error': 'Unit not found'}), 404
    try:
        priority = Priority(data.get('priority', 'medium'))
    except ValueError:
        return jsonify({'error': 'priority must be low, medium or high'}), 400

    tenant_id = view.user_id if view.role == Role.TENANT else unit.tenant_id
    reference = f"MNT-{len(store.maintenance_requests) + 1:03d}"
    new_request = MaintenanceRequest(
        id=f"mnt-{uuid.uuid4().hex[:12]}",
        property_id=unit.property_id,
        unit_id=unit.id,
        tenant_id=tenant_id,
        type=data['type'],
        sub_type=data.get('sub_type', ''),
        priority=priority,
        reported_date=date.today(),
        additional_detail=data.get('additional_detail'),
        reference=reference,
    )
    updated = open_maintenance_request(store, new_request)
    save_entities([updated.maintenance_requests[new_request.id]])
    return jsonify(maintenance_rows(updated, [new_request])[0]), 201


@maintenance_bp.route('/maintenance/<id>/status', methods=['POST'])
def update_status(id):
    data = request.json
    if not data or not data.get('status'):
        return jsonify({'error': 'status is required'}), 400
    view, store = scoped_view()
    if id not in view.store.maintenance_requests:
        return jsonify({'error': 'Maintenance request not found'}), 404
    if not _can_manage(view):
        return jsonify({'error': 'Not allowed to update maintenance requests'}), 403
    try:
        updated = transition_maintenance(store, id, data['status'])
    except ValueError:
        return jsonify({'error': 'status must be new, in_progress or resolved'}), 400
    saved = updated.maintenance_requests[id]
    save_entities([saved])
    return jsonify(maintenance_rows(updated, [saved])[0]), 200
