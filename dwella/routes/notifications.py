from datetime import datetime

from flask import Blueprint, request, jsonify

from ..entities import Notification, NotificationType
from ..services.query import descending
from ..services.snapshot import load_snapshot, persist_notification_reads
from .context import acting_context, notification_machine, paged

notifications_bp = Blueprint('notifications', __name__)


def _session():
    """The caller's state machine, synced with whatever the server holds for them."""
    context = acting_context()
    store = load_snapshot()
    machine = notification_machine(store, context)
    machine.receive_all(n for n in store.notifications.values() if n.recipient_id == context.user_id)
    return context, machine


def _ids():
    data = request.json or {}
    ids = data.get('ids')
    if not isinstance(ids, list):
        return None
    return [str(i) for i in ids]


def _state(machine, **extra):
    body = {'unread_count': machine.unread_count}
    body.update(extra)
    return jsonify(body), 200


@notifications_bp.route('/notifications', methods=['GET'])
def list_notifications():
    _, machine = _session()
    rows = [n.to_dict() for n in machine.notifications()]
    preview = [n.to_dict() for n in machine.latest()]
    return paged(rows, sort=descending('time'), extra={'unread_count': machine.unread_count, 'preview': preview})


@notifications_bp.route('/notifications/receive', methods=['POST'])
def receive_notification():
    data = request.json
    if not data or not data.get('api_id') or not data.get('title'):
        return jsonify({'error': 'api_id and title are required'}), 400
    context, machine = _session()
    try:
        # the local id always follows the api id; clients never pick row ids
        notification = Notification(
            id=str(data['api_id']),
            api_id=str(data['api_id']),
            type=NotificationType(data.get('type', 'other')),
            title=data['title'],
            description=data.get('description', ''),
            time=datetime.fromisoformat(data['time']) if data.get('time') else None,
            is_read=bool(data.get('is_read', False)),
            recipient_id=context.user_id,
        )
    except ValueError as exc:
        return jsonify({'error': str(exc)}), 400
    is_new = machine.receive(notification)
    return _state(machine, new=is_new)


@notifications_bp.route('/notifications/mark-read', methods=['POST'])
def mark_read():
    ids = _ids()
    if ids is None:
        return jsonify({'error': 'ids must be a list'}), 400
    _, machine = _session()
    return _state(machine, changed=machine.mark_read(ids))


@notifications_bp.route('/notifications/mark-all-read', methods=['POST'])
def mark_all_read():
    _, machine = _session()
    return _state(machine, changed=machine.mark_all_read())


@notifications_bp.route('/notifications/unread-count', methods=['POST'])
def reconcile_count():
    data = request.json or {}
    count = data.get('count')
    if not isinstance(count, int) or isinstance(count, bool) or count < 0:
        return jsonify({'error': 'count must be a non-negative integer'}), 400
    _, machine = _session()
    machine.reconcile_unread_count(count)
    return _state(machine)


@notifications_bp.route('/notifications/confirm', methods=['POST'])
def confirm_reads():
    """The client's mark-read request went through: store the read flags."""
    ids = _ids()
    if ids is None:
        return jsonify({'error': 'ids must be a list'}), 400
    context, machine = _session()
    confirmed = machine.confirm(ids)
    persisted = persist_notification_reads(context.user_id, confirmed)
    return _state(machine, confirmed=confirmed, persisted=persisted)


@notifications_bp.route('/notifications/rollback', methods=['POST'])
def rollback_reads():
    ids = _ids()
    if ids is None:
        return jsonify({'error': 'ids must be a list'}), 400
    _, machine = _session()
    return _state(machine, restored=machine.rollback(ids))
