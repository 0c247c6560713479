from flask import Blueprint, request, jsonify

from ..services.conversations import inbox_rows, mark_conversation_read, unread_count
from ..services.query import descending, text_search
from ..services.snapshot import save_entities
from .context import paged, scoped_view

messages_bp = Blueprint('messages', __name__)


@messages_bp.route('/messages', methods=['GET'])
def list_conversations():
    view, _ = scoped_view()
    s = view.store
    rows = inbox_rows(s.conversations.values(), view.user_id, s.properties, s.units)
    predicates = [text_search(request.args.get('search'), 'counterpart_name', 'property_name', 'last_message')]
    total_unread = sum(r['unread_count'] for r in rows)
    return paged(rows, predicates, descending('last_message_time'), extra={'unread_total': total_unread})


@messages_bp.route('/messages/<id>', methods=['GET'])
def get_conversation(id):
    view, _ = scoped_view()
    conversation = view.store.conversations.get(id)
    if not conversation:
        return jsonify({'error': 'Conversation not found'}), 404
    data = conversation.to_dict()
    data['unread_count'] = unread_count(conversation, view.user_id)
    return jsonify(data), 200


@messages_bp.route('/messages/<id>/read', methods=['POST'])
def read_conversation(id):
    view, _ = scoped_view()
    conversation = view.store.conversations.get(id)
    if not conversation:
        return jsonify({'error': 'Conversation not found'}), 404
    conversation = mark_conversation_read(conversation, view.user_id)
    save_entities([conversation])
    return jsonify({'id': conversation.id, 'unread_count': unread_count(conversation, view.user_id)}), 200
