# dwella/services/conversations.py
import dataclasses


def unread_count(conversation, user_id):
    """Incoming messages the user has not read. Never stored, always counted."""
    return sum(1 for m in conversation.messages if not m.is_read and m.sender_id != user_id)


def last_message(conversation):
    if not conversation.messages:
        return None
    return conversation.messages[-1]


def mark_conversation_read(conversation, user_id):
    messages = tuple(
        m if m.is_read or m.sender_id == user_id else dataclasses.replace(m, is_read=True)
        for m in conversation.messages
    )
    return dataclasses.replace(conversation, messages=messages)


def inbox_rows(conversations, user_id, properties=None, units=None):
    """Left-hand list of the messages screen."""
    properties = properties or {}
    units = units or {}
    rows = []
    for conv in conversations:
        last = last_message(conv)
        prop = properties.get(conv.property_id) if conv.property_id else None
        unit = units.get(conv.unit_id) if conv.unit_id else None
        rows.append({
            'id': conv.id,
            'counterpart_id': conv.counterpart_id,
            'counterpart_name': conv.counterpart_name,
            'counterpart_role': conv.counterpart_role.value,
            'property_name': prop.name if prop else None,
            'unit_label': unit.label if unit else None,
            'last_message': last.text if last else None,
            'last_message_time': last.timestamp.isoformat() if last and last.timestamp else None,
            'unread_count': unread_count(conv, user_id),
        })
    return rows
