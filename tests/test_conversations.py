# tests/test_conversations.py
from dwella.services.conversations import inbox_rows, last_message, mark_conversation_read, unread_count


def test_unread_count_ignores_own_messages(store):
    conversation = store.conversations['conv-1']
    # msg-2 is unread but was sent by the landlord themselves
    assert unread_count(conversation, 'landlord-1') == 2


def test_mark_conversation_read(store):
    conversation = store.conversations['conv-1']
    read = mark_conversation_read(conversation, 'landlord-1')
    assert unread_count(read, 'landlord-1') == 0
    # own outgoing message keeps its state; the input conversation is untouched
    assert read.messages[1].is_read is False
    assert unread_count(conversation, 'landlord-1') == 2


def test_empty_conversation(store):
    conversation = store.conversations['conv-3']
    assert last_message(conversation) is None
    assert unread_count(conversation, 'landlord-2') == 0


def test_inbox_rows(store):
    rows = inbox_rows([store.conversations['conv-1']], 'landlord-1', store.properties, store.units)
    assert rows == [{
        'id': 'conv-1',
        'counterpart_id': 'tenant-1',
        'counterpart_name': 'Ada Emmanuel',
        'counterpart_role': 'tenant',
        'property_name': 'Harmony Court',
        'unit_label': 'A101',
        'last_message': 'Thanks',
        'last_message_time': '2025-12-12T09:40:00',
        'unread_count': 2,
    }]
