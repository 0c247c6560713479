# dwella/services/snapshot.py
"""
Snapshot provider: reads the database into one immutable EntityStore.

Views never query the database themselves. A request loads a snapshot,
computes on it, and (for the few write endpoints) saves back only the
entities a mutation produced.
"""
import dataclasses
import enum
import logging

from .. import db
from ..entities import (
    Conversation,
    Document,
    EntityStore,
    Landlord,
    MaintenanceRequest,
    Manager,
    Notification,
    PaymentRecord,
    Property,
    Tenant,
    Unit,
)
from ..models import (
    ConversationRow,
    DocumentRow,
    LandlordRow,
    MaintenanceRow,
    ManagerRow,
    MessageRow,
    NotificationRow,
    PaymentRow,
    PropertyRow,
    TenantRow,
    UnitRow,
)
from .relations import validate_integrity

logger = logging.getLogger(__name__)

ROWS = {
    Landlord: LandlordRow,
    Property: PropertyRow,
    Unit: UnitRow,
    Tenant: TenantRow,
    Manager: ManagerRow,
    PaymentRecord: PaymentRow,
    MaintenanceRequest: MaintenanceRow,
    Document: DocumentRow,
    Conversation: ConversationRow,
    Notification: NotificationRow,
}


def _load(row_class):
    return [row.to_entity() for row in db.session.execute(
        db.select(row_class).order_by(row_class.id)
    ).scalars()]


def load_snapshot(validate=True):
    """Materializes every table into an EntityStore, checked for dangling references."""
    store = EntityStore.build(
        landlords=_load(LandlordRow),
        properties=_load(PropertyRow),
        units=_load(UnitRow),
        tenants=_load(TenantRow),
        managers=_load(ManagerRow),
        payments=_load(PaymentRow),
        maintenance_requests=_load(MaintenanceRow),
        documents=_load(DocumentRow),
        conversations=_load(ConversationRow),
        notifications=_load(NotificationRow),
    )
    logger.debug("loaded snapshot %s", store.counts())
    if validate:
        validate_integrity(store)
    return store


def _column_value(value):
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(getattr(v, 'value', v) for v in value)
    return value


def save_entity(entity):
    """Inserts or updates the row behind `entity`. The caller commits."""
    row_class = ROWS[type(entity)]
    row = db.session.get(row_class, entity.id)
    if row is None:
        row = row_class(id=entity.id)
        db.session.add(row)

    for f in dataclasses.fields(entity):
        if f.name in ('id', 'assigned_property_ids', 'messages'):
            continue
        setattr(row, f.name, _column_value(getattr(entity, f.name)))

    if isinstance(entity, Manager):
        row.assigned_properties = [
            db.session.get(PropertyRow, pid) for pid in sorted(entity.assigned_property_ids)
        ]
    elif isinstance(entity, Conversation):
        existing = {m.id: m for m in row.messages}
        for message in entity.messages:
            message_row = existing.get(message.id)
            if message_row is None:
                message_row = MessageRow(id=message.id, conversation_id=entity.id)
                db.session.add(message_row)
            message_row.sender_id = message.sender_id
            message_row.text = message.text
            message_row.timestamp = message.timestamp
            message_row.is_read = message.is_read
    return row


def save_entities(entities):
    rows = [save_entity(e) for e in entities]
    db.session.commit()
    logger.info("saved %d entities", len(rows))
    return rows


def persist_notification_reads(recipient_id, api_ids):
    """
    Sets is_read on the recipient's own notification rows, matched by api_id.

    Nothing else on the row changes, and ids the recipient does not own are
    ignored. Returns the api ids actually stored as read.
    """
    if not api_ids:
        return []
    rows = db.session.execute(
        db.select(NotificationRow).where(
            NotificationRow.recipient_id == recipient_id,
            NotificationRow.api_id.in_(list(api_ids)),
        ).order_by(NotificationRow.id)
    ).scalars().all()
    for row in rows:
        row.is_read = True
    db.session.commit()
    logger.info("persisted %d notification reads for %s", len(rows), recipient_id)
    return [row.api_id for row in rows]
