# dwella/services/scoping.py
"""
Role-scoping projector: narrows a snapshot to what the acting user may see.

scope() is a pure function of (store, context). It keeps no cache, so a
manager switching landlords simply gets a different answer on the next call.
"""
import dataclasses
import logging
from dataclasses import dataclass
from typing import Optional

from ..entities import EntityStore, ManagerStatus, Property, Role, Unit
from ..errors import NoLandlordSelectedError
from .relations import related_one

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScopedView:
    role: Role
    user_id: str
    landlord_id: Optional[str]
    store: EntityStore


def _portfolio(store, landlord_id, property_ids=None):
    """Everything joined from the landlord's properties (optionally a subset of them)."""
    properties = [
        p for p in store.properties.values()
        if p.owner_id == landlord_id and (property_ids is None or p.id in property_ids)
    ]
    ids = {p.id for p in properties}
    units = [u for u in store.units.values() if u.property_id in ids]
    return {
        'landlords': [l for l in store.landlords.values() if l.id == landlord_id],
        'properties': properties,
        'units': units,
        'tenants': [t for t in store.tenants.values() if t.property_id in ids],
        'payments': [p for p in store.payments.values() if p.property_id in ids],
        'maintenance_requests': [r for r in store.maintenance_requests.values() if r.property_id in ids],
        'documents': [d for d in store.documents.values() if d.property_id in ids],
    }


def _inbox(store, user_id):
    return {
        'conversations': [c for c in store.conversations.values() if c.owner_id == user_id],
        'notifications': [n for n in store.notifications.values() if n.recipient_id == user_id],
    }


def _landlord_view(store, context):
    collections = _portfolio(store, context.user_id)
    collections['managers'] = [m for m in store.managers.values() if m.landlord_id == context.user_id]
    collections.update(_inbox(store, context.user_id))
    return ScopedView(Role.LANDLORD, context.user_id, context.user_id, EntityStore.build(**collections))


def manager_record(store, user_id, landlord_id):
    """The manager row linking this manager identity to this landlord, if any."""
    for manager in store.managers.values():
        if manager.user_id == user_id and manager.landlord_id == landlord_id:
            return manager
    return None


def _manager_view(store, context):
    landlord_id = context.selected_landlord_id
    if not landlord_id:
        raise NoLandlordSelectedError(context.user_id)

    record = manager_record(store, context.user_id, landlord_id)
    if record is None or record.status != ManagerStatus.ACTIVE:
        logger.warning("manager %s has no active access to landlord %s", context.user_id, landlord_id)
        allowed = frozenset()
    elif record.restricted:
        allowed = record.assigned_property_ids
    else:
        allowed = None

    collections = _portfolio(store, landlord_id, allowed)
    collections['managers'] = [record] if record is not None else []
    collections.update(_inbox(store, context.user_id))
    return ScopedView(Role.MANAGER, context.user_id, landlord_id, EntityStore.build(**collections))


def _public_property(prop):
    # tenants see the listing, not the owner's figures
    return dataclasses.replace(prop, owner_id=None, monthly_rent=None, next_due_date=None)


def _tenant_view(store, context):
    tenant = store.tenants.get(context.user_id)
    collections = _inbox(store, context.user_id)
    if tenant is None:
        logger.warning("tenant %s not found in snapshot", context.user_id)
        return ScopedView(Role.TENANT, context.user_id, None, EntityStore.build(**collections))

    unit = related_one(store, tenant, Unit)
    prop = related_one(store, unit, Property)
    collections.update({
        'properties': [_public_property(prop)],
        'units': [unit],
        'tenants': [tenant],
        'payments': [p for p in store.payments.values() if p.tenant_id == tenant.id],
        'maintenance_requests': [r for r in store.maintenance_requests.values() if r.tenant_id == tenant.id],
    })
    return ScopedView(Role.TENANT, context.user_id, None, EntityStore.build(**collections))


_PROJECTORS = {
    Role.LANDLORD: _landlord_view,
    Role.MANAGER: _manager_view,
    Role.TENANT: _tenant_view,
}


def scope(store, context):
    role = Role(context.role)
    return _PROJECTORS[role](store, context)


def is_known_user(store, context):
    """True if the snapshot holds an account for this role and user id."""
    role = Role(context.role)
    if role == Role.LANDLORD:
        return context.user_id in store.landlords
    if role == Role.TENANT:
        return context.user_id in store.tenants
    return any(m.user_id == context.user_id for m in store.managers.values())


def available_landlords(store, manager_user_id):
    """Landlords this manager identity holds an active manager record for."""
    landlord_ids = {
        m.landlord_id for m in store.managers.values()
        if m.user_id == manager_user_id and m.status == ManagerStatus.ACTIVE
    }
    return [l for l in store.landlords.values() if l.id in landlord_ids]
