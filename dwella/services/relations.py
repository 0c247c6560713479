# dwella/services/relations.py
"""
Relationship resolver: follows foreign keys between entities in one snapshot.

A missing target is never skipped. It raises DanglingReferenceError so a
corrupt snapshot fails loudly instead of rendering a view with holes in it.
"""
import logging

from ..entities import (
    Conversation,
    Document,
    Landlord,
    MaintenanceRequest,
    Manager,
    PaymentRecord,
    PaymentStatus,
    Property,
    Tenant,
    Unit,
    UnitStatus,
)
from ..errors import DanglingReferenceError, OutsidePortfolioError
from .stats import occupancy_percent

logger = logging.getLogger(__name__)


def _dangling(source, field, target_id):
    err = DanglingReferenceError(type(source).__name__, source.id, field, target_id)
    logger.error("integrity violation: %s", err)
    return err


def _one(store, source, field, target_type):
    target_id = getattr(source, field)
    if target_id is None:
        return []
    target = store.collection(target_type).get(target_id)
    if target is None:
        raise _dangling(source, field, target_id)
    return [target]


def _where(store, target_type, field, value):
    return [e for e in store.collection(target_type).values() if getattr(e, field) == value]


def _unit_tenant(store, unit):
    tenants = _one(store, unit, 'tenant_id', Tenant)
    for tenant in tenants:
        if tenant.unit_id != unit.id:
            raise _dangling(unit, 'tenant_id', tenant.id)
    return tenants


def _tenant_unit(store, tenant):
    units = _one(store, tenant, 'unit_id', Unit)
    for unit in units:
        if unit.tenant_id != tenant.id:
            raise _dangling(tenant, 'unit_id', unit.id)
    return units


def _property_tenants(store, prop):
    # through the units, so every tenant returned is linked both ways
    tenants = []
    for unit in _where(store, Unit, 'property_id', prop.id):
        tenants.extend(_unit_tenant(store, unit))
    return tenants


def _manager_properties(store, manager):
    out = []
    for property_id in sorted(manager.assigned_property_ids):
        prop = store.properties.get(property_id)
        if prop is None:
            raise _dangling(manager, 'assigned_property_ids', property_id)
        out.append(prop)
    return out


_RESOLVERS = {
    (Landlord, Property): lambda s, e: _where(s, Property, 'owner_id', e.id),
    (Landlord, Manager): lambda s, e: _where(s, Manager, 'landlord_id', e.id),

    (Property, Landlord): lambda s, e: _one(s, e, 'owner_id', Landlord),
    (Property, Unit): lambda s, e: _where(s, Unit, 'property_id', e.id),
    (Property, Tenant): _property_tenants,
    (Property, PaymentRecord): lambda s, e: _where(s, PaymentRecord, 'property_id', e.id),
    (Property, MaintenanceRequest): lambda s, e: _where(s, MaintenanceRequest, 'property_id', e.id),
    (Property, Document): lambda s, e: _where(s, Document, 'property_id', e.id),
    (Property, Manager): lambda s, e: [m for m in s.managers.values() if e.id in m.assigned_property_ids],

    (Unit, Property): lambda s, e: _one(s, e, 'property_id', Property),
    (Unit, Tenant): _unit_tenant,
    (Unit, PaymentRecord): lambda s, e: _where(s, PaymentRecord, 'unit_id', e.id),
    (Unit, MaintenanceRequest): lambda s, e: _where(s, MaintenanceRequest, 'unit_id', e.id),

    (Tenant, Property): lambda s, e: _one(s, e, 'property_id', Property),
    (Tenant, Unit): _tenant_unit,
    (Tenant, PaymentRecord): lambda s, e: _where(s, PaymentRecord, 'tenant_id', e.id),
    (Tenant, MaintenanceRequest): lambda s, e: _where(s, MaintenanceRequest, 'tenant_id', e.id),

    (PaymentRecord, Property): lambda s, e: _one(s, e, 'property_id', Property),
    (PaymentRecord, Unit): lambda s, e: _one(s, e, 'unit_id', Unit),
    (PaymentRecord, Tenant): lambda s, e: _one(s, e, 'tenant_id', Tenant),

    (MaintenanceRequest, Property): lambda s, e: _one(s, e, 'property_id', Property),
    (MaintenanceRequest, Unit): lambda s, e: _one(s, e, 'unit_id', Unit),
    (MaintenanceRequest, Tenant): lambda s, e: _one(s, e, 'tenant_id', Tenant),

    (Manager, Landlord): lambda s, e: _one(s, e, 'landlord_id', Landlord),
    (Manager, Property): _manager_properties,

    (Document, Property): lambda s, e: _one(s, e, 'property_id', Property),

    (Conversation, Property): lambda s, e: _one(s, e, 'property_id', Property),
    (Conversation, Unit): lambda s, e: _one(s, e, 'unit_id', Unit),
}


def related_of(store, entity, target_type):
    """
    Returns the entities of `target_type` linked to `entity` by foreign key.

    An empty list means nothing is related. A unit has zero or one tenant; a
    tenant always has exactly one unit.
    """
    resolver = _RESOLVERS.get((type(entity), target_type))
    if resolver is None:
        raise ValueError(
            f"no relation from {type(entity).__name__} to {getattr(target_type, '__name__', target_type)}"
        )
    return resolver(store, entity)


def related_one(store, entity, target_type):
    """The single related entity for a to-one relation, or None."""
    found = related_of(store, entity, target_type)
    return found[0] if found else None


# Foreign keys that must resolve, per entity type: (collection attr, field, target type)
_REQUIRED_LINKS = (
    ('properties', 'owner_id', Landlord),
    ('units', 'property_id', Property),
    ('tenants', 'property_id', Property),
    ('payments', 'property_id', Property),
    ('payments', 'unit_id', Unit),
    ('payments', 'tenant_id', Tenant),
    ('maintenance_requests', 'property_id', Property),
    ('maintenance_requests', 'unit_id', Unit),
    ('maintenance_requests', 'tenant_id', Tenant),
    ('documents', 'property_id', Property),
    ('managers', 'landlord_id', Landlord),
    ('conversations', 'property_id', Property),
    ('conversations', 'unit_id', Unit),
)


def check_manager_portfolio(store, manager):
    """
    Raises OutsidePortfolioError if the manager is assigned anything but its
    landlord's properties. Ids that name no property at all count as outside.
    """
    outside = set()
    for property_id in manager.assigned_property_ids:
        prop = store.properties.get(property_id)
        if prop is None or prop.owner_id != manager.landlord_id:
            outside.add(property_id)
    if outside:
        raise OutsidePortfolioError(manager.landlord_id, outside)


def validate_integrity(store):
    """Walks every foreign key in the snapshot once; raises on the first broken one."""
    for collection, field, target_type in _REQUIRED_LINKS:
        for entity in getattr(store, collection).values():
            _one(store, entity, field, target_type)
    for unit in store.units.values():
        _unit_tenant(store, unit)
    for tenant in store.tenants.values():
        _tenant_unit(store, tenant)
        unit = store.units[tenant.unit_id]
        if unit.property_id != tenant.property_id:
            raise _dangling(tenant, 'property_id', tenant.property_id)
    for manager in store.managers.values():
        _manager_properties(store, manager)
        check_manager_portfolio(store, manager)
    return store


# --- joined rows for list views ---

def property_rows(store, properties=None, with_stats=True):
    """
    Each property with its derived unit count and occupancy percent.

    with_stats=False leaves the derived figures out, for views that only
    hold part of a property's units.
    """
    if properties is None:
        properties = store.properties.values()
    if not with_stats:
        return [p.to_dict() for p in properties]
    units_by_property = {}
    for unit in store.units.values():
        units_by_property.setdefault(unit.property_id, []).append(unit)
    rows = []
    for prop in properties:
        units = units_by_property.get(prop.id, [])
        occupied = sum(1 for u in units if u.status == UnitStatus.OCCUPIED)
        row = prop.to_dict()
        row['unit_count'] = len(units)
        row['occupied_units'] = occupied
        row['occupancy_percent'] = occupancy_percent(occupied, len(units))
        rows.append(row)
    return rows


def unit_rows(store, units=None):
    if units is None:
        units = store.units.values()
    rows = []
    for unit in units:
        prop = related_one(store, unit, Property)
        tenant = related_one(store, unit, Tenant)
        row = unit.to_dict()
        row['property_name'] = prop.name
        row['tenant_name'] = tenant.name if tenant else None
        rows.append(row)
    return rows


def tenant_rows(store, tenants=None):
    if tenants is None:
        tenants = store.tenants.values()
    rows = []
    for tenant in tenants:
        row = tenant.to_dict()
        row['unit_label'] = related_one(store, tenant, Unit).label
        row['property_name'] = related_one(store, tenant, Property).name
        rows.append(row)
    return rows


def payment_rows(store, payments=None):
    if payments is None:
        payments = store.payments.values()
    rows = []
    for payment in payments:
        row = payment.to_dict()
        row['property_name'] = related_one(store, payment, Property).name
        row['unit_label'] = related_one(store, payment, Unit).label
        row['tenant_name'] = related_one(store, payment, Tenant).name
        rows.append(row)
    return rows


def maintenance_rows(store, requests=None):
    if requests is None:
        requests = store.maintenance_requests.values()
    rows = []
    for request in requests:
        tenant = related_one(store, request, Tenant)
        row = request.to_dict()
        row['property_name'] = related_one(store, request, Property).name
        row['unit_label'] = related_one(store, request, Unit).label
        row['tenant_name'] = tenant.name if tenant else None
        rows.append(row)
    return rows


def rent_rows(store, units=None):
    """Rent page: one row per occupied unit with its tenant and rent state."""
    if units is None:
        units = store.units.values()
    rows = []
    for unit in units:
        tenant = related_one(store, unit, Tenant)
        if tenant is None:
            continue
        prop = related_one(store, unit, Property)
        successes = [
            p for p in related_of(store, unit, PaymentRecord)
            if p.status == PaymentStatus.SUCCESS and p.tenant_id == tenant.id
        ]
        last = max((p.date for p in successes), default=None)
        rows.append({
            'unit_id': unit.id,
            'unit_label': unit.label,
            'property_id': prop.id,
            'property_name': prop.name,
            'tenant_id': tenant.id,
            'tenant_name': tenant.name,
            'rent_amount': unit.monthly_rent,
            'due_date': unit.next_due_date.isoformat() if unit.next_due_date else None,
            'last_payment': last.isoformat() if last else None,
            'rent_status': unit.rent_status.value,
        })
    return rows


def landlord_accounts(store, landlords=None):
    """Landlord cards for the manager's landlord picker."""
    if landlords is None:
        landlords = store.landlords.values()
    accounts = []
    for landlord in landlords:
        props = related_of(store, landlord, Property)
        total_units = sum(len(related_of(store, p, Unit)) for p in props)
        accounts.append({
            'id': landlord.id,
            'name': landlord.name,
            'email': landlord.email,
            'properties': [{'id': p.id, 'name': p.name} for p in props],
            'total_units': total_units,
        })
    return accounts
