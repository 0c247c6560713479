# dwella/services/mutations.py
"""
Administrative actions as pure store transitions.

Each function validates against the given store and returns a new store;
the input store is left as it was. Nothing is ever deleted: deactivation
is a status change, payments and maintenance requests are append-only.
"""
import dataclasses
import logging
from datetime import date

from ..entities import (
    Landlord,
    MaintenanceRequest,
    Manager,
    ManagerStatus,
    Property,
    RentStatus,
    RequestStatus,
    Tenant,
    Unit,
    UnitStatus,
)
from ..errors import (
    DanglingReferenceError,
    DuplicateEntityError,
    InvalidTransitionError,
)
from .relations import check_manager_portfolio

logger = logging.getLogger(__name__)


def _require(store, entity_type, entity_id, source, field):
    target = store.collection(entity_type).get(entity_id)
    if target is None:
        raise DanglingReferenceError(type(source).__name__, source.id, field, entity_id)
    return target


def _must_get(store, entity_type, entity_id):
    target = store.collection(entity_type).get(entity_id)
    if target is None:
        raise DanglingReferenceError(entity_type.__name__, entity_id, 'id', entity_id)
    return target


def _insert(store, entity):
    if entity.id in store.collection(type(entity)):
        raise DuplicateEntityError(type(entity).__name__, entity.id)
    logger.debug("adding %s %s", type(entity).__name__, entity.id)
    return store.with_entity(entity)


def add_property(store, prop):
    _require(store, Landlord, prop.owner_id, prop, 'owner_id')
    return _insert(store, prop)


def add_unit(store, unit):
    _require(store, Property, unit.property_id, unit, 'property_id')
    for other in store.units.values():
        if other.property_id == unit.property_id and other.label.casefold() == unit.label.casefold():
            raise DuplicateEntityError('Unit', f"{unit.property_id}/{unit.label}")
    if unit.tenant_id is not None or unit.status == UnitStatus.OCCUPIED:
        raise InvalidTransitionError("new units start without a tenant; use assign_tenant")
    return _insert(store, unit)


def assign_tenant(store, tenant):
    """Moves a tenant into a vacant unit, linking both sides."""
    unit = _require(store, Unit, tenant.unit_id, tenant, 'unit_id')
    if unit.property_id != tenant.property_id:
        raise InvalidTransitionError(
            f"unit {unit.id} belongs to property {unit.property_id}, not {tenant.property_id}"
        )
    if unit.tenant_id is not None or unit.status != UnitStatus.VACANT:
        raise InvalidTransitionError(f"unit {unit.label} is not vacant ({unit.status.value})")
    store = _insert(store, tenant)
    return store.with_entity(
        dataclasses.replace(unit, tenant_id=tenant.id, status=UnitStatus.OCCUPIED)
    )


def set_unit_status(store, unit_id, status):
    unit = _must_get(store, Unit, unit_id)
    status = UnitStatus(status)
    if status == unit.status:
        return store
    if status == UnitStatus.OCCUPIED:
        raise InvalidTransitionError("a unit becomes occupied only by assigning a tenant")
    if unit.tenant_id is not None:
        raise InvalidTransitionError(f"unit {unit.label} has a tenant and cannot become {status.value}")
    return store.with_entity(dataclasses.replace(unit, status=status))


def set_rent_status(store, unit_id, rent_status):
    unit = _must_get(store, Unit, unit_id)
    return store.with_entity(dataclasses.replace(unit, rent_status=RentStatus(rent_status)))


def invite_manager(store, manager):
    _require(store, Landlord, manager.landlord_id, manager, 'landlord_id')
    check_manager_portfolio(store, manager)
    return _insert(store, manager)


_MANAGER_EDITABLE = {'name', 'email', 'phone', 'assigned_property_ids', 'permissions', 'restricted'}


def update_manager(store, manager_id, **changes):
    manager = _must_get(store, Manager, manager_id)
    unknown = set(changes) - _MANAGER_EDITABLE
    if unknown:
        raise ValueError(f"cannot edit manager fields {sorted(unknown)}")
    if 'assigned_property_ids' in changes:
        changes['assigned_property_ids'] = frozenset(changes['assigned_property_ids'])
    if 'permissions' in changes:
        changes['permissions'] = frozenset(changes['permissions'])
    updated = dataclasses.replace(manager, **changes)
    check_manager_portfolio(store, updated)
    return store.with_entity(updated)


def set_manager_status(store, manager_id, status):
    manager = _must_get(store, Manager, manager_id)
    return store.with_entity(dataclasses.replace(manager, status=ManagerStatus(status)))


def record_payment(store, payment):
    _require(store, Property, payment.property_id, payment, 'property_id')
    unit = _require(store, Unit, payment.unit_id, payment, 'unit_id')
    _require(store, Tenant, payment.tenant_id, payment, 'tenant_id')
    if unit.property_id != payment.property_id:
        raise InvalidTransitionError(f"unit {unit.id} is not in property {payment.property_id}")
    if payment.amount <= 0:
        raise ValueError("payment amount must be positive")
    return _insert(store, payment)


def open_maintenance_request(store, request):
    _require(store, Property, request.property_id, request, 'property_id')
    _require(store, Unit, request.unit_id, request, 'unit_id')
    if request.tenant_id is not None:
        _require(store, Tenant, request.tenant_id, request, 'tenant_id')
    if request.status != RequestStatus.NEW:
        raise InvalidTransitionError("maintenance requests open as 'new'")
    return _insert(store, request)


_REQUEST_TRANSITIONS = {
    RequestStatus.NEW: {RequestStatus.IN_PROGRESS, RequestStatus.RESOLVED},
    RequestStatus.IN_PROGRESS: {RequestStatus.RESOLVED},
    RequestStatus.RESOLVED: set(),
}


def transition_maintenance(store, request_id, status, on=None):
    request = _must_get(store, MaintenanceRequest, request_id)
    status = RequestStatus(status)
    if status not in _REQUEST_TRANSITIONS[request.status]:
        raise InvalidTransitionError(
            f"maintenance request {request.id} cannot go from {request.status.value} to {status.value}"
        )
    changes = {'status': status}
    if status == RequestStatus.RESOLVED:
        changes['resolved_date'] = on or date.today()
    logger.info("maintenance %s: %s -> %s", request.id, request.status.value, status.value)
    return store.with_entity(dataclasses.replace(request, **changes))
