# tests/test_mutations.py
from datetime import date

import pytest

from dwella.entities import (
    MaintenanceRequest,
    Manager,
    ManagerStatus,
    PaymentRecord,
    Permission,
    Property,
    RentStatus,
    RequestStatus,
    Tenant,
    Unit,
    UnitStatus,
)
from dwella.errors import (
    DanglingReferenceError,
    DuplicateEntityError,
    InvalidTransitionError,
    OutsidePortfolioError,
)
from dwella.services import mutations
from dwella.services.relations import related_of, validate_integrity


# --- Testing properties and units ---

def test_add_property_returns_new_store(store):
    prop = Property('prop-9', 'landlord-2', 'Meadow Park')
    updated = mutations.add_property(store, prop)
    assert 'prop-9' in updated.properties
    assert 'prop-9' not in store.properties


def test_add_property_for_unknown_landlord(store):
    with pytest.raises(DanglingReferenceError):
        mutations.add_property(store, Property('prop-9', 'landlord-404', 'Nowhere'))


def test_duplicate_ids_rejected(store):
    with pytest.raises(DuplicateEntityError):
        mutations.add_property(store, Property('prop-1', 'landlord-1', 'Again'))


def test_unit_labels_unique_within_property(store):
    with pytest.raises(DuplicateEntityError):
        mutations.add_unit(store, Unit('unit-9', 'prop-1', 'a101'))
    # the same label in another property is fine
    updated = mutations.add_unit(store, Unit('unit-9', 'prop-3', 'A101'))
    assert updated.units['unit-9'].status == UnitStatus.VACANT


def test_new_unit_cannot_start_occupied(store):
    with pytest.raises(InvalidTransitionError):
        mutations.add_unit(store, Unit('unit-9', 'prop-1', 'A109', status=UnitStatus.OCCUPIED))


def test_assign_tenant_links_both_sides(store):
    tenant = Tenant('tenant-9', 'prop-1', 'unit-2', 'Chidi Obi')
    updated = mutations.assign_tenant(store, tenant)
    unit = updated.units['unit-2']
    assert unit.tenant_id == 'tenant-9'
    assert unit.status == UnitStatus.OCCUPIED
    assert related_of(updated, unit, Tenant) == [tenant]
    validate_integrity(updated)


@pytest.mark.parametrize("unit_id,property_id", [
    ('unit-1', 'prop-1'),   # already occupied
    ('unit-4', 'prop-2'),   # under maintenance
    ('unit-2', 'prop-2'),   # wrong property
])
def test_assign_tenant_rejected(store, unit_id, property_id):
    with pytest.raises(InvalidTransitionError):
        mutations.assign_tenant(store, Tenant('tenant-9', property_id, unit_id, 'X'))


def test_unit_status_changes(store):
    updated = mutations.set_unit_status(store, 'unit-2', 'maintenance')
    assert updated.units['unit-2'].status == UnitStatus.MAINTENANCE
    with pytest.raises(InvalidTransitionError):
        mutations.set_unit_status(store, 'unit-1', UnitStatus.VACANT)
    with pytest.raises(InvalidTransitionError):
        mutations.set_unit_status(store, 'unit-2', UnitStatus.OCCUPIED)
    assert mutations.set_unit_status(store, 'unit-2', 'vacant') is store


def test_set_rent_status(store):
    updated = mutations.set_rent_status(store, 'unit-3', 'paid')
    assert updated.units['unit-3'].rent_status == RentStatus.PAID


# --- Testing managers ---

def test_invite_manager(store):
    manager = Manager('mgr-9', 'manager-9', 'landlord-1', 'Ibrahim Sani',
                      assigned_property_ids=frozenset({'prop-2'}))
    updated = mutations.invite_manager(store, manager)
    assert updated.managers['mgr-9'].restricted is True


def test_invite_manager_outside_portfolio(store):
    manager = Manager('mgr-9', 'manager-9', 'landlord-1', 'Ibrahim Sani',
                      assigned_property_ids=frozenset({'prop-3'}))
    with pytest.raises(OutsidePortfolioError):
        mutations.invite_manager(store, manager)


def test_invite_manager_with_unknown_property(store):
    manager = Manager('mgr-9', 'manager-9', 'landlord-1', 'Ibrahim Sani',
                      assigned_property_ids=frozenset({'prop-404'}))
    with pytest.raises(OutsidePortfolioError):
        mutations.invite_manager(store, manager)


def test_update_manager(store):
    updated = mutations.update_manager(
        store, 'mgr-1', assigned_property_ids=['prop-1', 'prop-2'], permissions=[Permission.PAYMENTS],
    )
    manager = updated.managers['mgr-1']
    assert manager.assigned_property_ids == frozenset({'prop-1', 'prop-2'})
    assert manager.permissions == frozenset({Permission.PAYMENTS})
    with pytest.raises(OutsidePortfolioError):
        mutations.update_manager(store, 'mgr-1', assigned_property_ids=['prop-3'])
    with pytest.raises(ValueError):
        mutations.update_manager(store, 'mgr-1', landlord_id='landlord-2')


def test_deactivate_manager(store):
    updated = mutations.set_manager_status(store, 'mgr-1', 'inactive')
    assert updated.managers['mgr-1'].status == ManagerStatus.INACTIVE
    assert store.managers['mgr-1'].status == ManagerStatus.ACTIVE


# --- Testing payments and maintenance ---

def test_record_payment(store):
    payment = PaymentRecord('pay-9', 'TXN-9', 'prop-1', 'unit-1', 'tenant-1', 12000000, date(2026, 1, 5))
    updated = mutations.record_payment(store, payment)
    assert len(updated.payments) == len(store.payments) + 1


@pytest.mark.parametrize("unit_id,amount,error", [
    ('unit-5', 100, InvalidTransitionError),
    ('unit-1', 0, ValueError),
    ('unit-404', 100, DanglingReferenceError),
])
def test_record_payment_rejected(store, unit_id, amount, error):
    payment = PaymentRecord('pay-9', 'TXN-9', 'prop-1', unit_id, 'tenant-1', amount, date(2026, 1, 5))
    with pytest.raises(error):
        mutations.record_payment(store, payment)


def test_maintenance_lifecycle(store):
    request = MaintenanceRequest('req-9', 'prop-1', 'unit-1', 'tenant-1', 'Plumbing', reported_date=date(2026, 1, 2))
    store = mutations.open_maintenance_request(store, request)
    store = mutations.transition_maintenance(store, 'req-9', 'in_progress')
    assert store.maintenance_requests['req-9'].status == RequestStatus.IN_PROGRESS
    store = mutations.transition_maintenance(store, 'req-9', 'resolved', on=date(2026, 1, 4))
    resolved = store.maintenance_requests['req-9']
    assert resolved.status == RequestStatus.RESOLVED
    assert resolved.resolved_date == date(2026, 1, 4)
    with pytest.raises(InvalidTransitionError):
        mutations.transition_maintenance(store, 'req-9', 'in_progress')


def test_requests_open_as_new(store):
    request = MaintenanceRequest('req-9', 'prop-1', 'unit-1', None, 'AC', status=RequestStatus.RESOLVED)
    with pytest.raises(InvalidTransitionError):
        mutations.open_maintenance_request(store, request)


def test_unknown_request_status(store):
    with pytest.raises(ValueError):
        mutations.transition_maintenance(store, 'req-3', 'closed')
