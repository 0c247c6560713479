import uuid

from flask import Blueprint, request, jsonify

from ..entities import (
    Document,
    MaintenanceRequest,
    PaymentRecord,
    Property,
    PropertyStatus,
    Role,
    Tenant,
    Unit,
    UnitStatus,
)
from ..services.mutations import add_property, add_unit
from ..services.query import (
    MAINTENANCE_SORTS,
    PAYMENT_SORTS,
    PROPERTY_SORTS,
    UNIT_SORTS,
    amenities_include,
    field_equals,
    occupancy_band,
    text_search,
)
from ..services.relations import (
    maintenance_rows,
    payment_rows,
    property_rows,
    related_of,
    tenant_rows,
    unit_rows,
)
from ..services.snapshot import save_entities
from ..services.stats import compute_property_stats
from .context import (
    comparator,
    csv_arg,
    date_field,
    enum_field,
    int_field,
    json_body,
    paged,
    period_arg,
    require_role,
    scoped_view,
    string_list_field,
)

properties_bp = Blueprint('properties', __name__)


@properties_bp.route('/properties', methods=['GET'])
def list_properties():
    view, _ = scoped_view()
    predicates = [text_search(request.args.get('search'), 'name', 'address')]
    if request.args.get('status'):
        predicates.append(field_equals('status', request.args['status']))
    if request.args.get('occupancy'):
        try:
            predicates.append(occupancy_band(request.args['occupancy']))
        except ValueError as exc:
            return jsonify({'error': str(exc)}), 400
    amenities = csv_arg('amenities')
    if amenities:
        predicates.append(amenities_include(amenities))
    # a tenant's view holds one unit, so per-property figures would be wrong
    rows = property_rows(view.store, with_stats=view.role != Role.TENANT)
    return paged(rows, predicates, comparator(PROPERTY_SORTS))


@properties_bp.route('/properties', methods=['POST'])
def create_property():
    """Lists a new property in the landlord's portfolio, pending verification."""
    view, store = scoped_view()
    require_role(view, Role.LANDLORD)
    data = json_body('name')
    prop = Property(
        id=f"prop-{uuid.uuid4().hex[:12]}",
        owner_id=view.user_id,
        name=data['name'].strip(),
        address=data.get('address', ''),
        monthly_rent=int_field(data, 'monthly_rent'),
        next_due_date=date_field(data, 'next_due_date'),
        status=enum_field(data, 'status', PropertyStatus, PropertyStatus.PENDING),
        amenities=frozenset(string_list_field(data, 'amenities')),
    )
    updated = add_property(store, prop)
    save_entities([prop])
    return jsonify(property_rows(updated, [prop])[0]), 201


@properties_bp.route('/properties/<id>', methods=['GET'])
def get_property(id):
    view, _ = scoped_view()
    prop = view.store.properties.get(id)
    if not prop:
        return jsonify({'error': 'Property not found'}), 404
    s = view.store
    if view.role == Role.TENANT:
        return jsonify(property_rows(s, [prop], with_stats=False)[0]), 200
    data = property_rows(s, [prop])[0]
    data['stats'] = compute_property_stats(
        prop, s.units.values(), s.payments.values(), s.maintenance_requests.values(), period_arg(),
    ).to_dict()
    return jsonify(data), 200


@properties_bp.route('/properties/<id>/units', methods=['POST'])
def create_unit(id):
    view, store = scoped_view()
    require_role(view, Role.LANDLORD, Role.MANAGER)
    prop = view.store.properties.get(id)
    if not prop:
        return jsonify({'error': 'Property not found'}), 404
    data = json_body('label')
    unit = Unit(
        id=f"unit-{uuid.uuid4().hex[:12]}",
        property_id=prop.id,
        label=data['label'].strip(),
        unit_type=data.get('unit_type', ''),
        bedrooms=int_field(data, 'bedrooms'),
        bathrooms=int_field(data, 'bathrooms'),
        size_sqft=int_field(data, 'size_sqft'),
        floor=data.get('floor', ''),
        monthly_rent=int_field(data, 'monthly_rent'),
        caution_fee=int_field(data, 'caution_fee'),
        status=enum_field(data, 'status', UnitStatus, UnitStatus.VACANT),
        amenities=frozenset(string_list_field(data, 'amenities')),
        next_due_date=prop.next_due_date,
    )
    updated = add_unit(store, unit)
    save_entities([unit])
    return jsonify(unit_rows(updated, [unit])[0]), 201


def _document_rows(store, documents):
    return [d.to_dict() for d in documents]


# tab name -> (entity type, row builder, sort registry)
_TABS = {
    'units': (Unit, unit_rows, UNIT_SORTS),
    'tenants': (Tenant, tenant_rows, None),
    'payments': (PaymentRecord, payment_rows, PAYMENT_SORTS),
    'maintenance': (MaintenanceRequest, maintenance_rows, MAINTENANCE_SORTS),
    'documents': (Document, _document_rows, None),
}


@properties_bp.route('/properties/<id>/<tab>', methods=['GET'])
def get_property_tab(id, tab):
    if tab not in _TABS:
        return jsonify({'error': f'Unknown property tab {tab!r}'}), 404
    view, _ = scoped_view()
    prop = view.store.properties.get(id)
    if not prop:
        return jsonify({'error': 'Property not found'}), 404
    entity_type, build_rows, sorts = _TABS[tab]
    rows = build_rows(view.store, related_of(view.store, prop, entity_type))
    return paged(rows, sort=comparator(sorts) if sorts else None)
