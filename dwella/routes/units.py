import csv
import io
import uuid
from datetime import date

from flask import Blueprint, request, jsonify, Response

from ..entities import MaintenanceRequest, PaymentRecord, Permission, RentStatus, Role, Tenant, UnitStatus
from ..services.mutations import assign_tenant, record_payment, set_rent_status, set_unit_status
from ..services.query import (
    PAYMENT_SORTS,
    UNIT_SORTS,
    ascending,
    casefolded,
    field_equals,
    text_search,
)
from ..services.relations import (
    maintenance_rows,
    payment_rows,
    related_of,
    related_one,
    rent_rows,
    tenant_rows,
    unit_rows,
)
from ..services.snapshot import save_entities
from ..services.stats import tenant_payment_summary, unit_summary
from .context import (
    comparator,
    date_field,
    enum_field,
    int_field,
    json_body,
    paged,
    require_role,
    scoped_view,
)

units_bp = Blueprint('units', __name__)


@units_bp.route('/units', methods=['GET'])
def list_units():
    view, _ = scoped_view()
    predicates = [text_search(request.args.get('search'), 'label', 'property_name', 'tenant_name', 'unit_type')]
    for name in ('status', 'rent_status', 'property_id'):
        if request.args.get(name):
            predicates.append(field_equals(name, request.args[name]))
    summary = unit_summary(view.store.units.values())
    return paged(unit_rows(view.store), predicates, comparator(UNIT_SORTS), extra={'summary': summary})


@units_bp.route('/units/<id>', methods=['GET'])
def get_unit(id):
    view, _ = scoped_view()
    unit = view.store.units.get(id)
    if not unit:
        return jsonify({'error': 'Unit not found'}), 404
    data = unit_rows(view.store, [unit])[0]
    tenant = related_one(view.store, unit, Tenant)
    data['tenant'] = tenant.to_dict() if tenant else None
    data['payments'] = payment_rows(view.store, related_of(view.store, unit, PaymentRecord))
    data['maintenance'] = maintenance_rows(view.store, related_of(view.store, unit, MaintenanceRequest))
    return jsonify(data), 200


@units_bp.route('/rent', methods=['GET'])
def list_rent():
    view, _ = scoped_view()
    rows = rent_rows(view.store)
    predicates = [text_search(request.args.get('search'), 'tenant_name', 'property_name', 'unit_label')]
    if request.args.get('status'):
        predicates.append(field_equals('rent_status', request.args['status']))

    if request.args.get('format') == 'csv':
        rows = [r for r in rows if all(p(r) for p in predicates)]
        output = io.StringIO()
        writer = None
        for row in rows:
            if writer is None:
                writer = csv.DictWriter(output, fieldnames=list(row.keys()))
                writer.writeheader()
            writer.writerow(row)
        csv_data = output.getvalue()
        output.close()
        headers = {
            'Content-Type': 'text/csv',
            'Content-Disposition': f'attachment; filename="rent_{view.landlord_id or view.user_id}.csv"'
        }
        return Response(csv_data, headers=headers)

    return paged(rows, predicates, ascending(casefolded('tenant_name')))


@units_bp.route('/payments', methods=['GET'])
def list_payments():
    view, _ = scoped_view()
    predicates = [text_search(request.args.get('search'), 'tenant_name', 'property_name', 'transaction_id')]
    for name in ('status', 'property_id'):
        if request.args.get(name):
            predicates.append(field_equals(name, request.args[name]))
    extra = None
    if view.role == Role.TENANT:
        extra = {'summary': tenant_payment_summary(view.store.payments.values()).to_dict()}
    return paged(payment_rows(view.store), predicates, comparator(PAYMENT_SORTS, 'newest'), extra=extra)


@units_bp.route('/units/<id>/tenant', methods=['POST'])
def move_in_tenant(id):
    """Moves a new tenant into a vacant unit."""
    view, store = scoped_view()
    require_role(view, Role.LANDLORD, Role.MANAGER)
    unit = view.store.units.get(id)
    if not unit:
        return jsonify({'error': 'Unit not found'}), 404
    data = json_body('name')
    tenant = Tenant(
        id=f"tenant-{uuid.uuid4().hex[:12]}",
        property_id=unit.property_id,
        unit_id=unit.id,
        name=data['name'].strip(),
        email=data.get('email', ''),
        phone=data.get('phone', ''),
        lease_start=date_field(data, 'lease_start'),
        lease_end=date_field(data, 'lease_end'),
        next_payment_date=unit.next_due_date,
    )
    updated = assign_tenant(store, tenant)
    save_entities([tenant, updated.units[unit.id]])
    return jsonify(tenant_rows(updated, [tenant])[0]), 201


@units_bp.route('/units/<id>/status', methods=['POST'])
def update_unit_status(id):
    view, store = scoped_view()
    require_role(view, Role.LANDLORD, Role.MANAGER)
    if id not in view.store.units:
        return jsonify({'error': 'Unit not found'}), 404
    data = json_body()
    status = enum_field(data, 'status', UnitStatus)
    rent_status = enum_field(data, 'rent_status', RentStatus)
    if status is None and rent_status is None:
        return jsonify({'error': 'status or rent_status is required'}), 400

    updated = store
    if status is not None:
        updated = set_unit_status(updated, id, status)
    if rent_status is not None:
        updated = set_rent_status(updated, id, rent_status)
    unit = updated.units[id]
    save_entities([unit])
    return jsonify(unit_rows(updated, [unit])[0]), 200


def _can_take_payments(view):
    if view.role in (Role.LANDLORD, Role.TENANT):
        return True
    return any(Permission.PAYMENTS in m.permissions for m in view.store.managers.values())


@units_bp.route('/payments', methods=['POST'])
def create_payment():
    """Records a rent payment against an occupied unit (a tenant pays their own)."""
    view, store = scoped_view()
    if not _can_take_payments(view):
        return jsonify({'error': 'Not allowed to record payments'}), 403
    data = json_body('unit_id')
    unit = view.store.units.get(data['unit_id'])
    if not unit:
        return jsonify({'error': 'Unit not found'}), 404
    if unit.tenant_id is None:
        return jsonify({'error': f'Unit {unit.label} has no tenant to pay rent'}), 400

    payment = PaymentRecord(
        id=f"pay-{uuid.uuid4().hex[:12]}",
        transaction_id=f"TXN-{uuid.uuid4().hex[:8].upper()}",
        property_id=unit.property_id,
        unit_id=unit.id,
        tenant_id=unit.tenant_id,
        amount=int_field(data, 'amount', default=unit.monthly_rent, minimum=1),
        date=date_field(data, 'date', default=date.today()),
        method=data.get('method', ''),
    )
    updated = record_payment(store, payment)
    save_entities([payment])
    return jsonify(payment_rows(updated, [payment])[0]), 201
