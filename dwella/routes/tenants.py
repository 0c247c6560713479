from flask import Blueprint, request, jsonify

from ..entities import MaintenanceRequest, PaymentRecord
from ..services.query import ascending, casefolded, text_search
from ..services.relations import maintenance_rows, payment_rows, related_of, tenant_rows
from ..services.stats import tenant_payment_summary
from .context import paged, scoped_view

tenants_bp = Blueprint('tenants', __name__)


@tenants_bp.route('/tenants', methods=['GET'])
def list_tenants():
    view, _ = scoped_view()
    predicates = [text_search(request.args.get('search'), 'name', 'email', 'unit_label', 'property_name')]
    return paged(tenant_rows(view.store), predicates, ascending(casefolded('name')))


@tenants_bp.route('/tenants/<id>', methods=['GET'])
def get_tenant(id):
    """Tenant profile with payment history, payment summary and maintenance requests."""
    view, _ = scoped_view()
    s = view.store
    tenant = s.tenants.get(id)
    if not tenant:
        return jsonify({'error': 'Tenant not found'}), 404
    payments = related_of(s, tenant, PaymentRecord)
    data = tenant_rows(s, [tenant])[0]
    data['payments'] = sorted(payment_rows(s, payments), key=lambda r: r['date'], reverse=True)
    data['payment_summary'] = tenant_payment_summary(payments).to_dict()
    requests = maintenance_rows(s, related_of(s, tenant, MaintenanceRequest))
    data['maintenance'] = sorted(requests, key=lambda r: r['reported_date'] or '', reverse=True)
    return jsonify(data), 200
