from flask import Blueprint, jsonify

from ..entities import Role
from ..services.relations import landlord_accounts, payment_rows
from ..services.scoping import available_landlords
from ..services.snapshot import load_snapshot
from ..services.stats import compute_portfolio_stats
from .context import acting_context, period_arg, scoped_view

dashboard_bp = Blueprint('dashboard', __name__)


@dashboard_bp.route('/dashboard/stats', methods=['GET'])
def get_stats():
    period = period_arg()
    view, _ = scoped_view()
    s = view.store
    stats = compute_portfolio_stats(
        s.properties.values(), s.units.values(), s.payments.values(),
        s.maintenance_requests.values(), period,
    )
    recent = sorted(payment_rows(s), key=lambda r: r['date'], reverse=True)[:5]
    return jsonify({
        'period': period.to_dict(),
        'landlord_id': view.landlord_id,
        'stats': stats.to_dict(),
        'recent_payments': recent,
    }), 200


@dashboard_bp.route('/landlords', methods=['GET'])
def list_landlords():
    """Landlord accounts the caller may act for (the manager's landlord picker)."""
    context = acting_context()
    store = load_snapshot()
    if context.role == Role.MANAGER:
        landlords = available_landlords(store, context.user_id)
    elif context.role == Role.LANDLORD:
        landlords = [l for l in store.landlords.values() if l.id == context.user_id]
    else:
        return jsonify({'error': 'Tenants have no landlord accounts'}), 403
    return jsonify(landlord_accounts(store, landlords)), 200
