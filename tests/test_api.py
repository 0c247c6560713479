# tests/test_api.py
import pytest

from dwella import db
from dwella.models import NotificationRow

LANDLORD = {'X-User-Role': 'landlord', 'X-User-Id': 'landlord-1'}
TENANT = {'X-User-Role': 'tenant', 'X-User-Id': 'tenant-1'}


def as_manager(landlord_id=None, user_id='manager-1'):
    headers = {'X-User-Role': 'manager', 'X-User-Id': user_id}
    if landlord_id:
        headers['X-Selected-Landlord'] = landlord_id
    return headers


# --- Testing the acting context ---

def test_missing_headers_is_unauthorized(client):
    response = client.get('/properties')
    assert response.status_code == 401
    assert 'X-User-Role' in response.json['error']


def test_unknown_role_is_bad_request(client):
    response = client.get('/properties', headers={'X-User-Role': 'admin', 'X-User-Id': 'x'})
    assert response.status_code == 400


def test_manager_without_landlord_gets_redirect(client):
    response = client.get('/properties', headers=as_manager())
    assert response.status_code == 409
    assert response.json['redirect'] == '/dashboard/select-landlord'


def test_landlord_picker_for_manager(client):
    response = client.get('/landlords', headers=as_manager())
    assert response.status_code == 200
    assert [a['id'] for a in response.json] == ['landlord-1', 'landlord-2']
    assert response.json[0]['total_units'] == 6


# --- Testing dashboard and properties ---

def test_dashboard_stats_for_december(client):
    response = client.get('/dashboard/stats?period=2025-12', headers=LANDLORD)
    assert response.status_code == 200
    stats = response.json['stats']
    assert stats['total_properties'] == 2
    assert stats['total_units'] == 6
    assert stats['occupied_units'] == 3
    assert stats['occupancy_percent'] == 50
    assert stats['units_under_maintenance'] == 1
    # two successful December payments of 120,000 naira
    assert stats['rent_collected'] == 24000000
    assert stats['overdue_amount'] == 9000000
    assert response.json['period'] == {'start': '2025-12-01', 'end': '2026-01-01'}


def test_bad_period_is_rejected(client):
    response = client.get('/dashboard/stats?period=december', headers=LANDLORD)
    assert response.status_code == 400


def test_properties_are_scoped_and_paginated(client):
    response = client.get('/properties?per_page=1&page=2&sort=name-asc', headers=LANDLORD)
    assert response.status_code == 200
    body = response.json
    assert body['total_count'] == 2
    assert body['page_count'] == 2
    assert [p['name'] for p in body['items']] == ['Harmony Court']


def test_property_filters(client):
    response = client.get('/properties?amenities=gym,swimming pool&occupancy=medium', headers=LANDLORD)
    assert [p['id'] for p in response.json['items']] == ['prop-1']
    response = client.get('/properties?occupancy=full', headers=LANDLORD)
    assert response.status_code == 400


def test_invalid_page_is_bad_request(client):
    assert client.get('/properties?page=0', headers=LANDLORD).status_code == 400
    assert client.get('/properties?page=two', headers=LANDLORD).status_code == 400


def test_unknown_sort_is_bad_request(client):
    assert client.get('/properties?sort=cheapest', headers=LANDLORD).status_code == 400


def test_other_landlords_property_is_not_found(client):
    assert client.get('/properties/prop-3', headers=LANDLORD).status_code == 404
    response = client.get('/properties/prop-1?period=2025-12', headers=LANDLORD)
    assert response.status_code == 200
    assert response.json['unit_count'] == 4
    assert response.json['stats']['rent_collected'] == 24000000


@pytest.mark.parametrize("tab,count", [
    ('units', 4), ('tenants', 2), ('payments', 2), ('maintenance', 2), ('documents', 2),
])
def test_property_tabs(client, tab, count):
    response = client.get(f'/properties/prop-1/{tab}', headers=LANDLORD)
    assert response.status_code == 200
    assert response.json['total_count'] == count


def test_restricted_manager_sees_assigned_properties_only(client):
    response = client.get('/properties', headers=as_manager('landlord-1'))
    assert [p['id'] for p in response.json['items']] == ['prop-1', 'prop-2']
    response = client.get('/properties', headers=as_manager('landlord-3', user_id='manager-2'))
    assert [p['id'] for p in response.json['items']] == ['prop-4', 'prop-5']


# --- Testing units, rent and payments ---

def test_units_page_with_summary(client):
    response = client.get('/units?status=occupied', headers=LANDLORD)
    body = response.json
    assert body['total_count'] == 3
    assert body['summary']['total_units'] == 6
    assert body['summary']['outstanding_rent'] == 9000000


def test_rent_page_and_csv_export(client):
    response = client.get('/rent?status=overdue', headers=LANDLORD)
    assert [r['tenant_name'] for r in response.json['items']] == ['John Musa']
    assert response.json['items'][0]['last_payment'] == '2025-11-03'

    response = client.get('/rent?format=csv', headers=LANDLORD)
    assert response.status_code == 200
    assert response.headers['Content-Type'].startswith('text/csv')
    lines = response.data.decode().strip().splitlines()
    assert lines[0].startswith('unit_id,unit_label')
    assert len(lines) == 4


def test_tenant_payments_include_summary(client):
    response = client.get('/payments', headers=TENANT)
    body = response.json
    assert [p['transaction_id'] for p in body['items']] == ['TXN-1001']
    assert body['summary']['total_paid'] == 12000000


def test_tenant_cannot_see_other_units(client):
    assert client.get('/units/unit-6', headers=TENANT).status_code == 404
    response = client.get('/units/unit-1', headers=TENANT)
    assert response.json['tenant']['name'] == 'Ada Emmanuel'


# --- Testing maintenance ---

def test_maintenance_list_with_counts(client):
    response = client.get('/maintenance?priority=high', headers=LANDLORD)
    body = response.json
    # both reported the same day, so they keep id order
    assert [r['reference'] for r in body['items']] == ['MNT-043', 'MNT-045']
    assert body['counts'] == {'all': 3, 'new': 1, 'in_progress': 1, 'resolved': 1}


def test_tenant_opens_and_landlord_resolves_request(client):
    response = client.post('/maintenance', json={'unit_id': 'unit-1', 'type': 'Plumbing', 'priority': 'low'},
                           headers=TENANT)
    assert response.status_code == 201
    created = response.json
    assert created['tenant_id'] == 'tenant-1'
    assert created['status'] == 'new'

    response = client.post(f"/maintenance/{created['id']}/status", json={'status': 'resolved'}, headers=TENANT)
    assert response.status_code == 403

    response = client.post(f"/maintenance/{created['id']}/status", json={'status': 'resolved'}, headers=LANDLORD)
    assert response.status_code == 200
    assert response.json['resolved_date'] is not None

    response = client.post(f"/maintenance/{created['id']}/status", json={'status': 'new'}, headers=LANDLORD)
    assert response.status_code == 400


# --- Testing managers ---

def test_invite_and_edit_manager(client):
    response = client.post('/managers', json={
        'name': 'Ibrahim Sani', 'email': 'ibrahim@example.com',
        'assigned_property_ids': ['prop-2'], 'permissions': ['chat'],
    }, headers=LANDLORD)
    assert response.status_code == 201
    manager_id = response.json['id']
    assert response.json['assigned_properties'] == [{'id': 'prop-2', 'name': 'Garden View Apartments'}]

    response = client.patch(f'/managers/{manager_id}', json={'assigned_property_ids': ['prop-3']},
                            headers=LANDLORD)
    assert response.status_code == 400

    response = client.post(f'/managers/{manager_id}/deactivate', headers=LANDLORD)
    assert response.json['status'] == 'inactive'

    names = [m['name'] for m in client.get('/managers', headers=LANDLORD).json['items']]
    assert names == ['Ibrahim Sani', 'Musa Ahmed']


def test_manager_assigned_to_unknown_property_is_bad_request(client):
    response = client.post('/managers', json={
        'name': 'Ibrahim Sani', 'email': 'ibrahim@example.com', 'assigned_property_ids': ['prop-999'],
    }, headers=LANDLORD)
    assert response.status_code == 400
    assert 'prop-999' in response.json['error']
    response = client.patch('/managers/mgr-1', json={'assigned_property_ids': ['prop-999']}, headers=LANDLORD)
    assert response.status_code == 400


@pytest.mark.parametrize("payload", [
    {'assigned_property_ids': 'prop-1'},
    {'assigned_property_ids': [1, 2]},
    {'permissions': 'chat'},
])
def test_manager_edit_rejects_malformed_lists(client, payload):
    response = client.patch('/managers/mgr-1', json=payload, headers=LANDLORD)
    assert response.status_code == 400
    # nothing was written
    managers = client.get('/managers', headers=LANDLORD).json['items']
    assert [p['id'] for p in managers[0]['assigned_properties']] == ['prop-1', 'prop-2']


def test_only_landlords_manage_managers(client):
    response = client.post('/managers/mgr-1/deactivate', headers=as_manager('landlord-1'))
    assert response.status_code == 403


def test_deactivated_manager_loses_access(client):
    client.post('/managers/mgr-1/deactivate', headers=LANDLORD)
    response = client.get('/properties', headers=as_manager('landlord-1'))
    assert response.json['total_count'] == 0
    picker = client.get('/landlords', headers=as_manager()).json
    assert [a['id'] for a in picker] == ['landlord-2']


# --- Testing messages ---

def test_inbox_and_mark_read(client):
    body = client.get('/messages', headers=LANDLORD).json
    assert body['unread_total'] == 2
    response = client.post('/messages/conv-2/read', headers=LANDLORD)
    assert response.json['unread_count'] == 0
    assert client.get('/messages', headers=LANDLORD).json['unread_total'] == 1


def test_cannot_read_someone_elses_conversation(client):
    assert client.get('/messages/conv-4', headers=LANDLORD).status_code == 404


# --- Testing notifications ---

def test_notification_flow(client):
    body = client.get('/notifications', headers=LANDLORD).json
    assert body['unread_count'] == 3
    assert body['preview'][0]['api_id'] == 'ntf-4'

    response = client.post('/notifications/mark-read', json={'ids': ['ntf-2', 'nope']}, headers=LANDLORD)
    assert response.json['changed'] == ['ntf-2']
    assert response.json['unread_count'] == 2

    # rolled back before confirmation: unread again
    response = client.post('/notifications/rollback', json={'ids': ['ntf-2']}, headers=LANDLORD)
    assert response.json['restored'] == ['ntf-2']
    assert response.json['unread_count'] == 3

    client.post('/notifications/mark-all-read', headers=LANDLORD)
    response = client.post('/notifications/confirm', json={'ids': ['ntf-2', 'ntf-3', 'ntf-4']}, headers=LANDLORD)
    assert response.json['confirmed'] == ['ntf-2', 'ntf-3', 'ntf-4']
    assert client.post('/notifications/rollback', json={'ids': ['ntf-2']},
                       headers=LANDLORD).json['restored'] == []


def test_notification_receive_and_reconcile(client):
    payload = {'api_id': 'ntf-99', 'title': 'Payment received', 'type': 'payment',
               'time': '2025-12-13T08:00:00'}
    assert client.post('/notifications/receive', json=payload, headers=TENANT).json['new'] is True
    assert client.post('/notifications/receive', json=payload, headers=TENANT).json['new'] is False

    response = client.post('/notifications/unread-count', json={'count': 7}, headers=TENANT)
    assert response.json['unread_count'] == 7
    assert client.post('/notifications/unread-count', json={'count': -1},
                       headers=TENANT).status_code == 400


def test_notifications_need_id_list(client):
    response = client.post('/notifications/mark-read', json={'ids': 'ntf-1'}, headers=LANDLORD)
    assert response.status_code == 400


def test_confirm_stores_only_the_read_flag(client, app):
    client.post('/notifications/mark-read', json={'ids': ['ntf-2']}, headers=LANDLORD)
    response = client.post('/notifications/confirm', json={'ids': ['ntf-2']}, headers=LANDLORD)
    assert response.json['persisted'] == ['ntf-2']
    with app.app_context():
        row = db.session.get(NotificationRow, 'ntf-2')
        assert row.is_read is True
        assert row.title == 'New maintenance request'


def test_tenant_cannot_overwrite_someone_elses_notification(client, app):
    payload = {'id': 'ntf-2', 'api_id': 'ntf-2', 'title': 'Hijack', 'type': 'other'}
    client.post('/notifications/receive', json=payload, headers=TENANT)
    client.post('/notifications/mark-read', json={'ids': ['ntf-2']}, headers=TENANT)
    response = client.post('/notifications/confirm', json={'ids': ['ntf-2']}, headers=TENANT)
    assert response.json['confirmed'] == ['ntf-2']
    assert response.json['persisted'] == []

    with app.app_context():
        row = db.session.get(NotificationRow, 'ntf-2')
        assert row.recipient_id == 'landlord-1'
        assert row.title == 'New maintenance request'
        assert row.is_read is False
    assert client.get('/notifications', headers=LANDLORD).json['unread_count'] == 3


def test_unknown_users_get_no_notification_session(client, app):
    for i in range(20):
        response = client.get('/notifications', headers={'X-User-Role': 'tenant', 'X-User-Id': f'ghost-{i}'})
        assert response.status_code == 403
    assert len(app.extensions['dwella.notifications']) == 0

    client.get('/notifications', headers=LANDLORD)
    assert 'landlord-1' in app.extensions['dwella.notifications']


# --- Testing portfolio writes ---

def test_landlord_lists_a_new_property(client):
    response = client.post('/properties', json={
        'name': 'Lekki Gardens', 'address': '3 Admiralty Way, Lagos',
        'monthly_rent': 50000000, 'amenities': ['Gym'],
    }, headers=LANDLORD)
    assert response.status_code == 201
    created = response.json
    assert created['status'] == 'pending'
    assert created['owner_id'] == 'landlord-1'
    assert created['unit_count'] == 0
    assert client.get('/properties', headers=LANDLORD).json['total_count'] == 3


@pytest.mark.parametrize("payload", [
    {'address': 'no name'},
    {'name': 'Lekki Gardens', 'monthly_rent': 'lots'},
    {'name': 'Lekki Gardens', 'amenities': 'Gym'},
    {'name': 'Lekki Gardens', 'status': 'sold'},
])
def test_new_property_rejects_bad_fields(client, payload):
    assert client.post('/properties', json=payload, headers=LANDLORD).status_code == 400


def test_only_landlords_list_properties(client):
    response = client.post('/properties', json={'name': 'Lekki Gardens'}, headers=as_manager('landlord-1'))
    assert response.status_code == 403


def test_add_unit_to_property(client):
    response = client.post('/properties/prop-1/units', json={'label': 'D401', 'monthly_rent': 12000000},
                           headers=LANDLORD)
    assert response.status_code == 201
    assert response.json['status'] == 'vacant'
    assert response.json['property_name'] == 'Harmony Court'
    assert client.get('/properties/prop-1', headers=LANDLORD).json['unit_count'] == 5

    # labels are unique within a property, case-insensitively
    response = client.post('/properties/prop-1/units', json={'label': 'a101'}, headers=LANDLORD)
    assert response.status_code == 409
    response = client.post('/properties/prop-1/units', json={'label': 'D402', 'status': 'occupied'},
                           headers=LANDLORD)
    assert response.status_code == 400
    assert client.post('/properties/prop-3/units', json={'label': 'Z1'}, headers=LANDLORD).status_code == 404


def test_move_tenant_into_vacant_unit(client):
    response = client.post('/units/unit-4/tenant', json={
        'name': 'Ngozi Eze', 'email': 'ngozi@example.com', 'lease_start': '2026-01-01',
    }, headers=LANDLORD)
    assert response.status_code == 201
    tenant = response.json
    assert tenant['unit_label'] == 'C305'
    assert tenant['lease_start'] == '2026-01-01'

    unit = client.get('/units/unit-4', headers=LANDLORD).json
    assert unit['status'] == 'occupied'
    assert unit['tenant']['name'] == 'Ngozi Eze'
    # the new tenant can sign in and see their own profile
    own = client.get(f"/tenants/{tenant['id']}", headers={'X-User-Role': 'tenant', 'X-User-Id': tenant['id']})
    assert own.status_code == 200


def test_move_in_rejected_for_occupied_unit(client):
    response = client.post('/units/unit-1/tenant', json={'name': 'Ngozi Eze'}, headers=LANDLORD)
    assert response.status_code == 400
    response = client.post('/units/unit-4/tenant', json={'name': 'Ngozi Eze', 'lease_start': 'soon'},
                           headers=LANDLORD)
    assert response.status_code == 400


def test_unit_status_updates(client):
    response = client.post('/units/unit-3/status', json={'status': 'vacant'}, headers=LANDLORD)
    assert response.status_code == 200
    assert response.json['status'] == 'vacant'

    response = client.post('/units/unit-1/status', json={'rent_status': 'overdue'}, headers=as_manager('landlord-1'))
    assert response.json['rent_status'] == 'overdue'

    # a unit with a tenant cannot be emptied by a status change
    assert client.post('/units/unit-1/status', json={'status': 'vacant'}, headers=LANDLORD).status_code == 400
    assert client.post('/units/unit-1/status', json={}, headers=LANDLORD).status_code == 400
    assert client.post('/units/unit-1/status', json={'status': 'bogus'}, headers=LANDLORD).status_code == 400
    assert client.post('/units/unit-1/status', json={'status': 'vacant'}, headers=TENANT).status_code == 403


def test_tenant_pays_rent(client):
    response = client.post('/payments', json={
        'unit_id': 'unit-1', 'amount': 12000000, 'date': '2025-12-20', 'method': 'Card',
    }, headers=TENANT)
    assert response.status_code == 201
    assert response.json['status'] == 'success'
    assert response.json['tenant_name'] == 'Ada Emmanuel'

    assert client.get('/payments', headers=TENANT).json['summary']['total_paid'] == 24000000
    stats = client.get('/dashboard/stats?period=2025-12', headers=LANDLORD).json['stats']
    assert stats['rent_collected'] == 36000000


def test_payment_rules(client):
    # another tenant's unit is not in view
    assert client.post('/payments', json={'unit_id': 'unit-6'}, headers=TENANT).status_code == 404
    # no tenant to pay for a vacant unit
    assert client.post('/payments', json={'unit_id': 'unit-4'}, headers=LANDLORD).status_code == 400
    assert client.post('/payments', json={'unit_id': 'unit-1', 'amount': 0}, headers=LANDLORD).status_code == 400
    # manager-2 has no payments permission
    response = client.post('/payments', json={'unit_id': 'unit-9'}, headers=as_manager('landlord-3', 'manager-2'))
    assert response.status_code == 403


# --- Testing tenants ---

def test_tenant_list_and_detail(client):
    body = client.get('/tenants', headers=LANDLORD).json
    assert [t['name'] for t in body['items']] == ['Ada Emmanuel', 'Chidi Obi', 'John Musa']

    detail = client.get('/tenants/tenant-2', headers=LANDLORD).json
    assert detail['unit_label'] == 'B202'
    assert [p['transaction_id'] for p in detail['payments']] == ['TXN-1004', 'TXN-1003']
    assert detail['payment_summary']['total_paid'] == 9000000
    assert detail['payment_summary']['failed_count'] == 1
    assert [r['reference'] for r in detail['maintenance']] == ['MNT-044']


def test_tenant_sees_only_their_own_profile(client):
    assert client.get('/tenants/tenant-2', headers=TENANT).status_code == 404
    assert client.get('/tenants/tenant-1', headers=TENANT).json['name'] == 'Ada Emmanuel'


def test_tenant_property_view_has_no_portfolio_figures(client):
    row = client.get('/properties', headers=TENANT).json['items'][0]
    assert row['name'] == 'Harmony Court'
    assert row['owner_id'] is None
    assert 'unit_count' not in row
    assert 'occupancy_percent' not in row

    detail = client.get('/properties/prop-1', headers=TENANT).json
    assert 'stats' not in detail
    assert 'occupancy_percent' not in detail
