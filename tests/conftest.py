import pytest
from datetime import date, datetime

from dwella import create_app, db
from dwella.config import TestingConfig
from dwella.entities import (
    ActingContext,
    Conversation,
    Document,
    EntityStore,
    Landlord,
    MaintenanceRequest,
    Manager,
    ManagerStatus,
    Message,
    Notification,
    NotificationType,
    PaymentRecord,
    PaymentStatus,
    Permission,
    Property,
    PropertyStatus,
    RentStatus,
    RequestStatus,
    Role,
    Tenant,
    Unit,
    UnitStatus,
)
from dwella.seed import seed_demo_data


@pytest.fixture(scope='function')
def app():
    """A fresh app over an in-memory database loaded with the demo portfolio."""
    app = create_app(config_class=TestingConfig)
    with app.app_context():
        seed_demo_data()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """A Flask test client to make HTTP requests during integration tests."""
    return app.test_client()


# --- a small in-memory portfolio for the pure engine tests ---
#
# landlord-1 owns prop-1 (3 units) and prop-2 (1 unit, pending verification);
# landlord-2 owns prop-3. manager-1 manages both landlords, restricted to
# prop-1 under landlord-1 and unrestricted under landlord-2.

def build_store():
    landlords = [
        Landlord('landlord-1', 'John Smith', 'john@example.com'),
        Landlord('landlord-2', 'Sarah Williams', 'sarah@example.com'),
    ]
    properties = [
        Property('prop-1', 'landlord-1', 'Harmony Court', '12 Iroko Street', 45000000,
                 date(2026, 1, 5), PropertyStatus.ACTIVE, frozenset({'Gym', 'Swimming Pool'})),
        Property('prop-2', 'landlord-1', 'Garden View', '45 Independence Avenue', 68000000,
                 date(2026, 1, 10), PropertyStatus.PENDING, frozenset({'Parking'})),
        Property('prop-3', 'landlord-2', 'Palm Estate', '23 Palm Grove', 52000000,
                 date(2026, 1, 15), PropertyStatus.ACTIVE, frozenset({'Gym'})),
    ]
    units = [
        Unit('unit-1', 'prop-1', 'A101', monthly_rent=12000000, status=UnitStatus.OCCUPIED,
             tenant_id='tenant-1', next_due_date=date(2026, 1, 5)),
        Unit('unit-2', 'prop-1', 'A102', monthly_rent=9000000, status=UnitStatus.VACANT),
        Unit('unit-3', 'prop-1', 'A103', monthly_rent=9000000, status=UnitStatus.OCCUPIED,
             rent_status=RentStatus.OVERDUE, tenant_id='tenant-2', next_due_date=date(2026, 1, 3)),
        Unit('unit-4', 'prop-2', 'B101', monthly_rent=8000000, status=UnitStatus.MAINTENANCE),
        Unit('unit-5', 'prop-3', 'C101', monthly_rent=15000000, status=UnitStatus.OCCUPIED,
             rent_status=RentStatus.OVERDUE, tenant_id='tenant-3'),
    ]
    tenants = [
        Tenant('tenant-1', 'prop-1', 'unit-1', 'Ada Emmanuel', 'ada@example.com'),
        Tenant('tenant-2', 'prop-1', 'unit-3', 'John Musa', 'musa@example.com'),
        Tenant('tenant-3', 'prop-3', 'unit-5', 'Sarah Okon', 'okon@example.com'),
    ]
    managers = [
        Manager('mgr-1', 'manager-1', 'landlord-1', 'Musa Ahmed',
                assigned_property_ids=frozenset({'prop-1'}),
                permissions=frozenset({Permission.MAINTENANCE, Permission.CHAT})),
        Manager('mgr-2', 'manager-1', 'landlord-2', 'Musa Ahmed', restricted=False),
        Manager('mgr-3', 'manager-2', 'landlord-1', 'Amina Yusuf', status=ManagerStatus.INACTIVE,
                assigned_property_ids=frozenset({'prop-2'})),
    ]
    payments = [
        PaymentRecord('pay-1', 'TXN-1', 'prop-1', 'unit-1', 'tenant-1', 12000000, date(2025, 12, 5)),
        PaymentRecord('pay-2', 'TXN-2', 'prop-1', 'unit-3', 'tenant-2', 9000000, date(2025, 12, 31)),
        PaymentRecord('pay-3', 'TXN-3', 'prop-1', 'unit-3', 'tenant-2', 9000000, date(2026, 1, 1)),
        PaymentRecord('pay-4', 'TXN-4', 'prop-1', 'unit-1', 'tenant-1', 12000000, date(2025, 12, 10),
                      status=PaymentStatus.FAILED),
        PaymentRecord('pay-5', 'TXN-5', 'prop-3', 'unit-5', 'tenant-3', 15000000, date(2025, 12, 3)),
    ]
    requests = [
        MaintenanceRequest('req-1', 'prop-1', 'unit-2', None, 'Plumbing', status=RequestStatus.IN_PROGRESS,
                           reported_date=date(2025, 12, 8), reference='MNT-001'),
        MaintenanceRequest('req-2', 'prop-1', 'unit-2', None, 'Electrical', status=RequestStatus.IN_PROGRESS,
                           reported_date=date(2025, 12, 9), reference='MNT-002'),
        MaintenanceRequest('req-3', 'prop-1', 'unit-1', 'tenant-1', 'AC', reported_date=date(2025, 12, 10),
                           reference='MNT-003'),
        MaintenanceRequest('req-4', 'prop-3', 'unit-5', 'tenant-3', 'Plumbing',
                           status=RequestStatus.IN_PROGRESS, reported_date=date(2025, 12, 1),
                           reference='MNT-004'),
        MaintenanceRequest('req-5', 'prop-2', 'unit-4', None, 'Roofing', status=RequestStatus.RESOLVED,
                           reported_date=date(2025, 11, 20), resolved_date=date(2025, 11, 25),
                           reference='MNT-005'),
    ]
    documents = [Document('doc-1', 'prop-1', 'Certificate of Occupancy', 'pdf', 2400000, date(2025, 6, 1))]
    conversations = [
        Conversation('conv-1', 'landlord-1', 'tenant-1', 'Ada Emmanuel', Role.TENANT, (
            Message('msg-1', 'tenant-1', 'Hi!', datetime(2025, 12, 12, 9, 30), True),
            Message('msg-2', 'landlord-1', 'Hello Ada', datetime(2025, 12, 12, 9, 32), False),
            Message('msg-3', 'tenant-1', 'When is rent due?', datetime(2025, 12, 12, 9, 35), False),
            Message('msg-4', 'tenant-1', 'Thanks', datetime(2025, 12, 12, 9, 40), False),
        ), 'prop-1', 'unit-1'),
        Conversation('conv-2', 'tenant-1', 'landlord-1', 'John Smith', Role.LANDLORD, (
            Message('msg-5', 'landlord-1', 'Hello Ada', datetime(2025, 12, 12, 9, 32), False),
        ), 'prop-1', 'unit-1'),
        Conversation('conv-3', 'landlord-2', 'tenant-3', 'Sarah Okon', Role.TENANT, (), 'prop-3', 'unit-5'),
    ]
    notifications = [
        Notification('ntf-1', 'ntf-1', NotificationType.PAYMENT, 'Payment received',
                     time=datetime(2025, 12, 5, 10, 0), recipient_id='landlord-1'),
        Notification('ntf-2', 'ntf-2', NotificationType.PAYMENT, 'Payment successful',
                     time=datetime(2025, 12, 5, 10, 1), recipient_id='tenant-1'),
        Notification('ntf-3', 'ntf-3', NotificationType.OVERDUE, 'Rent overdue',
                     time=datetime(2025, 12, 6, 9, 0), recipient_id='landlord-2'),
    ]
    return EntityStore.build(
        landlords=landlords,
        properties=properties,
        units=units,
        tenants=tenants,
        managers=managers,
        payments=payments,
        maintenance_requests=requests,
        documents=documents,
        conversations=conversations,
        notifications=notifications,
    )


@pytest.fixture
def store():
    return build_store()


@pytest.fixture
def landlord_context():
    return ActingContext(Role.LANDLORD, 'landlord-1')


@pytest.fixture
def manager_context():
    return ActingContext(Role.MANAGER, 'manager-1', 'landlord-1')
