# dwella/seed.py
"""Demo portfolio: three landlords, their properties, tenants, managers and inbox."""
import logging
from datetime import date, datetime

from . import db
from .models import (
    ConversationRow,
    DocumentRow,
    LandlordRow,
    MaintenanceRow,
    ManagerRow,
    MessageRow,
    NotificationRow,
    PaymentRow,
    PropertyRow,
    TenantRow,
    UnitRow,
)

logger = logging.getLogger(__name__)


def naira(amount):
    """Whole naira to kobo."""
    return amount * 100


LANDLORDS = [
    ('landlord-1', 'John Smith', 'john.smith@example.com'),
    ('landlord-2', 'Sarah Williams', 'sarah.williams@example.com'),
    ('landlord-3', 'Michael Chen', 'michael.chen@example.com'),
]

# id, owner, name, address, rent, next due, status, amenities
PROPERTIES = [
    ('prop-1', 'landlord-1', 'Harmony Court', '12 Iroko Street, Uyo, Akwa Ibom', 450000,
     date(2026, 1, 5), 'active', ['24/7 Power', 'Security Gate', 'Water Treatment', 'Swimming Pool', 'Gym']),
    ('prop-2', 'landlord-1', 'Garden View Apartments', '45 Independence Avenue, Lagos', 680000,
     date(2026, 1, 10), 'active', ['24/7 Power', 'Security Gate', 'Water Treatment', 'Parking']),
    ('prop-3', 'landlord-2', 'Palm Estate', '23 Palm Grove, Port Harcourt', 520000,
     date(2026, 1, 15), 'active', ['24/7 Power', 'Security Gate', 'Water Treatment', 'Swimming Pool']),
    ('prop-4', 'landlord-3', 'Sunset Apartments', '78 Sunset Boulevard, Abuja', 380000,
     date(2026, 1, 20), 'active', ['24/7 Power', 'Security Gate', 'Water Treatment']),
    ('prop-5', 'landlord-3', 'Ocean View Residence', '56 Marina Road, Calabar', 280000,
     date(2026, 1, 25), 'active', ['24/7 Power', 'Security Gate', 'Water Treatment', 'Swimming Pool']),
    ('prop-6', 'landlord-3', 'City Heights', '91 Allen Avenue, Ikeja, Lagos', 950000,
     date(2026, 1, 30), 'active', ['24/7 Power', 'Security Gate', 'Water Treatment', 'Fiber Internet', 'Gym']),
    ('prop-7', 'landlord-2', 'Meadow Park', '34 GRA Phase 2, Enugu', 620000,
     date(2026, 2, 5), 'active', ['24/7 Power', 'Security Gate', 'Water Treatment', 'Parking']),
    ('prop-8', 'landlord-2', 'Riverdale Complex', '15 Trans Amadi, Port Harcourt', 480000,
     date(2026, 2, 10), 'pending', ['24/7 Power', 'Security Gate', 'Water Treatment']),
]

# id, property, label, type, beds, baths, sqft, floor, rent, caution, status, rent status, tenant
UNITS = [
    ('unit-1', 'prop-1', 'A101', '3BR Duplex', 3, 3, 1800, 'Ground', 120000, 240000, 'occupied', 'paid', 'tenant-1'),
    ('unit-2', 'prop-1', 'A103', '3BR Duplex', 3, 3, 1800, 'Ground', 120000, 240000, 'occupied', 'paid', 'tenant-6'),
    ('unit-3', 'prop-1', 'A203', '2BR Apartment', 2, 2, 1200, '2nd', 90000, 180000, 'maintenance', 'paid', None),
    ('unit-4', 'prop-1', 'C305', '3BR Penthouse', 3, 3, 2100, '3rd', 150000, 300000, 'vacant', 'paid', None),
    ('unit-5', 'prop-2', 'B101', '2BR Apartment', 2, 2, 1150, 'Ground', 90000, 180000, 'vacant', 'paid', None),
    ('unit-6', 'prop-2', 'B202', '2BR Apartment', 2, 2, 1150, '2nd', 90000, 180000, 'occupied', 'overdue', 'tenant-2'),
    ('unit-7', 'prop-3', 'C305', '3BR Apartment', 3, 2, 1500, '3rd', 150000, 300000, 'occupied', 'paid', 'tenant-3'),
    ('unit-8', 'prop-3', 'A102', '1BR Apartment', 1, 1, 700, 'Ground', 65000, 130000, 'vacant', 'paid', None),
    ('unit-9', 'prop-4', 'D101', '2BR Flat', 2, 2, 1100, 'Ground', 95000, 190000, 'occupied', 'paid', 'tenant-4'),
    ('unit-10', 'prop-4', 'D201', '2BR Flat', 2, 2, 1100, '2nd', 95000, 190000, 'maintenance', 'paid', None),
    ('unit-11', 'prop-5', 'E203', 'Studio', 1, 1, 550, '2nd', 85000, 170000, 'occupied', 'overdue', 'tenant-5'),
    ('unit-12', 'prop-6', 'F101', '4BR Terrace', 4, 4, 2600, 'Ground', 250000, 500000, 'vacant', 'paid', None),
    ('unit-13', 'prop-7', 'G101', '2BR Apartment', 2, 2, 1200, 'Ground', 110000, 220000, 'vacant', 'paid', None),
]

# id, property, unit, name, email, phone
TENANTS = [
    ('tenant-1', 'prop-1', 'unit-1', 'Ada Emmanuel', 'ada@example.com', '+234 801 234 5678'),
    ('tenant-2', 'prop-2', 'unit-6', 'John Musa', 'john.musa@example.com', '+234 802 345 6789'),
    ('tenant-3', 'prop-3', 'unit-7', 'Sarah Okon', 'sarah.okon@example.com', '+234 803 456 7890'),
    ('tenant-4', 'prop-4', 'unit-9', 'Abel Kundo', 'abel@example.com', '+234 804 567 8901'),
    ('tenant-5', 'prop-5', 'unit-11', 'Fatima Ahmed', 'fatima@example.com', '+234 805 678 9012'),
    ('tenant-6', 'prop-1', 'unit-2', 'Chidi Obi', 'chidi@example.com', '+234 806 789 0123'),
]

# id, user, landlord, name, email, phone, status, properties, permissions, restricted
MANAGERS = [
    ('mgr-1', 'manager-1', 'landlord-1', 'Musa Ahmed', 'musa@example.com', '+234 811 222 3333',
     'active', ['prop-1', 'prop-2'], ['maintenance', 'chat', 'payments'], True),
    ('mgr-2', 'manager-2', 'landlord-3', 'Ibrahim Sani', 'ibrahim@example.com', '+234 812 333 4444',
     'active', ['prop-4', 'prop-5'], ['maintenance', 'chat'], True),
    ('mgr-3', 'manager-3', 'landlord-3', 'Amina Yusuf', 'amina@example.com', '+234 813 444 5555',
     'inactive', ['prop-6'], ['maintenance'], True),
    ('mgr-4', 'manager-1', 'landlord-2', 'Musa Ahmed', 'musa@example.com', '+234 811 222 3333',
     'active', [], ['maintenance', 'chat'], False),
]

# id, transaction, property, unit, tenant, amount, date, method, status
PAYMENTS = [
    ('pay-1', 'TXN-1001', 'prop-1', 'unit-1', 'tenant-1', 120000, date(2025, 12, 5), 'Bank Transfer', 'success'),
    ('pay-2', 'TXN-1002', 'prop-1', 'unit-2', 'tenant-6', 120000, date(2025, 12, 5), 'Card', 'success'),
    ('pay-3', 'TXN-1003', 'prop-2', 'unit-6', 'tenant-2', 90000, date(2025, 11, 3), 'Bank Transfer', 'success'),
    ('pay-4', 'TXN-1004', 'prop-2', 'unit-6', 'tenant-2', 90000, date(2025, 12, 4), 'Card', 'failed'),
    ('pay-5', 'TXN-1005', 'prop-3', 'unit-7', 'tenant-3', 150000, date(2025, 12, 3), 'USSD', 'success'),
    ('pay-6', 'TXN-1006', 'prop-4', 'unit-9', 'tenant-4', 95000, date(2025, 12, 2), 'Bank Transfer', 'success'),
]

# id, reference, property, unit, tenant, type, sub type, priority, status, reported, resolved, detail
MAINTENANCE = [
    ('mnt-45', 'MNT-045', 'prop-1', 'unit-3', None, 'Plumbing', 'Sink Not Working', 'high', 'in_progress',
     date(2025, 12, 10), None, 'Kitchen sink has a persistent leak under the cabinet.'),
    ('mnt-44', 'MNT-044', 'prop-2', 'unit-6', 'tenant-2', 'Electrical', 'Light Fixture', 'medium', 'resolved',
     date(2025, 12, 9), date(2025, 12, 11), 'Bedroom light fixture is not working properly.'),
    ('mnt-43', 'MNT-043', 'prop-1', 'unit-1', 'tenant-1', 'AC', 'AC Not Cooling', 'high', 'new',
     date(2025, 12, 10), None, 'AC unit in the living room is not cooling properly.'),
    ('mnt-42', 'MNT-042', 'prop-3', 'unit-7', 'tenant-3', 'Plumbing', 'Toilet Issues', 'low', 'new',
     date(2025, 12, 10), None, 'Toilet is constantly running and needs repair.'),
    ('mnt-41', 'MNT-041', 'prop-4', 'unit-10', None, 'Electrical', 'Power Outlet', 'medium', 'in_progress',
     date(2025, 12, 9), None, 'Power outlet in the kitchen is not working.'),
]

DOCUMENTS = [
    ('doc-1', 'prop-1', 'Certificate of Occupancy', 'pdf', 2400000, date(2025, 6, 1)),
    ('doc-2', 'prop-1', 'Fire Safety Inspection', 'pdf', 850000, date(2025, 9, 14)),
    ('doc-3', 'prop-3', 'Survey Plan', 'pdf', 1200000, date(2025, 7, 20)),
]

# id, owner, counterpart, name, role, property, unit, messages (id, sender, text, timestamp, read)
CONVERSATIONS = [
    ('conv-1', 'landlord-1', 'tenant-1', 'Ada Emmanuel', 'tenant', 'prop-1', 'unit-1', [
        ('msg-1', 'tenant-1', 'Hi! I wanted to ask about the payment due date.', datetime(2025, 12, 12, 9, 30), True),
        ('msg-2', 'landlord-1', 'Hello Ada! Your payment is due on January 5th.', datetime(2025, 12, 12, 9, 32), True),
        ('msg-3', 'tenant-1', 'Thank you for the quick response!', datetime(2025, 12, 12, 9, 35), True),
    ]),
    ('conv-2', 'landlord-1', 'tenant-2', 'John Musa', 'tenant', 'prop-2', 'unit-6', [
        ('msg-4', 'tenant-2', 'The AC in my unit is not working properly.', datetime(2025, 12, 12, 8, 0), True),
        ('msg-5', 'landlord-1', "I'll send a maintenance team tomorrow morning.", datetime(2025, 12, 12, 8, 15), True),
        ('msg-6', 'tenant-2', 'When can we schedule the maintenance?', datetime(2025, 12, 12, 10, 0), False),
    ]),
    ('conv-3', 'landlord-1', 'manager-1', 'Musa Ahmed', 'manager', None, None, [
        ('msg-7', 'manager-1', 'All maintenance completed for this week', datetime(2025, 12, 10, 17, 0), False),
    ]),
    ('conv-4', 'tenant-1', 'landlord-1', 'John Smith', 'landlord', 'prop-1', 'unit-1', [
        ('msg-8', 'tenant-1', 'Hi! I wanted to ask about the payment due date.', datetime(2025, 12, 12, 9, 30), True),
        ('msg-9', 'landlord-1', 'Hello Ada! Your payment is due on January 5th.', datetime(2025, 12, 12, 9, 32), False),
    ]),
]

# api id, recipient, type, title, description, time, read
NOTIFICATIONS = [
    ('ntf-1', 'landlord-1', 'payment', 'Payment received', 'Ada Emmanuel paid rent for A101',
     datetime(2025, 12, 5, 10, 0), True),
    ('ntf-2', 'landlord-1', 'maintenance', 'New maintenance request', 'AC not cooling in A101',
     datetime(2025, 12, 10, 14, 0), False),
    ('ntf-3', 'landlord-1', 'overdue', 'Rent overdue', 'John Musa is overdue for B202',
     datetime(2025, 12, 6, 9, 0), False),
    ('ntf-4', 'landlord-1', 'message', 'New message', 'John Musa sent you a message',
     datetime(2025, 12, 12, 10, 0), False),
    ('ntf-5', 'tenant-1', 'payment', 'Payment successful', 'Your December rent was received',
     datetime(2025, 12, 5, 10, 1), False),
    ('ntf-6', 'manager-1', 'maintenance', 'Request assigned', 'Sink not working in A203',
     datetime(2025, 12, 10, 12, 0), False),
]


def seed_demo_data():
    """Loads the demo portfolio into an empty database. Returns False if data already exists."""
    if db.session.execute(db.select(LandlordRow).limit(1)).first() is not None:
        logger.info("database already has data; skipping demo seed")
        return False

    for lid, name, email in LANDLORDS:
        db.session.add(LandlordRow(id=lid, name=name, email=email))
    properties = {}
    for pid, owner, name, address, rent, due, status, amenities in PROPERTIES:
        properties[pid] = PropertyRow(
            id=pid, owner_id=owner, name=name, address=address, monthly_rent=naira(rent),
            next_due_date=due, status=status, amenities=amenities,
        )
        db.session.add(properties[pid])
    for (uid, pid, label, unit_type, beds, baths, sqft, floor, rent, caution,
         status, rent_status, tenant_id) in UNITS:
        db.session.add(UnitRow(
            id=uid, property_id=pid, label=label, unit_type=unit_type, bedrooms=beds,
            bathrooms=baths, size_sqft=sqft, floor=floor, monthly_rent=naira(rent),
            caution_fee=naira(caution), status=status, rent_status=rent_status,
            amenities=['Air Conditioning', 'Prepaid Meter'], tenant_id=tenant_id,
            next_due_date=properties[pid].next_due_date,
        ))
    for tid, pid, uid, name, email, phone in TENANTS:
        db.session.add(TenantRow(
            id=tid, property_id=pid, unit_id=uid, name=name, email=email, phone=phone,
            lease_start=date(2025, 1, 1), lease_end=date(2026, 12, 31),
            next_payment_date=properties[pid].next_due_date,
        ))
    for mid, user, landlord, name, email, phone, status, assigned, permissions, restricted in MANAGERS:
        db.session.add(ManagerRow(
            id=mid, user_id=user, landlord_id=landlord, name=name, email=email, phone=phone,
            status=status, permissions=permissions, restricted=restricted,
            last_active_at=datetime(2025, 12, 12, 8, 0),
            assigned_properties=[properties[p] for p in assigned],
        ))
    for pay_id, txn, pid, uid, tid, amount, day, method, status in PAYMENTS:
        db.session.add(PaymentRow(
            id=pay_id, transaction_id=txn, property_id=pid, unit_id=uid, tenant_id=tid,
            amount=naira(amount), date=day, method=method, status=status,
        ))
    for (rid, ref, pid, uid, tid, kind, sub_type, priority, status, reported,
         resolved, detail) in MAINTENANCE:
        db.session.add(MaintenanceRow(
            id=rid, reference=ref, property_id=pid, unit_id=uid, tenant_id=tid, type=kind,
            sub_type=sub_type, priority=priority, status=status, reported_date=reported,
            resolved_date=resolved, additional_detail=detail,
        ))
    for did, pid, title, kind, size, uploaded in DOCUMENTS:
        db.session.add(DocumentRow(
            id=did, property_id=pid, title=title, type=kind, size_bytes=size, uploaded_date=uploaded,
        ))
    for cid, owner, counterpart, name, role, pid, uid, messages in CONVERSATIONS:
        db.session.add(ConversationRow(
            id=cid, owner_id=owner, counterpart_id=counterpart, counterpart_name=name,
            counterpart_role=role, property_id=pid, unit_id=uid,
        ))
        for mid, sender, text, ts, is_read in messages:
            db.session.add(MessageRow(
                id=mid, conversation_id=cid, sender_id=sender, text=text, timestamp=ts, is_read=is_read,
            ))
    for api_id, recipient, kind, title, description, ts, is_read in NOTIFICATIONS:
        db.session.add(NotificationRow(
            id=api_id, api_id=api_id, recipient_id=recipient, type=kind, title=title,
            description=description, time=ts, is_read=is_read,
        ))

    db.session.commit()
    logger.info("seeded demo portfolio: %d landlords, %d properties, %d units",
                len(LANDLORDS), len(PROPERTIES), len(UNITS))
    return True


def register_commands(app):
    @app.cli.command('seed-demo')
    def seed_demo():
        """Create tables and load the demo portfolio."""
        db.create_all()
        if seed_demo_data():
            print("Seeded demo portfolio.")
        else:
            print("Database already has data; nothing to do.")
