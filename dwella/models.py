# dwella/models.py
"""
Storage rows behind the snapshot provider.

The view engine never touches these directly: services.snapshot turns them
into frozen entities once per request. Ids are strings shared with the
acting-user headers ('landlord-1', 'tenant-2'), so one user id never
collides across roles.
"""
from . import db
from .entities import (
    Conversation,
    Document,
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
    Priority,
    Property,
    PropertyStatus,
    RentStatus,
    RequestStatus,
    Role,
    Tenant,
    Unit,
    UnitStatus,
)


manager_properties = db.Table(
    'manager_property',
    db.Column('manager_id', db.String(64), db.ForeignKey('manager_row.id'), primary_key=True),
    db.Column('property_id', db.String(64), db.ForeignKey('property_row.id'), primary_key=True),
)


class LandlordRow(db.Model):
    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), nullable=False, default='')
    properties = db.relationship('PropertyRow', back_populates='owner', lazy='dynamic')

    def to_entity(self):
        return Landlord(id=self.id, name=self.name, email=self.email)


class PropertyRow(db.Model):
    id = db.Column(db.String(64), primary_key=True)
    owner_id = db.Column(db.String(64), db.ForeignKey('landlord_row.id'), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    address = db.Column(db.String(255), nullable=False, default='')
    monthly_rent = db.Column(db.Integer, nullable=False, default=0)
    next_due_date = db.Column(db.Date, nullable=True)
    status = db.Column(db.String(20), nullable=False, default='active')  # active | inactive | pending
    amenities = db.Column(db.JSON, nullable=False, default=list)

    owner = db.relationship('LandlordRow', back_populates='properties')
    units = db.relationship('UnitRow', back_populates='property', lazy='dynamic')

    def to_entity(self):
        return Property(
            id=self.id,
            owner_id=self.owner_id,
            name=self.name,
            address=self.address,
            monthly_rent=self.monthly_rent,
            next_due_date=self.next_due_date,
            status=PropertyStatus(self.status),
            amenities=frozenset(self.amenities or ()),
        )


class UnitRow(db.Model):
    id = db.Column(db.String(64), primary_key=True)
    property_id = db.Column(db.String(64), db.ForeignKey('property_row.id'), nullable=False)
    label = db.Column(db.String(50), nullable=False)
    unit_type = db.Column(db.String(100), nullable=False, default='')
    bedrooms = db.Column(db.Integer, nullable=False, default=0)
    bathrooms = db.Column(db.Integer, nullable=False, default=0)
    size_sqft = db.Column(db.Integer, nullable=False, default=0)
    floor = db.Column(db.String(20), nullable=False, default='')
    monthly_rent = db.Column(db.Integer, nullable=False, default=0)
    caution_fee = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(db.String(20), nullable=False, default='vacant')  # occupied | vacant | maintenance
    rent_status = db.Column(db.String(20), nullable=False, default='paid')  # paid | overdue
    amenities = db.Column(db.JSON, nullable=False, default=list)
    tenant_id = db.Column(db.String(64), db.ForeignKey('tenant_row.id', use_alter=True), nullable=True)
    next_due_date = db.Column(db.Date, nullable=True)

    __table_args__ = (db.UniqueConstraint('property_id', 'label', name='uq_unit_label_per_property'),)

    property = db.relationship('PropertyRow', back_populates='units')

    def to_entity(self):
        return Unit(
            id=self.id,
            property_id=self.property_id,
            label=self.label,
            bedrooms=self.bedrooms,
            bathrooms=self.bathrooms,
            size_sqft=self.size_sqft,
            floor=self.floor,
            monthly_rent=self.monthly_rent,
            caution_fee=self.caution_fee,
            status=UnitStatus(self.status),
            rent_status=RentStatus(self.rent_status),
            amenities=frozenset(self.amenities or ()),
            tenant_id=self.tenant_id,
            next_due_date=self.next_due_date,
            unit_type=self.unit_type,
        )


class TenantRow(db.Model):
    id = db.Column(db.String(64), primary_key=True)
    property_id = db.Column(db.String(64), db.ForeignKey('property_row.id'), nullable=False)
    unit_id = db.Column(db.String(64), db.ForeignKey('unit_row.id'), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), nullable=False, default='')
    phone = db.Column(db.String(50), nullable=False, default='')
    lease_start = db.Column(db.Date, nullable=True)
    lease_end = db.Column(db.Date, nullable=True)
    next_payment_date = db.Column(db.Date, nullable=True)

    def to_entity(self):
        return Tenant(
            id=self.id,
            property_id=self.property_id,
            unit_id=self.unit_id,
            name=self.name,
            email=self.email,
            phone=self.phone,
            lease_start=self.lease_start,
            lease_end=self.lease_end,
            next_payment_date=self.next_payment_date,
        )


class ManagerRow(db.Model):
    id = db.Column(db.String(64), primary_key=True)
    user_id = db.Column(db.String(64), nullable=False)
    landlord_id = db.Column(db.String(64), db.ForeignKey('landlord_row.id'), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), nullable=False, default='')
    phone = db.Column(db.String(50), nullable=False, default='')
    status = db.Column(db.String(20), nullable=False, default='active')  # active | inactive
    permissions = db.Column(db.JSON, nullable=False, default=list)
    last_active_at = db.Column(db.DateTime, nullable=True)
    restricted = db.Column(db.Boolean, nullable=False, default=True)

    assigned_properties = db.relationship('PropertyRow', secondary=manager_properties, lazy='selectin')

    def to_entity(self):
        return Manager(
            id=self.id,
            user_id=self.user_id,
            landlord_id=self.landlord_id,
            name=self.name,
            email=self.email,
            phone=self.phone,
            status=ManagerStatus(self.status),
            assigned_property_ids=frozenset(p.id for p in self.assigned_properties),
            permissions=frozenset(Permission(p) for p in self.permissions or ()),
            last_active_at=self.last_active_at,
            restricted=self.restricted,
        )


class PaymentRow(db.Model):
    id = db.Column(db.String(64), primary_key=True)
    transaction_id = db.Column(db.String(64), unique=True, nullable=False)
    property_id = db.Column(db.String(64), db.ForeignKey('property_row.id'), nullable=False)
    unit_id = db.Column(db.String(64), db.ForeignKey('unit_row.id'), nullable=False)
    tenant_id = db.Column(db.String(64), db.ForeignKey('tenant_row.id'), nullable=False)
    amount = db.Column(db.Integer, nullable=False)
    date = db.Column(db.Date, nullable=False)
    method = db.Column(db.String(50), nullable=False, default='')
    status = db.Column(db.String(20), nullable=False, default='success')  # success | failed

    def to_entity(self):
        return PaymentRecord(
            id=self.id,
            transaction_id=self.transaction_id,
            property_id=self.property_id,
            unit_id=self.unit_id,
            tenant_id=self.tenant_id,
            amount=self.amount,
            date=self.date,
            method=self.method,
            status=PaymentStatus(self.status),
        )


class MaintenanceRow(db.Model):
    id = db.Column(db.String(64), primary_key=True)
    reference = db.Column(db.String(20), nullable=False, default='')
    property_id = db.Column(db.String(64), db.ForeignKey('property_row.id'), nullable=False)
    unit_id = db.Column(db.String(64), db.ForeignKey('unit_row.id'), nullable=False)
    tenant_id = db.Column(db.String(64), db.ForeignKey('tenant_row.id'), nullable=True)
    type = db.Column(db.String(50), nullable=False)
    sub_type = db.Column(db.String(100), nullable=False, default='')
    priority = db.Column(db.String(10), nullable=False, default='medium')  # low | medium | high
    status = db.Column(db.String(20), nullable=False, default='new')  # new | in_progress | resolved
    reported_date = db.Column(db.Date, nullable=True)
    resolved_date = db.Column(db.Date, nullable=True)
    additional_detail = db.Column(db.Text, nullable=True)

    def to_entity(self):
        return MaintenanceRequest(
            id=self.id,
            property_id=self.property_id,
            unit_id=self.unit_id,
            tenant_id=self.tenant_id,
            type=self.type,
            sub_type=self.sub_type,
            priority=Priority(self.priority),
            status=RequestStatus(self.status),
            reported_date=self.reported_date,
            resolved_date=self.resolved_date,
            additional_detail=self.additional_detail,
            reference=self.reference,
        )


class DocumentRow(db.Model):
    id = db.Column(db.String(64), primary_key=True)
    property_id = db.Column(db.String(64), db.ForeignKey('property_row.id'), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(20), nullable=False, default='')
    size_bytes = db.Column(db.Integer, nullable=False, default=0)
    uploaded_date = db.Column(db.Date, nullable=True)

    def to_entity(self):
        return Document(
            id=self.id,
            property_id=self.property_id,
            title=self.title,
            type=self.type,
            size_bytes=self.size_bytes,
            uploaded_date=self.uploaded_date,
        )


class ConversationRow(db.Model):
    id = db.Column(db.String(64), primary_key=True)
    owner_id = db.Column(db.String(64), nullable=False)
    counterpart_id = db.Column(db.String(64), nullable=False)
    counterpart_name = db.Column(db.String(100), nullable=False)
    counterpart_role = db.Column(db.String(20), nullable=False)  # tenant | manager | landlord
    property_id = db.Column(db.String(64), db.ForeignKey('property_row.id'), nullable=True)
    unit_id = db.Column(db.String(64), db.ForeignKey('unit_row.id'), nullable=True)
    messages = db.relationship(
        'MessageRow', back_populates='conversation', order_by='MessageRow.id', lazy='selectin'
    )

    def to_entity(self):
        return Conversation(
            id=self.id,
            owner_id=self.owner_id,
            counterpart_id=self.counterpart_id,
            counterpart_name=self.counterpart_name,
            counterpart_role=Role(self.counterpart_role),
            messages=tuple(m.to_entity() for m in self.messages),
            property_id=self.property_id,
            unit_id=self.unit_id,
        )


class MessageRow(db.Model):
    id = db.Column(db.String(64), primary_key=True)
    conversation_id = db.Column(db.String(64), db.ForeignKey('conversation_row.id'), nullable=False)
    sender_id = db.Column(db.String(64), nullable=False)
    text = db.Column(db.Text, nullable=False)
    timestamp = db.Column(db.DateTime, nullable=True)
    is_read = db.Column(db.Boolean, nullable=False, default=False)

    conversation = db.relationship('ConversationRow', back_populates='messages')

    def to_entity(self):
        return Message(
            id=self.id,
            sender_id=self.sender_id,
            text=self.text,
            timestamp=self.timestamp,
            is_read=self.is_read,
        )


class NotificationRow(db.Model):
    id = db.Column(db.String(64), primary_key=True)
    api_id = db.Column(db.String(64), unique=True, nullable=False)
    recipient_id = db.Column(db.String(64), nullable=False)
    type = db.Column(db.String(20), nullable=False, default='other')
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False, default='')
    time = db.Column(db.DateTime, nullable=True)
    is_read = db.Column(db.Boolean, nullable=False, default=False)

    def to_entity(self):
        return Notification(
            id=self.id,
            api_id=self.api_id,
            type=NotificationType(self.type),
            title=self.title,
            description=self.description,
            time=self.time,
            is_read=self.is_read,
            recipient_id=self.recipient_id,
        )
