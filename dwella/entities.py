# dwella/entities.py
"""
Plain entity types and the immutable per-snapshot EntityStore.

Currency is always an integer amount in minor units (kobo). Formatting to
major units is a presentation concern and never happens here.
"""
import dataclasses
import enum
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from types import MappingProxyType
from typing import FrozenSet, Optional, Tuple


class PropertyStatus(str, enum.Enum):
    ACTIVE = 'active'
    INACTIVE = 'inactive'
    PENDING = 'pending'


class UnitStatus(str, enum.Enum):
    OCCUPIED = 'occupied'
    VACANT = 'vacant'
    MAINTENANCE = 'maintenance'


class RentStatus(str, enum.Enum):
    PAID = 'paid'
    OVERDUE = 'overdue'


class ManagerStatus(str, enum.Enum):
    ACTIVE = 'active'
    INACTIVE = 'inactive'


class Permission(str, enum.Enum):
    MAINTENANCE = 'maintenance'
    CHAT = 'chat'
    PAYMENTS = 'payments'


class PaymentStatus(str, enum.Enum):
    SUCCESS = 'success'
    FAILED = 'failed'


class Priority(str, enum.Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'


class RequestStatus(str, enum.Enum):
    NEW = 'new'
    IN_PROGRESS = 'in_progress'
    RESOLVED = 'resolved'


class NotificationType(str, enum.Enum):
    PAYMENT = 'payment'
    MAINTENANCE = 'maintenance'
    MESSAGE = 'message'
    OVERDUE = 'overdue'
    OTHER = 'other'


class Role(str, enum.Enum):
    LANDLORD = 'landlord'
    MANAGER = 'manager'
    TENANT = 'tenant'


def _plain(value):
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return sorted(_plain(v) for v in value)
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if dataclasses.is_dataclass(value):
        return value.to_dict()
    return value


class Record:
    """Mixin giving every entity a JSON-ready to_dict()."""

    def to_dict(self):
        return {f.name: _plain(getattr(self, f.name)) for f in dataclasses.fields(self)}


@dataclass(frozen=True)
class Landlord(Record):
    id: str
    name: str
    email: str = ''


@dataclass(frozen=True)
class Property(Record):
    id: str
    owner_id: Optional[str]
    name: str
    address: str = ''
    monthly_rent: Optional[int] = 0
    next_due_date: Optional[date] = None
    status: PropertyStatus = PropertyStatus.ACTIVE
    amenities: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class Unit(Record):
    id: str
    property_id: str
    label: str
    bedrooms: int = 0
    bathrooms: int = 0
    size_sqft: int = 0
    floor: str = ''
    monthly_rent: int = 0
    caution_fee: int = 0
    status: UnitStatus = UnitStatus.VACANT
    rent_status: RentStatus = RentStatus.PAID
    amenities: FrozenSet[str] = frozenset()
    tenant_id: Optional[str] = None
    next_due_date: Optional[date] = None
    unit_type: str = ''


@dataclass(frozen=True)
class Tenant(Record):
    id: str
    property_id: str
    unit_id: str
    name: str
    email: str = ''
    phone: str = ''
    lease_start: Optional[date] = None
    lease_end: Optional[date] = None
    next_payment_date: Optional[date] = None

    @property
    def status(self):
        # a tenant row only exists while the lease is active
        return UnitStatus.OCCUPIED

    def to_dict(self):
        data = super().to_dict()
        data['status'] = self.status.value
        return data


@dataclass(frozen=True)
class Manager(Record):
    id: str
    user_id: str
    landlord_id: str
    name: str
    email: str = ''
    phone: str = ''
    status: ManagerStatus = ManagerStatus.ACTIVE
    assigned_property_ids: FrozenSet[str] = frozenset()
    permissions: FrozenSet[Permission] = frozenset()
    last_active_at: Optional[datetime] = None
    restricted: bool = True


@dataclass(frozen=True)
class PaymentRecord(Record):
    id: str
    transaction_id: str
    property_id: str
    unit_id: str
    tenant_id: str
    amount: int
    date: date
    method: str = ''
    status: PaymentStatus = PaymentStatus.SUCCESS


@dataclass(frozen=True)
class MaintenanceRequest(Record):
    id: str
    property_id: str
    unit_id: str
    tenant_id: Optional[str]
    type: str
    sub_type: str = ''
    priority: Priority = Priority.MEDIUM
    status: RequestStatus = RequestStatus.NEW
    reported_date: Optional[date] = None
    resolved_date: Optional[date] = None
    additional_detail: Optional[str] = None
    reference: str = ''


@dataclass(frozen=True)
class Document(Record):
    id: str
    property_id: str
    title: str
    type: str = ''
    size_bytes: int = 0
    uploaded_date: Optional[date] = None


@dataclass(frozen=True)
class Notification(Record):
    id: str
    api_id: str
    type: NotificationType
    title: str
    description: str = ''
    time: Optional[datetime] = None
    is_read: bool = False
    recipient_id: Optional[str] = None


@dataclass(frozen=True)
class Message(Record):
    id: str
    sender_id: str
    text: str
    timestamp: Optional[datetime] = None
    is_read: bool = False


@dataclass(frozen=True)
class Conversation(Record):
    id: str
    owner_id: str
    counterpart_id: str
    counterpart_name: str
    counterpart_role: Role
    messages: Tuple[Message, ...] = ()
    property_id: Optional[str] = None
    unit_id: Optional[str] = None


@dataclass(frozen=True)
class ActingContext:
    role: Role
    user_id: str
    selected_landlord_id: Optional[str] = None

    def with_landlord(self, landlord_id):
        return dataclasses.replace(self, selected_landlord_id=landlord_id)


@dataclass(frozen=True)
class DateRange:
    """Half-open date range: start is included, end is not."""
    start: date
    end: date

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"period end {self.end} is before start {self.start}")

    def contains(self, day):
        if isinstance(day, datetime):
            day = day.date()
        return self.start <= day < self.end

    def to_dict(self):
        return {'start': self.start.isoformat(), 'end': self.end.isoformat()}


def month_period(year, month):
    """The calendar month as a half-open range [1st of month, 1st of next month)."""
    start = date(year, month, 1)
    if month == 12:
        end = date(year + 1, 1, 1)
    else:
        end = date(year, month + 1, 1)
    return DateRange(start, end)


def day_period(day):
    return DateRange(day, day + timedelta(days=1))


# Collection attribute on EntityStore for each entity type
COLLECTIONS = {
    Landlord: 'landlords',
    Property: 'properties',
    Unit: 'units',
    Tenant: 'tenants',
    Manager: 'managers',
    PaymentRecord: 'payments',
    MaintenanceRequest: 'maintenance_requests',
    Document: 'documents',
    Conversation: 'conversations',
    Notification: 'notifications',
}


def _frozen(mapping):
    return MappingProxyType(dict(mapping))


def _keyed(entities):
    keyed = {}
    for entity in entities:
        keyed[entity.id] = entity
    return keyed


@dataclass(frozen=True)
class EntityStore:
    """
    One read-only, insertion-ordered id -> entity mapping per entity type.

    Stores are values: every write returns a new store and leaves the
    receiver untouched, so views computed from an old snapshot stay valid.
    """
    landlords: MappingProxyType = field(default_factory=lambda: _frozen({}))
    properties: MappingProxyType = field(default_factory=lambda: _frozen({}))
    units: MappingProxyType = field(default_factory=lambda: _frozen({}))
    tenants: MappingProxyType = field(default_factory=lambda: _frozen({}))
    managers: MappingProxyType = field(default_factory=lambda: _frozen({}))
    payments: MappingProxyType = field(default_factory=lambda: _frozen({}))
    maintenance_requests: MappingProxyType = field(default_factory=lambda: _frozen({}))
    documents: MappingProxyType = field(default_factory=lambda: _frozen({}))
    conversations: MappingProxyType = field(default_factory=lambda: _frozen({}))
    notifications: MappingProxyType = field(default_factory=lambda: _frozen({}))

    @classmethod
    def build(cls, landlords=(), properties=(), units=(), tenants=(), managers=(),
              payments=(), maintenance_requests=(), documents=(), conversations=(),
              notifications=()):
        return cls(
            landlords=_frozen(_keyed(landlords)),
            properties=_frozen(_keyed(properties)),
            units=_frozen(_keyed(units)),
            tenants=_frozen(_keyed(tenants)),
            managers=_frozen(_keyed(managers)),
            payments=_frozen(_keyed(payments)),
            maintenance_requests=_frozen(_keyed(maintenance_requests)),
            documents=_frozen(_keyed(documents)),
            conversations=_frozen(_keyed(conversations)),
            notifications=_frozen(_keyed(notifications)),
        )

    def collection(self, entity_type):
        try:
            return getattr(self, COLLECTIONS[entity_type])
        except KeyError:
            raise ValueError(f"{entity_type!r} is not an entity type") from None

    def get(self, entity_type, entity_id):
        return self.collection(entity_type).get(entity_id)

    def with_entity(self, entity):
        """A new store with `entity` inserted, or replaced in place if its id exists."""
        name = COLLECTIONS.get(type(entity))
        if name is None:
            raise ValueError(f"{type(entity).__name__} is not an entity type")
        updated = dict(getattr(self, name))
        updated[entity.id] = entity
        return dataclasses.replace(self, **{name: _frozen(updated)})

    def with_collections(self, **collections):
        """A new store with whole collections swapped (iterables of entities)."""
        return dataclasses.replace(
            self, **{name: _frozen(_keyed(items)) for name, items in collections.items()}
        )

    def counts(self):
        return {name: len(getattr(self, name)) for name in COLLECTIONS.values()}
