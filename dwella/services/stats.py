# dwella/services/stats.py
"""
Aggregation engine: derived statistics over entity collections.

Every figure is recomputed from unit/payment/request rows on each call; no
percentage or count is ever read back from a stored field.
"""
from dataclasses import dataclass, asdict
from typing import Optional
from datetime import date

from ..entities import (
    PaymentStatus,
    PropertyStatus,
    RentStatus,
    RequestStatus,
    UnitStatus,
)


def round_half_up_div(numerator, denominator):
    """Integer division rounded to nearest, halves away from zero (non-negative inputs)."""
    return (2 * numerator + denominator) // (2 * denominator)


def occupancy_percent(occupied, total):
    if total <= 0:
        return 0
    return round_half_up_div(occupied * 100, total)


@dataclass(frozen=True)
class PropertyStats:
    property_id: str
    total_units: int
    occupied_units: int
    vacant_units: int
    units_under_maintenance: int
    occupancy_percent: int
    rent_collected: int
    overdue_amount: int
    overdue_count: int

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class PortfolioStats:
    total_properties: int
    pending_verification: int
    total_units: int
    occupied_units: int
    vacant_units: int
    units_under_maintenance: int
    occupancy_percent: int
    rent_collected: int
    overdue_amount: int
    overdue_count: int

    def to_dict(self):
        return asdict(self)


def _unit_figures(units):
    occupied = sum(1 for u in units if u.status == UnitStatus.OCCUPIED)
    vacant = sum(1 for u in units if u.status == UnitStatus.VACANT)
    overdue = [u for u in units if u.rent_status == RentStatus.OVERDUE]
    return {
        'total_units': len(units),
        'occupied_units': occupied,
        'vacant_units': vacant,
        'occupancy_percent': occupancy_percent(occupied, len(units)),
        # overdue is a unit-level flag, summed over the unit's rent
        'overdue_amount': sum(u.monthly_rent for u in overdue),
        'overdue_count': len(overdue),
    }


def rent_collected(payments, period):
    return sum(
        p.amount for p in payments
        if p.status == PaymentStatus.SUCCESS and period.contains(p.date)
    )


def units_under_maintenance(requests):
    # a unit with two in-progress requests still counts once
    return len({r.unit_id for r in requests if r.status == RequestStatus.IN_PROGRESS})


def compute_portfolio_stats(properties, units, payments, maintenance_requests, period):
    """
    Dashboard summary cards for a set of properties.

    Units, payments and requests outside `properties` are ignored, so the
    portfolio figures always equal the sum of the per-property ones.
    """
    properties = list(properties)
    property_ids = {p.id for p in properties}
    units = [u for u in units if u.property_id in property_ids]
    payments = [p for p in payments if p.property_id in property_ids]
    requests = [r for r in maintenance_requests if r.property_id in property_ids]

    return PortfolioStats(
        total_properties=len(properties),
        pending_verification=sum(1 for p in properties if p.status == PropertyStatus.PENDING),
        units_under_maintenance=units_under_maintenance(requests),
        rent_collected=rent_collected(payments, period),
        **_unit_figures(units),
    )


def compute_property_stats(prop, units, payments, maintenance_requests, period):
    units = [u for u in units if u.property_id == prop.id]
    payments = [p for p in payments if p.property_id == prop.id]
    requests = [r for r in maintenance_requests if r.property_id == prop.id]

    return PropertyStats(
        property_id=prop.id,
        units_under_maintenance=units_under_maintenance(requests),
        rent_collected=rent_collected(payments, period),
        **_unit_figures(units),
    )


def maintenance_status_counts(requests):
    """Tab badges on the maintenance page."""
    counts = {'all': 0, 'new': 0, 'in_progress': 0, 'resolved': 0}
    for r in requests:
        counts['all'] += 1
        counts[r.status.value] += 1
    return counts


def unit_summary(units):
    """Header figures on the units page."""
    units = list(units)
    figures = _unit_figures(units)
    return {
        'total_units': figures['total_units'],
        'occupied_units': figures['occupied_units'],
        'occupancy_rate': figures['occupancy_percent'],
        'total_monthly_rent': sum(u.monthly_rent for u in units),
        'outstanding_rent': figures['overdue_amount'],
    }


@dataclass(frozen=True)
class TenantPaymentSummary:
    total_paid: int
    paid_count: int
    average_payment: int
    failed_count: int
    last_payment_date: Optional[date]

    def to_dict(self):
        data = asdict(self)
        if self.last_payment_date:
            data['last_payment_date'] = self.last_payment_date.isoformat()
        return data


def tenant_payment_summary(payments):
    paid = [p for p in payments if p.status == PaymentStatus.SUCCESS]
    total = sum(p.amount for p in paid)
    return TenantPaymentSummary(
        total_paid=total,
        paid_count=len(paid),
        average_payment=round_half_up_div(total, len(paid)) if paid else 0,
        failed_count=sum(1 for p in payments if p.status == PaymentStatus.FAILED),
        last_payment_date=max((p.date for p in paid), default=None),
    )
