# services package: the pure view engine plus the snapshot loader

from .relations import related_of, related_one, validate_integrity
from .stats import compute_portfolio_stats, compute_property_stats, occupancy_percent
from .query import PageRequest, QuerySpec, query
from .scoping import ScopedView, available_landlords, scope
from .notifications import NotificationStateMachine

__all__ = [
    "related_of",
    "related_one",
    "validate_integrity",
    "compute_portfolio_stats",
    "compute_property_stats",
    "occupancy_percent",
    "PageRequest",
    "QuerySpec",
    "query",
    "ScopedView",
    "available_landlords",
    "scope",
    "NotificationStateMachine",
]
