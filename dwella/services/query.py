# dwella/services/query.py
"""
Filter / sort / paginate pipeline shared by every list view.

Works over any iterable of entities or row dicts. Predicates are ANDed,
sorting is stable (ties keep their incoming order) and pages are 1-indexed.
"""
import logging
import math
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Callable, Optional, Tuple

from ..config import EngineConfig
from ..errors import InvalidPageRequestError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageRequest:
    index: int = 1
    size: int = EngineConfig.DEFAULT_PAGE_SIZE


@dataclass(frozen=True)
class QuerySpec:
    predicates: Tuple[Callable, ...] = ()
    comparator: Optional[Callable] = None
    page: PageRequest = field(default_factory=PageRequest)


@dataclass(frozen=True)
class Page:
    items: tuple
    total_count: int
    page_count: int
    index: int
    size: int

    def to_dict(self, serialize=None):
        items = [serialize(i) for i in self.items] if serialize else list(self.items)
        return {
            'items': items,
            'total_count': self.total_count,
            'page_count': self.page_count,
            'page': self.index,
            'per_page': self.size,
        }


def _valid(value):
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


def _checked_page(page, strict):
    if _valid(page.index) and _valid(page.size):
        return page
    if strict:
        raise InvalidPageRequestError(page.index, page.size)
    index = page.index if _valid(page.index) else 1
    size = page.size if _valid(page.size) else EngineConfig.DEFAULT_PAGE_SIZE
    logger.warning("clamped page request index=%r size=%r to %d/%d", page.index, page.size, index, size)
    return PageRequest(index, size)


def query(collection, spec=None, strict=None):
    """
    Applies spec.predicates, then spec.comparator, then the spec.page window.

    A page past the end comes back empty with correct totals; page_count is
    0 for an empty result.
    """
    if spec is None:
        spec = QuerySpec()
    if strict is None:
        strict = EngineConfig.STRICT_PAGINATION
    page = _checked_page(spec.page, strict)

    items = [item for item in collection if all(p(item) for p in spec.predicates)]
    if spec.comparator is not None:
        # sorted() is stable: equal elements keep their relative order
        items = sorted(items, key=cmp_to_key(spec.comparator))

    total = len(items)
    page_count = math.ceil(total / page.size)
    start = (page.index - 1) * page.size
    return Page(
        items=tuple(items[start:start + page.size]),
        total_count=total,
        page_count=page_count,
        index=page.index,
        size=page.size,
    )


# --- comparators ---

def _get(item, name):
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name)


def _key(key):
    if callable(key):
        return key
    return lambda item: _get(item, key)


def _cmp(a, b):
    # None sorts after every value
    if a is None or b is None:
        return (a is None) - (b is None)
    return (a > b) - (a < b)


def ascending(key):
    k = _key(key)
    return lambda a, b: _cmp(k(a), k(b))


def descending(key):
    k = _key(key)

    def compare(a, b):
        x, y = k(a), k(b)
        if x is None or y is None:
            return _cmp(x, y)
        return _cmp(y, x)
    return compare


def casefolded(name):
    def key(item):
        value = _get(item, name)
        return value.casefold() if value is not None else None
    return key


# --- predicates ---

def _plain(value):
    return getattr(value, 'value', value)


def field_equals(name, value):
    value = _plain(value)
    return lambda item: _plain(_get(item, name)) == value


def field_in(name, values):
    values = {_plain(v) for v in values}
    return lambda item: _plain(_get(item, name)) in values


def text_search(text, *names):
    """Case-insensitive substring match against any of the named fields."""
    needle = (text or '').strip().casefold()

    def matches(item):
        if not needle:
            return True
        for name in names:
            value = _get(item, name)
            if value and needle in str(value).casefold():
                return True
        return False
    return matches


def amenities_include(amenities):
    """Item must offer every requested amenity."""
    wanted = {a.casefold() for a in amenities}

    def matches(item):
        have = {a.casefold() for a in (_get(item, 'amenities') or ())}
        return wanted <= have
    return matches


def occupancy_band(band, name='occupancy_percent'):
    high = EngineConfig.HIGH_OCCUPANCY
    low = EngineConfig.LOW_OCCUPANCY
    bands = {
        'high': lambda v: v is not None and v >= high,
        'medium': lambda v: v is not None and low <= v < high,
        'low': lambda v: v is not None and v < low,
    }
    if band not in bands:
        raise ValueError(f"unknown occupancy band {band!r}; expected one of {sorted(bands)}")
    test = bands[band]
    return lambda item: test(_get(item, name))


# --- named sort options offered by the list screens ---

PROPERTY_SORTS = {
    'name-asc': ascending(casefolded('name')),
    'name-desc': descending(casefolded('name')),
    'rent-high': descending('monthly_rent'),
    'rent-low': ascending('monthly_rent'),
    'occupancy-high': descending('occupancy_percent'),
    'occupancy-low': ascending('occupancy_percent'),
    'units': descending('unit_count'),
}

UNIT_SORTS = {
    'label': ascending(casefolded('label')),
    'rent-high': descending('monthly_rent'),
    'rent-low': ascending('monthly_rent'),
    'due-date': ascending('next_due_date'),
}

_PRIORITY_RANK = {'high': 0, 'medium': 1, 'low': 2}

MAINTENANCE_SORTS = {
    'newest': descending('reported_date'),
    'oldest': ascending('reported_date'),
    'priority': ascending(lambda r: _PRIORITY_RANK.get(_plain(_get(r, 'priority')))),
}

PAYMENT_SORTS = {
    'newest': descending('date'),
    'oldest': ascending('date'),
    'amount-high': descending('amount'),
}


def sort_option(registry, name):
    if name is None:
        return None
    try:
        return registry[name]
    except KeyError:
        raise ValueError(f"unknown sort {name!r}; expected one of {sorted(registry)}") from None
