"""Request helpers shared by the blueprints: who is asking, what page, which snapshot."""
from datetime import date

from flask import abort, current_app, jsonify, request

from ..config import EngineConfig
from ..entities import ActingContext, Role, month_period
from ..services.query import PageRequest, Page, QuerySpec, query, sort_option
from ..services.scoping import is_known_user, scope
from ..services.snapshot import load_snapshot


def acting_context():
    """Builds the ActingContext from the X-User-* headers (dev auth, no sessions)."""
    role = request.headers.get('X-User-Role', '').strip().lower()
    user_id = request.headers.get('X-User-Id', '').strip()
    if not role or not user_id:
        abort(401, description='X-User-Role and X-User-Id headers are required')
    try:
        role = Role(role)
    except ValueError:
        abort(400, description=f'Unknown role {role!r}')
    landlord_id = request.headers.get('X-Selected-Landlord', '').strip() or None
    return ActingContext(role=role, user_id=user_id, selected_landlord_id=landlord_id)


def scoped_view():
    """Loads a fresh snapshot and narrows it to the acting user."""
    context = acting_context()
    store = load_snapshot()
    return scope(store, context), store


def require_role(view, *roles):
    if view.role not in roles:
        abort(403, description=f'{view.role.value} cannot perform this action')


def _int_arg(name, default):
    raw = request.args.get(name)
    if raw is None or raw == '':
        return default
    try:
        return int(raw)
    except ValueError:
        abort(400, description=f'{name} must be an integer')


def page_request():
    size = min(_int_arg('per_page', EngineConfig.DEFAULT_PAGE_SIZE), EngineConfig.MAX_PAGE_SIZE)
    return PageRequest(index=_int_arg('page', 1), size=size)


def comparator(registry, default=None):
    try:
        return sort_option(registry, request.args.get('sort') or default)
    except ValueError as exc:
        abort(400, description=str(exc))


def csv_arg(name):
    raw = request.args.get(name) or ''
    return [part.strip() for part in raw.split(',') if part.strip()]


def period_arg():
    """?period=YYYY-MM, defaulting to the current calendar month."""
    raw = request.args.get('period')
    if not raw:
        today = date.today()
        return month_period(today.year, today.month)
    try:
        year, month = (int(part) for part in raw.split('-'))
        return month_period(year, month)
    except ValueError:
        abort(400, description='period must be YYYY-MM')


def paged(rows, predicates=(), sort=None, extra=None):
    page = query(rows, QuerySpec(predicates=tuple(predicates), comparator=sort, page=page_request()))
    return page_response(page, extra=extra)


def page_response(page: Page, serialize=None, extra=None):
    body = page.to_dict(serialize)
    if extra:
        body.update(extra)
    return jsonify(body), 200


def notification_machine(store, context):
    """The session-scoped state machine for a user the snapshot knows about."""
    if not is_known_user(store, context):
        abort(403, description=f'No {context.role.value} account {context.user_id!r}')
    return current_app.extensions['dwella.notifications'].machine(context.user_id)


# --- JSON body fields; a malformed field aborts with 400 ---

def json_body(*required):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        abort(400, description='Request body must be a JSON object')
    missing = [name for name in required if not data.get(name)]
    if missing:
        abort(400, description=f"{', '.join(missing)} required")
    return data


def int_field(data, name, default=0, minimum=0):
    value = data.get(name, default)
    if not isinstance(value, int) or isinstance(value, bool) or value < minimum:
        abort(400, description=f'{name} must be an integer of at least {minimum}')
    return value


def date_field(data, name, default=None):
    raw = data.get(name)
    if raw in (None, ''):
        return default
    try:
        return date.fromisoformat(raw)
    except (TypeError, ValueError):
        abort(400, description=f'{name} must be a YYYY-MM-DD date')


def string_list_field(data, name):
    values = data.get(name, [])
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        abort(400, description=f'{name} must be a list of strings')
    return values


def enum_field(data, name, enum_type, default=None):
    raw = data.get(name)
    if raw is None:
        return default
    try:
        return enum_type(raw)
    except ValueError:
        abort(400, description=f"{name} must be one of {', '.join(e.value for e in enum_type)}")
