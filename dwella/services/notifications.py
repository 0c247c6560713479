# dwella/services/notifications.py
"""
Notification read-state machine for one user session.

    Unseen --mark_read--> Read (pending) --confirm--> Read
                               |
                            rollback
                               v
                            Unseen

A read notification never becomes unread again, except through rollback of
a read that the transport layer reported as failed.
"""
import dataclasses
import logging
import threading
from collections import OrderedDict

from ..config import EngineConfig
from ..errors import StaleMutationError

logger = logging.getLogger(__name__)


class NotificationStateMachine:

    def __init__(self, strict=None):
        self.strict = EngineConfig.STRICT_NOTIFICATIONS if strict is None else strict
        self._items = OrderedDict()      # api_id -> Notification
        self._pending = {}               # api_id -> is_read before an unconfirmed mark_read
        self._server_count = None        # last unread count reported by the server

    # --- reads ---

    def notifications(self):
        return list(self._items.values())

    def latest(self, limit=None):
        limit = EngineConfig.NOTIFICATION_PREVIEW_LIMIT if limit is None else limit
        ordered = sorted(
            self._items.values(),
            key=lambda n: n.time.timestamp() if n.time else float('-inf'),
            reverse=True,
        )
        return ordered[:limit]

    def get(self, api_id):
        return self._items.get(api_id)

    def __contains__(self, api_id):
        return api_id in self._items

    def __len__(self):
        return len(self._items)

    @property
    def local_unread_count(self):
        return sum(1 for n in self._items.values() if not n.is_read)

    @property
    def unread_count(self):
        """The badge count: server value (with optimistic adjustments) once known."""
        if self._server_count is None:
            return self.local_unread_count
        return self._server_count

    # --- transitions ---

    def receive(self, notification):
        """Inserts by api_id. Returns True if it was new."""
        current = self._items.get(notification.api_id)
        if current is None:
            self._items[notification.api_id] = notification
            return True
        if notification.is_read and not current.is_read:
            # the server already saw it read; take the upgrade, never the downgrade
            self._items[notification.api_id] = dataclasses.replace(current, is_read=True)
            self._pending.pop(notification.api_id, None)
        return False

    def receive_all(self, notifications):
        return sum(1 for n in notifications if self.receive(n))

    def mark_read(self, api_ids):
        """Marks the given ids read. Returns the ids that actually changed."""
        api_ids = list(dict.fromkeys(api_ids))
        unknown = [i for i in api_ids if i not in self._items]
        if unknown:
            if self.strict:
                raise StaleMutationError(unknown)
            logger.debug("ignoring mark-read for unknown notifications %s", unknown)

        changed = []
        for api_id in api_ids:
            current = self._items.get(api_id)
            if current is None or current.is_read:
                continue
            self._pending[api_id] = current.is_read
            self._items[api_id] = dataclasses.replace(current, is_read=True)
            changed.append(api_id)

        if changed and self._server_count is not None:
            self._server_count = max(0, self._server_count - len(changed))
        return changed

    def mark_all_read(self, collection=None):
        if collection is None:
            collection = self._items.values()
        return self.mark_read([n.api_id for n in collection if not n.is_read])

    def reconcile_unread_count(self, server_count):
        """The server's count wins over whatever was derived locally."""
        if server_count < 0:
            raise ValueError(f"unread count cannot be negative: {server_count}")
        self._server_count = int(server_count)
        return self._server_count

    def confirm(self, api_ids):
        """The transport acknowledged these reads; they can no longer be rolled back."""
        confirmed = [i for i in api_ids if self._pending.pop(i, None) is not None]
        return confirmed

    def rollback(self, api_ids):
        """Undo unconfirmed mark_read calls after the transport reported failure."""
        restored = []
        for api_id in api_ids:
            if api_id not in self._pending:
                continue
            previous = self._pending.pop(api_id)
            self._items[api_id] = dataclasses.replace(self._items[api_id], is_read=previous)
            if not previous:
                restored.append(api_id)
        if restored and self._server_count is not None:
            self._server_count += len(restored)
        if restored:
            logger.info("rolled back read state for %s", restored)
        return restored


class SessionRegistry:
    """
    One state machine per user, shared across requests.

    Holds at most `max_sessions` machines; the least recently used one is
    dropped first. Safe to use from a threaded server.
    """

    def __init__(self, max_sessions=None):
        self.max_sessions = EngineConfig.NOTIFICATION_SESSION_LIMIT if max_sessions is None else max_sessions
        self._lock = threading.Lock()
        self._machines = OrderedDict()

    def machine(self, user_id):
        with self._lock:
            machine = self._machines.get(user_id)
            if machine is None:
                machine = NotificationStateMachine()
                self._machines[user_id] = machine
                while len(self._machines) > self.max_sessions:
                    evicted, _ = self._machines.popitem(last=False)
                    logger.debug("evicted notification session %s", evicted)
            else:
                self._machines.move_to_end(user_id)
            return machine

    def __contains__(self, user_id):
        with self._lock:
            return user_id in self._machines

    def __len__(self):
        with self._lock:
            return len(self._machines)
