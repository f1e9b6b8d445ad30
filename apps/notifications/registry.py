"""
Connection registry for real-time household events.

The transport layer (websocket server, push gateway) registers live
connections here; domain code only ever talks to the registry interface.

Usage:
    from apps.notifications.registry import get_connection_registry

    registry = get_connection_registry()
    registry.register(user.id, connection, household_id=user.household_id)
    registry.broadcast(household.id, 'member-joined', {'user_id': str(user.id)})

A connection is any object with a ``send(event, payload)`` method.
"""

import logging
import threading
from collections import defaultdict

from django.conf import settings
from django.utils.module_loading import import_string


logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """Interface for delivering household events to connected users."""

    def register(self, user_id, connection, household_id=None):
        raise NotImplementedError

    def unregister(self, user_id):
        raise NotImplementedError

    def assign_household(self, user_id, household_id):
        """Move a user's connection into a household room (None leaves all rooms)."""
        raise NotImplementedError

    def broadcast(self, household_id, event, payload):
        raise NotImplementedError

    def send_to_user(self, user_id, event, payload):
        raise NotImplementedError


class InMemoryConnectionRegistry(ConnectionRegistry):
    """Process-local registry keyed by user and household."""

    def __init__(self):
        self._lock = threading.Lock()
        self._connections = {}
        self._households = defaultdict(set)
        self._user_household = {}

    def register(self, user_id, connection, household_id=None):
        key = str(user_id)
        with self._lock:
            self._connections[key] = connection
        if household_id is not None:
            self.assign_household(key, household_id)

    def unregister(self, user_id):
        key = str(user_id)
        with self._lock:
            self._connections.pop(key, None)
            household_key = self._user_household.pop(key, None)
            if household_key is not None:
                self._households[household_key].discard(key)

    def assign_household(self, user_id, household_id):
        key = str(user_id)
        with self._lock:
            previous = self._user_household.pop(key, None)
            if previous is not None:
                self._households[previous].discard(key)
            if household_id is not None:
                self._user_household[key] = str(household_id)
                self._households[str(household_id)].add(key)

    def members_of(self, household_id):
        with self._lock:
            return set(self._households.get(str(household_id), set()))

    def broadcast(self, household_id, event, payload):
        with self._lock:
            targets = [
                self._connections[user_key]
                for user_key in self._households.get(str(household_id), set())
                if user_key in self._connections
            ]
        logger.debug("Broadcasting %s to household %s (%d connections)", event, household_id, len(targets))
        for connection in targets:
            connection.send(event, payload)
        return len(targets)

    def send_to_user(self, user_id, event, payload):
        with self._lock:
            connection = self._connections.get(str(user_id))
        if connection is None:
            return False
        connection.send(event, payload)
        return True


_registry = None


def get_connection_registry():
    """Return the active registry, building it from settings on first use."""
    global _registry
    if _registry is None:
        registry_path = getattr(
            settings,
            'HOUSEHOLD_CONNECTION_REGISTRY',
            'apps.notifications.registry.InMemoryConnectionRegistry'
        )
        _registry = import_string(registry_path)()
    return _registry


def set_connection_registry(registry):
    """Swap the active registry (transport startup, tests). Returns the previous one."""
    global _registry
    previous = _registry
    _registry = registry
    return previous
