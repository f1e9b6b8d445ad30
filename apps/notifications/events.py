"""
Semantic household events.

Events are delivered only after the surrounding transaction commits, so a
rolled-back membership or ledger change never reaches connected clients.
"""

import logging

from django.db import transaction

from .registry import get_connection_registry


logger = logging.getLogger(__name__)


MEMBER_JOINED = 'member-joined'
MEMBER_LEFT = 'member-left'
ADMIN_TRANSFERRED = 'admin-transferred'
REMOVAL_REQUEST_CREATED = 'removal-request-created'
REMOVAL_RESOLVED = 'removal-resolved'
EXPENSE_CREATED = 'expense-created'

HOUSEHOLD_EVENTS = (
    MEMBER_JOINED,
    MEMBER_LEFT,
    ADMIN_TRANSFERRED,
    REMOVAL_REQUEST_CREATED,
    REMOVAL_RESOLVED,
    EXPENSE_CREATED,
)


def build_payload(household_id, affected_user_ids=(), **extra):
    payload = {
        'household_id': str(household_id),
        'affected_user_ids': [str(user_id) for user_id in affected_user_ids],
    }
    payload.update(extra)
    return payload


def emit_household_event(household_id, event, affected_user_ids=(), joined_user_id=None,
                         departed_user_ids=(), **extra):
    """
    Schedule a household event for delivery after commit.

    Args:
        household_id: Household the event belongs to
        event: One of HOUSEHOLD_EVENTS
        affected_user_ids: Users the event is about
        joined_user_id: User whose connection should move into the household room
        departed_user_ids: Users whose connections should leave the household room
        **extra: Additional JSON-serializable payload fields

    Raises:
        ValueError: If event is not a known household event
    """
    if event not in HOUSEHOLD_EVENTS:
        raise ValueError(f"Unknown household event: {event}")

    payload = build_payload(household_id, affected_user_ids, **extra)

    def deliver():
        registry = get_connection_registry()
        if joined_user_id is not None:
            registry.assign_household(joined_user_id, household_id)
        for user_id in departed_user_ids:
            registry.assign_household(user_id, None)
        registry.broadcast(household_id, event, payload)
        # Departed users still learn about their own removal
        for user_id in departed_user_ids:
            registry.send_to_user(user_id, event, payload)
        logger.info("Emitted %s for household %s", event, household_id)

    transaction.on_commit(deliver)
    return payload


def release_connections(user_ids):
    """
    Take users' connections out of their household room after commit.

    Used when a household disappears without an event to carry the move.
    """
    user_ids = list(user_ids)

    def release():
        registry = get_connection_registry()
        for user_id in user_ids:
            registry.assign_household(user_id, None)

    transaction.on_commit(release)
