"""
Membership management service.

Handles joining, leaving and admin transfer with concurrency protection.
"""

import logging
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet

from apps.accounts.models import User, HouseholdRole
from apps.households.models import Household
from apps.notifications import events

from .exceptions import (
    AlreadyInHouseholdError,
    AdminMustTransferFirstError,
    CannotTransferToSelfError,
    InvalidInviteCodeError,
    NotAdminError,
    NotInHouseholdError,
    TargetNotInHouseholdError,
)
from .household_management import lock_user, normalize_invite_code


logger = logging.getLogger(__name__)


@transaction.atomic
def join_household(*, user: User, invite_code: str) -> Household:
    """
    Join a household using an invite code.

    Uses row-level locking to prevent race conditions when checking
    and assigning membership.

    Args:
        user: User joining the household
        invite_code: Invite code, any letter case

    Returns:
        The joined Household

    Raises:
        AlreadyInHouseholdError: If user already belongs to a household
        InvalidInviteCodeError: If the code does not resolve
    """
    member = lock_user(user)
    if member.household_id is not None:
        raise AlreadyInHouseholdError(
            "You are already in a household. Leave your current household first."
        )

    try:
        household = (
            Household.objects
            .select_for_update()
            .get(invite_code=normalize_invite_code(invite_code))
        )
    except Household.DoesNotExist:
        raise InvalidInviteCodeError("Invalid invite code")

    member.household = household
    member.role = HouseholdRole.MEMBER
    member.save(update_fields=['household', 'role'])

    events.emit_household_event(
        household.id,
        events.MEMBER_JOINED,
        affected_user_ids=[member.id],
        joined_user_id=member.id,
        user={'id': str(member.id), 'display_name': member.get_display_name()},
    )

    user.refresh_from_db(fields=['household', 'role'])
    logger.info("User %s joined household %s", member.id, household.id)
    return household


@transaction.atomic
def leave_household(*, user: User) -> dict:
    """
    Leave the current household.

    The admin cannot leave while other members remain; the last member
    leaving deletes the household.

    Returns:
        dict with ``household_id`` and ``household_deleted``

    Raises:
        NotInHouseholdError: If user has no household
        AdminMustTransferFirstError: If user is admin and others remain
    """
    member = lock_user(user)
    if member.household_id is None:
        raise NotInHouseholdError("You are not in a household")

    household = (
        Household.objects
        .select_for_update()
        .get(id=member.household_id)
    )
    member_count = household.member_count()

    if member.role == HouseholdRole.ADMIN and member_count > 1:
        raise AdminMustTransferFirstError(
            "As admin, you must transfer the admin role to another member "
            "or remove all members before leaving"
        )

    household_id = household.id
    member.reset_membership()

    household_deleted = member_count == 1
    if household_deleted:
        household.delete()
        events.release_connections([member.id])
        logger.info("Household %s deleted after its last member left", household_id)
    else:
        events.emit_household_event(
            household_id,
            events.MEMBER_LEFT,
            affected_user_ids=[member.id],
            departed_user_ids=[member.id],
        )

    user.refresh_from_db(fields=['household', 'role'])
    logger.info("User %s left household %s", member.id, household_id)
    return {
        'household_id': household_id,
        'household_deleted': household_deleted,
    }


@transaction.atomic
def transfer_admin(*, user: User, new_admin_id: UUID) -> User:
    """
    Hand the admin role to another member of the same household.

    Raises:
        NotInHouseholdError: If user has no household
        NotAdminError: If user is not the admin
        CannotTransferToSelfError: If new_admin_id is the caller
        TargetNotInHouseholdError: If the new admin is not a member
    """
    member = lock_user(user)
    if member.household_id is None:
        raise NotInHouseholdError("You are not in a household")

    if member.role != HouseholdRole.ADMIN:
        raise NotAdminError("Only the household admin can transfer the admin role")

    if str(new_admin_id) == str(member.id):
        raise CannotTransferToSelfError("You are already the admin")

    new_admin = (
        User.objects
        .select_for_update()
        .filter(id=new_admin_id, household_id=member.household_id)
        .first()
    )
    if new_admin is None:
        raise TargetNotInHouseholdError("Target user is not in your household")

    new_admin.role = HouseholdRole.ADMIN
    new_admin.save(update_fields=['role'])
    member.role = HouseholdRole.MEMBER
    member.save(update_fields=['role'])

    events.emit_household_event(
        member.household_id,
        events.ADMIN_TRANSFERRED,
        affected_user_ids=[member.id, new_admin.id],
        previous_admin_id=str(member.id),
        new_admin_id=str(new_admin.id),
    )

    user.refresh_from_db(fields=['household', 'role'])
    logger.info(
        "Admin of household %s transferred from %s to %s",
        member.household_id, member.id, new_admin.id
    )
    return new_admin


def get_household_members(*, household_id: UUID) -> QuerySet:
    """Members of a household, admin first."""
    return User.objects.in_household(household_id).order_by('role', 'created_at')
