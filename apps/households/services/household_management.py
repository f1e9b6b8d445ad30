"""
Household registry service.

Handles household creation, invite codes and lookup with proper
transaction safety.
"""

import logging
import secrets
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction, IntegrityError
from django.db.models import Prefetch

from apps.accounts.models import User, HouseholdRole
from apps.households.models import (
    Household,
    INVITE_CODE_ALPHABET,
    INVITE_CODE_LENGTH,
    INVITE_CODE_PREFIX,
)

from .exceptions import (
    AlreadyInHouseholdError,
    CodeGenerationExhaustedError,
    InvalidInviteCodeError,
    NotAdminError,
    NotInHouseholdError,
)


logger = logging.getLogger(__name__)


def _max_attempts(max_retries: Optional[int]) -> int:
    if max_retries is not None:
        return max_retries
    return getattr(settings, 'INVITE_CODE_MAX_ATTEMPTS', 10)


def generate_invite_code() -> str:
    """Random code such as ``HH-7KQ2ZP`` (no 0/O/1/I)."""
    suffix = ''.join(
        secrets.choice(INVITE_CODE_ALPHABET) for _ in range(INVITE_CODE_LENGTH)
    )
    return f"{INVITE_CODE_PREFIX}{suffix}"


def normalize_invite_code(invite_code: str) -> str:
    return (invite_code or '').strip().upper()


def lock_user(user: User) -> User:
    """Re-read the user row under a lock so membership checks see committed state."""
    return User.objects.select_for_update().get(id=user.id)


def create_household(
    *,
    user: User,
    name: str,
    max_retries: Optional[int] = None
) -> Household:
    """
    Create a new household and make the creator its admin.

    This is a multi-step operation wrapped in a transaction:
    1. Generate invite code
    2. Create the household
    3. Attach the creator with the admin role

    Args:
        user: User creating the household (must not have one)
        name: Household name
        max_retries: Maximum attempts to generate unique invite code

    Returns:
        Created Household instance

    Raises:
        AlreadyInHouseholdError: If user already belongs to a household
        CodeGenerationExhaustedError: If no unique invite code after retries
    """
    attempts = _max_attempts(max_retries)

    # Retry logic outside the savepoint to handle invite code collisions
    for attempt in range(attempts):
        invite_code = generate_invite_code()

        try:
            with transaction.atomic():
                creator = lock_user(user)
                if creator.household_id is not None:
                    raise AlreadyInHouseholdError(
                        "You are already in a household. Leave your current household first."
                    )

                household = Household.objects.create(
                    name=name,
                    invite_code=invite_code,
                    created_by=creator,
                )

                creator.household = household
                creator.role = HouseholdRole.ADMIN
                creator.save(update_fields=['household', 'role'])

        except IntegrityError:
            logger.warning(
                "Invite code collision creating household (attempt %d/%d)",
                attempt + 1, attempts
            )
            continue

        user.refresh_from_db(fields=['household', 'role'])
        logger.info("User %s created household %s", user.id, household.id)
        return household

    logger.error(
        "Failed to generate unique invite code after %d attempts for user %s",
        attempts, user.id
    )
    raise CodeGenerationExhaustedError(
        f"Failed to generate unique invite code after {attempts} attempts"
    )


@transaction.atomic
def regenerate_invite_code(
    *,
    user: User,
    max_retries: Optional[int] = None
) -> str:
    """
    Regenerate the invite code of the caller's household (admin only).

    Uses row-level locking and retry logic to ensure uniqueness.

    Raises:
        NotInHouseholdError: If user has no household
        NotAdminError: If user is not the household admin
        CodeGenerationExhaustedError: If no unique code after retries
    """
    attempts = _max_attempts(max_retries)

    member = lock_user(user)
    if member.household_id is None:
        raise NotInHouseholdError("You are not in a household")

    if member.role != HouseholdRole.ADMIN:
        raise NotAdminError("Only the household admin can regenerate the invite code")

    household = (
        Household.objects
        .select_for_update()
        .get(id=member.household_id)
    )

    for attempt in range(attempts):
        new_code = generate_invite_code()

        try:
            with transaction.atomic():
                household.invite_code = new_code
                household.save(update_fields=['invite_code', 'updated_at'])
        except IntegrityError:
            logger.warning(
                "Invite code collision regenerating code for household %s (attempt %d/%d)",
                household.id, attempt + 1, attempts
            )
            continue

        logger.info("Invite code regenerated for household %s", household.id)
        return new_code

    logger.error(
        "Failed to generate unique invite code after %d attempts for household %s",
        attempts, household.id
    )
    raise CodeGenerationExhaustedError(
        f"Failed to generate unique invite code after {attempts} attempts"
    )


def find_household_by_invite_code(*, invite_code: str) -> Household:
    """
    Resolve an invite code (case-insensitive) to its household.

    Raises:
        InvalidInviteCodeError: If no household uses the code
    """
    try:
        return Household.objects.get(invite_code=normalize_invite_code(invite_code))
    except Household.DoesNotExist:
        raise InvalidInviteCodeError("Invalid invite code")


def get_household_by_id(*, household_id: UUID) -> Household:
    """Get a household with its members prefetched."""
    return (
        Household.objects
        .prefetch_related(
            Prefetch('members', queryset=User.objects.order_by('role', 'created_at'))
        )
        .get(id=household_id)
    )


def get_current_household(*, user: User) -> Optional[Household]:
    """Return the caller's household with members, or None when unaffiliated."""
    household_id = (
        User.objects
        .filter(id=user.id)
        .values_list('household_id', flat=True)
        .first()
    )
    if household_id is None:
        return None
    return get_household_by_id(household_id=household_id)
