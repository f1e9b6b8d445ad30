"""
Households app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations use transactions and concurrency protection.
"""

from .exceptions import (
    HouseholdsServiceError,
    AlreadyInHouseholdError,
    InvalidInviteCodeError,
    NotInHouseholdError,
    NotAdminError,
    AdminMustTransferFirstError,
    TargetNotInHouseholdError,
    CannotRemoveSelfError,
    CannotTransferToSelfError,
    DuplicatePendingRequestError,
    RemovalRequestNotFoundError,
    CannotVoteOnOwnRemovalError,
    AlreadyVotedError,
    InvalidVoteError,
    CodeGenerationExhaustedError,
)

from .household_management import (
    create_household,
    regenerate_invite_code,
    find_household_by_invite_code,
    get_current_household,
    get_household_by_id,
    generate_invite_code,
)

from .membership_management import (
    join_household,
    leave_household,
    transfer_admin,
    get_household_members,
)

from .removal_voting import (
    request_removal,
    vote_on_removal,
    get_pending_removal_requests,
    majority_threshold,
    decide_removal,
)


__all__ = [
    # Exceptions
    'HouseholdsServiceError',
    'AlreadyInHouseholdError',
    'InvalidInviteCodeError',
    'NotInHouseholdError',
    'NotAdminError',
    'AdminMustTransferFirstError',
    'TargetNotInHouseholdError',
    'CannotRemoveSelfError',
    'CannotTransferToSelfError',
    'DuplicatePendingRequestError',
    'RemovalRequestNotFoundError',
    'CannotVoteOnOwnRemovalError',
    'AlreadyVotedError',
    'InvalidVoteError',
    'CodeGenerationExhaustedError',

    # Household registry
    'create_household',
    'regenerate_invite_code',
    'find_household_by_invite_code',
    'get_current_household',
    'get_household_by_id',
    'generate_invite_code',

    # Membership
    'join_household',
    'leave_household',
    'transfer_admin',
    'get_household_members',

    # Removal voting
    'request_removal',
    'vote_on_removal',
    'get_pending_removal_requests',
    'majority_threshold',
    'decide_removal',
]
