"""
Domain-specific exceptions for households app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses. Each
carries a machine-checkable ``code`` and the HTTP ``status_code``
views answer with.
"""


class HouseholdsServiceError(Exception):
    """Base exception for all households service errors."""
    code = 'households_error'
    status_code = 400


class AlreadyInHouseholdError(HouseholdsServiceError):
    """Raised when a user with a household tries to create or join one."""
    code = 'already_in_household'


class InvalidInviteCodeError(HouseholdsServiceError):
    """Raised when an invite code does not resolve to a household."""
    code = 'invalid_invite_code'
    status_code = 404


class NotInHouseholdError(HouseholdsServiceError):
    """Raised when an action requires membership the user does not have."""
    code = 'not_in_household'
    status_code = 403


class NotAdminError(HouseholdsServiceError):
    """Raised when an admin-only action is attempted by a member."""
    code = 'not_admin'
    status_code = 403


class AdminMustTransferFirstError(HouseholdsServiceError):
    """Raised when the admin tries to leave a household that still has members."""
    code = 'admin_must_transfer_first'


class TargetNotInHouseholdError(HouseholdsServiceError):
    """Raised when the target user is not a member of the caller's household."""
    code = 'target_not_in_household'


class CannotRemoveSelfError(HouseholdsServiceError):
    """Raised when the admin requests their own removal."""
    code = 'cannot_remove_self'


class CannotTransferToSelfError(HouseholdsServiceError):
    """Raised when the admin tries to transfer the admin role to themselves."""
    code = 'cannot_transfer_to_self'


class DuplicatePendingRequestError(HouseholdsServiceError):
    """Raised when a pending removal request already targets the user."""
    code = 'duplicate_pending_request'


class RemovalRequestNotFoundError(HouseholdsServiceError):
    """Raised when a removal request does not exist or is already resolved."""
    code = 'removal_request_not_found'
    status_code = 404


class CannotVoteOnOwnRemovalError(HouseholdsServiceError):
    """Raised when the target of a removal request tries to vote on it."""
    code = 'cannot_vote_on_own_removal'


class AlreadyVotedError(HouseholdsServiceError):
    """Raised when a user votes twice on the same removal request."""
    code = 'already_voted'


class InvalidVoteError(HouseholdsServiceError):
    """Raised when a vote is neither approve nor reject."""
    code = 'invalid_vote'


class CodeGenerationExhaustedError(HouseholdsServiceError):
    """Raised when no unique invite code could be generated within the attempt budget."""
    code = 'code_generation_exhausted'
    status_code = 503
