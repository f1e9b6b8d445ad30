"""
Removal voting service.

The admin raises a removal request against a member; the remaining
members vote on it. A request resolves once approve or reject votes
reach ceil(eligible / 2), where eligible voters are all members except
the target. The requester counts as eligible but never casts a vote row.
A two-member household skips the vote entirely.
"""

import logging
import math
from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import QuerySet

from apps.accounts.models import User, HouseholdRole
from apps.households.models import (
    Household,
    RemovalRequest,
    RemovalStatus,
    RemovalVote,
    VoteChoice,
)
from apps.notifications import events

from .exceptions import (
    AlreadyVotedError,
    CannotRemoveSelfError,
    CannotVoteOnOwnRemovalError,
    DuplicatePendingRequestError,
    InvalidVoteError,
    NotAdminError,
    NotInHouseholdError,
    RemovalRequestNotFoundError,
    TargetNotInHouseholdError,
)
from .household_management import lock_user


logger = logging.getLogger(__name__)


def majority_threshold(eligible_voters: int) -> int:
    return math.ceil(eligible_voters / 2)


def decide_removal(approve_votes: int, reject_votes: int, eligible_voters: int) -> str:
    """
    Outcome of a tally: approved, rejected or still pending.

    A side wins once it reaches the threshold. Equal tallies at the
    threshold (2-2 of 4 eligible) decide nothing and stay pending.
    """
    threshold = majority_threshold(eligible_voters)
    if approve_votes >= threshold and approve_votes > reject_votes:
        return RemovalStatus.APPROVED
    if reject_votes >= threshold and reject_votes > approve_votes:
        return RemovalStatus.REJECTED
    return RemovalStatus.PENDING


def _remove_target(removal_request: RemovalRequest) -> None:
    target = (
        User.objects
        .select_for_update()
        .get(id=removal_request.target_user_id)
    )
    # The target may have left on their own while the vote was open
    if target.household_id == removal_request.household_id:
        target.reset_membership()


def _emit_resolved(removal_request: RemovalRequest, auto_approved: bool = False) -> None:
    approved = removal_request.status == RemovalStatus.APPROVED
    events.emit_household_event(
        removal_request.household_id,
        events.REMOVAL_RESOLVED,
        affected_user_ids=[removal_request.target_user_id],
        departed_user_ids=[removal_request.target_user_id] if approved else (),
        removal_request_id=str(removal_request.id),
        status=removal_request.status,
        auto_approved=auto_approved,
    )


@transaction.atomic
def request_removal(
    *,
    user: User,
    target_user_id: UUID,
    reason: str = ''
) -> RemovalRequest:
    """
    Create a removal request against a member (admin only).

    Auto-approves when the household has exactly two members, since
    nobody besides the requester is left to vote.

    Args:
        user: Admin raising the request
        target_user_id: Member to be removed
        reason: Optional free-text reason

    Returns:
        The RemovalRequest, ``pending`` or already ``approved``

    Raises:
        NotInHouseholdError: If user has no household
        NotAdminError: If user is not the admin
        TargetNotInHouseholdError: If target is not a member of the household
        CannotRemoveSelfError: If target is the requester
        DuplicatePendingRequestError: If a pending request already targets the user
    """
    requester = lock_user(user)
    if requester.household_id is None:
        raise NotInHouseholdError("You are not in a household")

    household = (
        Household.objects
        .select_for_update()
        .get(id=requester.household_id)
    )

    if requester.role != HouseholdRole.ADMIN:
        raise NotAdminError("Only the household admin can request member removal")

    target = (
        User.objects
        .filter(id=target_user_id, household=household)
        .first()
    )
    if target is None:
        raise TargetNotInHouseholdError("Target user is not in your household")

    if target.id == requester.id:
        raise CannotRemoveSelfError("You cannot request to remove yourself")

    if RemovalRequest.objects.pending().filter(household=household, target_user=target).exists():
        raise DuplicatePendingRequestError(
            "There is already a pending removal request for this member"
        )

    member_count = household.member_count()

    try:
        with transaction.atomic():
            removal_request = RemovalRequest.objects.create(
                household=household,
                target_user=target,
                requested_by=requester,
                reason=reason or '',
            )
    except IntegrityError:
        # Partial unique constraint caught a concurrent request
        raise DuplicatePendingRequestError(
            "There is already a pending removal request for this member"
        )

    events.emit_household_event(
        household.id,
        events.REMOVAL_REQUEST_CREATED,
        affected_user_ids=[target.id],
        removal_request_id=str(removal_request.id),
        requested_by=str(requester.id),
        reason=removal_request.reason,
    )
    logger.info(
        "Removal of %s from household %s requested by %s",
        target.id, household.id, requester.id
    )

    if member_count == 2:
        removal_request.resolve(RemovalStatus.APPROVED)
        _remove_target(removal_request)
        _emit_resolved(removal_request, auto_approved=True)
        logger.info("Removal request %s auto-approved (two-member household)", removal_request.id)

    return removal_request


@transaction.atomic
def vote_on_removal(
    *,
    user: User,
    removal_request_id: UUID,
    vote: str
) -> dict:
    """
    Record a vote on a pending removal request and tally it.

    The request row is locked so concurrent votes serialize; the unique
    (request, user) constraint backs up the duplicate-vote check.

    Returns:
        dict with ``approve_votes``, ``reject_votes``, ``total_eligible``,
        ``majority_needed``, ``result`` and ``removal_request``

    Raises:
        InvalidVoteError: If vote is not approve/reject
        RemovalRequestNotFoundError: If request is missing or resolved
        NotInHouseholdError: If voter is not in the request's household
        CannotVoteOnOwnRemovalError: If voter is the target
        AlreadyVotedError: If voter already voted
    """
    if vote not in VoteChoice.values:
        raise InvalidVoteError('Vote must be "approve" or "reject"')

    try:
        removal_request = (
            RemovalRequest.objects
            .select_for_update()
            .get(id=removal_request_id, status=RemovalStatus.PENDING)
        )
    except RemovalRequest.DoesNotExist:
        raise RemovalRequestNotFoundError("Removal request not found or already resolved")

    voter = User.objects.get(id=user.id)
    if voter.household_id != removal_request.household_id:
        raise NotInHouseholdError("You are not in this household")

    if removal_request.target_user_id == voter.id:
        raise CannotVoteOnOwnRemovalError("You cannot vote on your own removal")

    if removal_request.votes.filter(user=voter).exists():
        raise AlreadyVotedError("You have already voted")

    try:
        with transaction.atomic():
            RemovalVote.objects.create(
                removal_request=removal_request,
                user=voter,
                vote=vote,
            )
    except IntegrityError:
        raise AlreadyVotedError("You have already voted")

    approve_votes, reject_votes = removal_request.tally()
    eligible_voters = (
        User.objects
        .in_household(removal_request.household_id)
        .exclude(id=removal_request.target_user_id)
        .count()
    )
    majority_needed = majority_threshold(eligible_voters)
    outcome = decide_removal(approve_votes, reject_votes, eligible_voters)

    if outcome == RemovalStatus.APPROVED:
        removal_request.resolve(RemovalStatus.APPROVED)
        _remove_target(removal_request)
        _emit_resolved(removal_request)
    elif outcome == RemovalStatus.REJECTED:
        removal_request.resolve(RemovalStatus.REJECTED)
        _emit_resolved(removal_request)

    logger.info(
        "Vote %s on removal request %s: %d approve / %d reject of %d eligible -> %s",
        vote, removal_request.id, approve_votes, reject_votes,
        eligible_voters, removal_request.status
    )

    return {
        'removal_request': removal_request,
        'approve_votes': approve_votes,
        'reject_votes': reject_votes,
        'total_eligible': eligible_voters,
        'majority_needed': majority_needed,
        'result': removal_request.status,
    }


def get_pending_removal_requests(*, user: User) -> QuerySet:
    """Pending requests in the caller's household, newest first."""
    household_id = (
        User.objects
        .filter(id=user.id)
        .values_list('household_id', flat=True)
        .first()
    )
    if household_id is None:
        return RemovalRequest.objects.none()

    return (
        RemovalRequest.objects
        .pending()
        .filter(household_id=household_id)
        .select_related('target_user', 'requested_by')
        .prefetch_related('votes')
        .order_by('-created_at')
    )
