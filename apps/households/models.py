# ==========================================
# apps/households/models.py
# ==========================================

from django.db import models
from django.db.models import Q
from django.utils import timezone
import uuid


INVITE_CODE_PREFIX = 'HH-'
INVITE_CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'
INVITE_CODE_LENGTH = 6


class RemovalStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    APPROVED = 'approved', 'Approved'
    REJECTED = 'rejected', 'Rejected'


class VoteChoice(models.TextChoices):
    APPROVE = 'approve', 'Approve'
    REJECT = 'reject', 'Reject'


class Household(models.Model):
    """Shared-living group joined through an invite code."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    invite_code = models.CharField(max_length=16, unique=True, db_index=True, editable=False)
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        related_name='created_households'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'households'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.invite_code})"

    def member_count(self):
        return self.members.count()

    def has_member(self, user):
        return user.household_id == self.id


class RemovalRequestQuerySet(models.QuerySet):

    def pending(self):
        return self.filter(status=RemovalStatus.PENDING)


class RemovalRequest(models.Model):
    """Admin-raised proposal to expel a member, resolved by vote."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    household = models.ForeignKey(Household, on_delete=models.CASCADE, related_name='removal_requests')
    target_user = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='removal_requests_against'
    )
    requested_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='removal_requests_made'
    )
    reason = models.TextField(blank=True)
    status = models.CharField(
        max_length=20,
        choices=RemovalStatus.choices,
        default=RemovalStatus.PENDING
    )
    created_at = models.DateTimeField(auto_now_add=True)
    resolved_at = models.DateTimeField(null=True, blank=True)

    objects = RemovalRequestQuerySet.as_manager()

    class Meta:
        db_table = 'removal_requests'
        constraints = [
            models.UniqueConstraint(
                fields=['household', 'target_user'],
                condition=Q(status='pending'),
                name='unique_pending_removal_per_target',
            ),
        ]
        indexes = [
            models.Index(fields=['household', 'status'], name='removal_household_status_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"Remove {self.target_user} from {self.household.name} ({self.status})"

    def resolve(self, status):
        self.status = status
        self.resolved_at = timezone.now()
        self.save(update_fields=['status', 'resolved_at'])

    def tally(self):
        """Return (approve_votes, reject_votes)."""
        votes = list(self.votes.values_list('vote', flat=True))
        return votes.count(VoteChoice.APPROVE), votes.count(VoteChoice.REJECT)


class RemovalVote(models.Model):
    """A single member's vote on a removal request."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    removal_request = models.ForeignKey(RemovalRequest, on_delete=models.CASCADE, related_name='votes')
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='removal_votes')
    vote = models.CharField(max_length=10, choices=VoteChoice.choices)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'removal_votes'
        unique_together = [['removal_request', 'user']]
        ordering = ['created_at']

    def __str__(self):
        return f"{self.user} votes {self.vote}"
