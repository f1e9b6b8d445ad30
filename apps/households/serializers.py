from rest_framework import serializers
from .models import Household, RemovalRequest, RemovalVote, RemovalStatus
from apps.accounts.models import User


class MemberSerializer(serializers.ModelSerializer):
    """Household member info for nested serialization."""

    display_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'email', 'display_name', 'role']
        read_only_fields = fields

    def get_display_name(self, obj):
        return obj.get_display_name()


class HouseholdSerializer(serializers.ModelSerializer):
    """Household with its members and the caller's role."""

    members = MemberSerializer(many=True, read_only=True)
    member_count = serializers.SerializerMethodField()
    my_role = serializers.SerializerMethodField()

    class Meta:
        model = Household
        fields = [
            'id',
            'name',
            'invite_code',
            'members',
            'member_count',
            'my_role',
            'created_at',
        ]
        read_only_fields = fields

    def get_member_count(self, obj):
        return len(obj.members.all())

    def get_my_role(self, obj):
        """Get current user's role in the household."""
        request = self.context.get('request')
        if request and request.user.is_authenticated:
            for member in obj.members.all():
                if member.id == request.user.id:
                    return member.role
        return None


class HouseholdCreateSerializer(serializers.Serializer):
    """Serializer for creating a household."""

    name = serializers.CharField(max_length=200, required=True)

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Household name is required")
        return value


class JoinHouseholdSerializer(serializers.Serializer):
    """Serializer for joining a household with invite code."""

    invite_code = serializers.CharField(max_length=16, required=True)


class TransferAdminSerializer(serializers.Serializer):

    new_admin_id = serializers.UUIDField(required=True)


class RemovalVoteSerializer(serializers.ModelSerializer):

    user = MemberSerializer(read_only=True)

    class Meta:
        model = RemovalVote
        fields = ['id', 'user', 'vote', 'created_at']
        read_only_fields = fields


class RemovalRequestSerializer(serializers.ModelSerializer):
    """Removal request with its votes and the caller's own vote."""

    target_user = MemberSerializer(read_only=True)
    requested_by = MemberSerializer(read_only=True)
    votes = RemovalVoteSerializer(many=True, read_only=True)
    my_vote = serializers.SerializerMethodField()

    class Meta:
        model = RemovalRequest
        fields = [
            'id',
            'household',
            'target_user',
            'requested_by',
            'reason',
            'status',
            'votes',
            'my_vote',
            'created_at',
            'resolved_at',
        ]
        read_only_fields = fields

    def get_my_vote(self, obj):
        request = self.context.get('request')
        if request and request.user.is_authenticated:
            for vote in obj.votes.all():
                if vote.user_id == request.user.id:
                    return vote.vote
        return None


class CreateRemovalRequestSerializer(serializers.Serializer):

    target_user_id = serializers.UUIDField(required=True)
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class CastVoteSerializer(serializers.Serializer):
    """
    Vote payload.

    The vote value is validated by the service so an unknown value maps
    to the ``invalid_vote`` error code.
    """

    vote = serializers.CharField(required=True)


class VoteOutcomeSerializer(serializers.Serializer):
    """Tally returned after each vote."""

    removal_request = RemovalRequestSerializer(read_only=True)
    approve_votes = serializers.IntegerField()
    reject_votes = serializers.IntegerField()
    total_eligible = serializers.IntegerField()
    majority_needed = serializers.IntegerField()
    result = serializers.ChoiceField(choices=RemovalStatus.choices)


class InviteCodeSerializer(serializers.Serializer):

    invite_code = serializers.CharField(read_only=True)

