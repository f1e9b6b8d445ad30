from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiResponse

from .serializers import (
    HouseholdSerializer,
    HouseholdCreateSerializer,
    JoinHouseholdSerializer,
    TransferAdminSerializer,
    MemberSerializer,
    RemovalRequestSerializer,
    CreateRemovalRequestSerializer,
    CastVoteSerializer,
    VoteOutcomeSerializer,
    InviteCodeSerializer,
)

from apps.households.services import (
    create_household,
    get_current_household,
    get_household_by_id,
    join_household,
    leave_household,
    transfer_admin,
    request_removal,
    vote_on_removal,
    get_pending_removal_requests,
    regenerate_invite_code,
    HouseholdsServiceError,
)


def _error_response(error: HouseholdsServiceError) -> Response:
    return Response(
        {'error': str(error), 'code': error.code},
        status=error.status_code
    )


@extend_schema(
    request=HouseholdCreateSerializer,
    responses={201: HouseholdSerializer},
    description="Create a household; the caller becomes its admin.",
    tags=['households'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def household_create(request):
    """Create a new household."""
    serializer = HouseholdCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        household = create_household(
            user=request.user,
            name=serializer.validated_data['name']
        )
    except HouseholdsServiceError as e:
        return _error_response(e)

    household = get_household_by_id(household_id=household.id)
    output_serializer = HouseholdSerializer(household, context={'request': request})
    return Response(output_serializer.data, status=status.HTTP_201_CREATED)


@extend_schema(
    responses={200: HouseholdSerializer},
    description="Get the caller's household with members, or null when unaffiliated.",
    tags=['households'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def current_household(request):
    """Get the household the caller belongs to."""
    household = get_current_household(user=request.user)
    if household is None:
        return Response({'household': None})

    serializer = HouseholdSerializer(household, context={'request': request})
    return Response({'household': serializer.data})


@extend_schema(
    request=JoinHouseholdSerializer,
    responses={200: HouseholdSerializer},
    description="Join a household with its invite code (case-insensitive).",
    tags=['households'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def household_join(request):
    """Join a household using invite code."""
    serializer = JoinHouseholdSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        household = join_household(
            user=request.user,
            invite_code=serializer.validated_data['invite_code']
        )
    except HouseholdsServiceError as e:
        return _error_response(e)

    household = get_household_by_id(household_id=household.id)
    output_serializer = HouseholdSerializer(household, context={'request': request})
    return Response(output_serializer.data)


@extend_schema(
    request=None,
    description="Leave the current household. The last member leaving deletes it.",
    tags=['households'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def household_leave(request):
    """Leave the current household."""
    try:
        result = leave_household(user=request.user)
    except HouseholdsServiceError as e:
        return _error_response(e)

    return Response({
        'message': 'Successfully left the household',
        'household_deleted': result['household_deleted'],
    })


@extend_schema(
    request=TransferAdminSerializer,
    responses={200: MemberSerializer},
    description="Transfer the admin role to another member (admin only).",
    tags=['households'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def household_transfer_admin(request):
    """Transfer the admin role."""
    serializer = TransferAdminSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        new_admin = transfer_admin(
            user=request.user,
            new_admin_id=serializer.validated_data['new_admin_id']
        )
    except HouseholdsServiceError as e:
        return _error_response(e)

    return Response(MemberSerializer(new_admin).data)


@extend_schema(
    request=CreateRemovalRequestSerializer,
    responses={201: RemovalRequestSerializer},
    description=(
        "Request removal of a member (admin only). "
        "Auto-approved when the household has two members."
    ),
    tags=['households'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def removal_request_create(request):
    """Create a removal request."""
    serializer = CreateRemovalRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        removal_request = request_removal(
            user=request.user,
            target_user_id=serializer.validated_data['target_user_id'],
            reason=serializer.validated_data.get('reason', '')
        )
    except HouseholdsServiceError as e:
        return _error_response(e)

    output_serializer = RemovalRequestSerializer(removal_request, context={'request': request})
    return Response(output_serializer.data, status=status.HTTP_201_CREATED)


@extend_schema(
    request=CastVoteSerializer,
    responses={200: VoteOutcomeSerializer},
    description="Vote approve or reject on a pending removal request.",
    tags=['households'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def removal_request_vote(request, removal_request_id):
    """Vote on a removal request."""
    serializer = CastVoteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        outcome = vote_on_removal(
            user=request.user,
            removal_request_id=removal_request_id,
            vote=serializer.validated_data['vote']
        )
    except HouseholdsServiceError as e:
        return _error_response(e)

    output_serializer = VoteOutcomeSerializer(outcome, context={'request': request})
    return Response(output_serializer.data)


@extend_schema(
    responses={200: RemovalRequestSerializer(many=True)},
    description="List pending removal requests in the caller's household.",
    tags=['households'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def removal_request_list(request):
    """Get pending removal requests."""
    removal_requests = get_pending_removal_requests(user=request.user)
    serializer = RemovalRequestSerializer(
        removal_requests,
        many=True,
        context={'request': request}
    )
    return Response(serializer.data)


@extend_schema(
    request=None,
    responses={200: OpenApiResponse(response=InviteCodeSerializer)},
    description="Regenerate the household invite code (admin only).",
    tags=['households'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def household_regenerate_code(request):
    """Regenerate invite code (admin only)."""
    try:
        new_code = regenerate_invite_code(user=request.user)
    except HouseholdsServiceError as e:
        return _error_response(e)

    return Response({
        'invite_code': new_code,
        'message': 'Invite code regenerated successfully'
    })
