from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from .serializers import (
    ExpenseCreateSerializer,
    ExpenseUpdateSerializer,
    ExpenseSerializer,
    ExpenseSplitSerializer,
    BalancesSerializer,
    SettleWithUserResponseSerializer,
)
from .services import ExpenseLedgerService
from .exceptions import ExpensesServiceError


def _error_response(error: ExpensesServiceError) -> Response:
    return Response(
        {'error': str(error.detail), 'code': error.code},
        status=error.status_code
    )


@extend_schema(
    methods=['GET'],
    responses={200: ExpenseSerializer(many=True)},
    description="List expenses of the caller's household, newest first.",
    tags=['expenses'],
)
@extend_schema(
    methods=['POST'],
    request=ExpenseCreateSerializer,
    responses={201: ExpenseSerializer},
    description=(
        "Create an expense. Without explicit splits every member except "
        "the payer owes total / member count."
    ),
    tags=['expenses'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def expense_list_create(request):
    """List or create household expenses."""
    if request.method == 'GET':
        expenses = ExpenseLedgerService.list_expenses(request.user)
        serializer = ExpenseSerializer(expenses, many=True)
        return Response(serializer.data)

    serializer = ExpenseCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        expense = ExpenseLedgerService.create_expense(
            created_by=request.user,
            description=data['description'],
            total_amount=data['total_amount'],
            paid_by_id=data.get('paid_by_id'),
            date=data.get('date'),
            category=data.get('category'),
            splits=data.get('splits')
        )
    except ExpensesServiceError as e:
        return _error_response(e)

    return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)


@extend_schema(
    methods=['PUT'],
    request=ExpenseUpdateSerializer,
    responses={200: ExpenseSerializer},
    description=(
        "Edit description, total, date or category (creator or payer only). "
        "Existing splits are not recalculated."
    ),
    tags=['expenses'],
)
@extend_schema(
    methods=['DELETE'],
    request=None,
    responses={204: None},
    description="Delete an expense (creator or payer only).",
    tags=['expenses'],
)
@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def expense_detail(request, expense_id):
    """Update or delete an expense."""
    if request.method == 'DELETE':
        try:
            ExpenseLedgerService.delete_expense(request.user, expense_id)
        except ExpensesServiceError as e:
            return _error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = ExpenseUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        expense = ExpenseLedgerService.update_expense(
            request.user,
            expense_id,
            **serializer.validated_data
        )
    except ExpensesServiceError as e:
        return _error_response(e)

    return Response(ExpenseSerializer(expense).data)


@extend_schema(
    request=None,
    responses={200: ExpenseSplitSerializer},
    description="Mark a split as settled. Settling twice is a no-op.",
    tags=['expenses'],
)
@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def split_settle(request, split_id):
    """Settle one split."""
    try:
        split = ExpenseLedgerService.settle_split(split_id, user=request.user)
    except ExpensesServiceError as e:
        return _error_response(e)

    return Response(ExpenseSplitSerializer(split).data)


@extend_schema(
    request=None,
    responses={200: SettleWithUserResponseSerializer},
    description="Settle every pending split the caller owes on expenses paid by the given user.",
    tags=['expenses'],
)
@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def settle_with_user(request, user_id):
    """Settle up with another member."""
    count = ExpenseLedgerService.settle_with_user(request.user, user_id)
    return Response({
        'message': f'Settled {count} expense(s)',
        'settled_count': count,
    })


@extend_schema(
    responses={200: BalancesSerializer},
    description="What the caller owes and is owed across pending splits.",
    tags=['expenses'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def balances(request):
    """Get the caller's balances."""
    result = ExpenseLedgerService.get_balances(request.user)
    return Response(BalancesSerializer(result).data)
