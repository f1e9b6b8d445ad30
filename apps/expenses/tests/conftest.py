import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, HouseholdRole
from apps.households.models import Household
from apps.expenses.models import Expense, ExpenseSplit, SplitStatus


def make_user(email, display_name):
    return User.objects.create_user(
        email=email,
        password='TestPass123!',
        display_name=display_name,
    )


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def client_for():
    """Build an API client authenticated as the given user."""
    def _client_for(user):
        client = APIClient()
        refresh = RefreshToken.for_user(user)
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return client
    return _client_for


@pytest.fixture
def user_a(db):
    """Payer in most tests, household admin."""
    return make_user('a@example.com', 'A')


@pytest.fixture
def user_b(db):
    return make_user('b@example.com', 'B')


@pytest.fixture
def user_c(db):
    return make_user('c@example.com', 'C')


@pytest.fixture
def outsider(db):
    return make_user('outsider@example.com', 'Outsider')


@pytest.fixture
def household(db, user_a, user_b, user_c):
    """Household with A (admin), B and C."""
    household = Household.objects.create(
        name='Flat 4B',
        invite_code='HH-ABCDEF',
        created_by=user_a,
    )
    for user, role in (
        (user_a, HouseholdRole.ADMIN),
        (user_b, HouseholdRole.MEMBER),
        (user_c, HouseholdRole.MEMBER),
    ):
        user.household = household
        user.role = role
        user.save(update_fields=['household', 'role'])
    return household


@pytest.fixture
def make_expense(household):
    """Create an expense paid by ``paid_by`` with explicit pending splits."""
    def _make_expense(paid_by, owed, description='Shared cost'):
        expense = Expense.objects.create(
            household=household,
            paid_by=paid_by,
            created_by=paid_by,
            description=description,
            total_amount=sum((amount for _, amount in owed), Decimal('0.00')),
        )
        for user, amount in owed:
            ExpenseSplit.objects.create(
                expense=expense,
                owed_by=user,
                amount=amount,
                status=SplitStatus.PENDING,
            )
        return expense
    return _make_expense
