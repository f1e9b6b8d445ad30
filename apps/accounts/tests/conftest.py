import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, HouseholdRole
from apps.households.models import Household

PASSWORD = 'TestPass123!'


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def user(db):
    """Registered user without a household."""
    return User.objects.create_user(
        email='resident@example.com',
        password=PASSWORD,
        display_name='Resident',
    )


@pytest.fixture
def deactivated_user(db):
    return User.objects.create_user(
        email='former@example.com',
        password=PASSWORD,
        is_active=False,
    )


@pytest.fixture
def housed_user(user):
    """``user`` seated as admin of a household."""
    household = Household.objects.create(
        name='Maple Street',
        invite_code='HH-MAPLE1',
        created_by=user,
    )
    user.household = household
    user.role = HouseholdRole.ADMIN
    user.save(update_fields=['household', 'role'])
    return user


@pytest.fixture
def auth_client_for(api_client):
    def _auth_client_for(account):
        token = RefreshToken.for_user(account).access_token
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        return api_client
    return _auth_client_for
