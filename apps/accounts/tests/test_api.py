import pytest
from django.urls import reverse
from rest_framework import status
from apps.accounts.models import User, HouseholdRole

PASSWORD = 'TestPass123!'


def registration(email, password='SecurePass123!', confirm=None, **extra):
    return {
        'email': email,
        'password': password,
        'password_confirm': password if confirm is None else confirm,
        **extra,
    }


@pytest.mark.django_db
class TestRegister:
    """POST /api/auth/register/"""

    url = staticmethod(lambda: reverse('users:register'))

    def test_returns_tokens_and_unaffiliated_profile(self, api_client):
        response = api_client.post(
            self.url(),
            registration('newcomer@example.com', display_name='  Newcomer  ')
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert set(response.data['tokens']) == {'access', 'refresh'}
        profile = response.data['user']
        assert profile['display_name'] == 'Newcomer'
        assert profile['household_id'] is None
        assert profile['household_name'] is None
        assert profile['role'] == HouseholdRole.MEMBER
        assert profile['is_household_admin'] is False

    def test_email_is_normalized(self, api_client):
        response = api_client.post(self.url(), registration('Mixed.Case@Example.com'))

        assert response.status_code == status.HTTP_201_CREATED
        assert User.objects.filter(email='mixed.case@example.com').exists()

    def test_duplicate_email_any_case(self, api_client, user):
        response = api_client.post(self.url(), registration(user.email.upper()))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'registration_failed'
        assert User.objects.count() == 1

    def test_password_mismatch(self, api_client):
        response = api_client.post(
            self.url(),
            registration('mismatch@example.com', confirm='OtherPass123!')
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'password_confirm' in response.data

    def test_weak_password(self, api_client):
        response = api_client.post(self.url(), registration('weak@example.com', password='123'))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not User.objects.filter(email='weak@example.com').exists()


@pytest.mark.django_db
class TestLogin:
    """POST /api/auth/login/"""

    url = staticmethod(lambda: reverse('users:login'))

    def test_success_stamps_last_login(self, api_client, user):
        response = api_client.post(self.url(), {'email': user.email, 'password': PASSWORD})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user']['id'] == str(user.id)
        assert 'access' in response.data['tokens']
        user.refresh_from_db()
        assert user.last_login is not None

    def test_email_case_insensitive(self, api_client, user):
        response = api_client.post(self.url(), {'email': user.email.upper(), 'password': PASSWORD})

        assert response.status_code == status.HTTP_200_OK

    @pytest.mark.parametrize('email,password', [
        ('resident@example.com', 'WrongPass123!'),
        ('nobody@example.com', PASSWORD),
    ])
    def test_invalid_credentials(self, api_client, user, email, password):
        response = api_client.post(self.url(), {'email': email, 'password': password})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['code'] == 'invalid_credentials'

    def test_deactivated_account(self, api_client, deactivated_user):
        response = api_client.post(
            self.url(),
            {'email': deactivated_user.email, 'password': PASSWORD}
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['code'] == 'inactive_account'


@pytest.mark.django_db
class TestCurrentUser:
    """GET /api/auth/user/"""

    url = staticmethod(lambda: reverse('users:current-user'))

    def test_unaffiliated(self, auth_client_for, user):
        response = auth_client_for(user).get(self.url())

        assert response.status_code == status.HTTP_200_OK
        assert response.data['email'] == user.email
        assert response.data['household_id'] is None

    def test_household_seat(self, auth_client_for, housed_user):
        response = auth_client_for(housed_user).get(self.url())

        assert response.data['household_id'] == str(housed_user.household_id)
        assert response.data['household_name'] == 'Maple Street'
        assert response.data['role'] == HouseholdRole.ADMIN
        assert response.data['is_household_admin'] is True

    def test_requires_authentication(self, api_client):
        response = api_client.get(self.url())

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
