import pytest
from uuid import uuid4
from django.urls import reverse
from rest_framework import status
from apps.accounts.models import HouseholdRole
from apps.households.models import Household, RemovalRequest, RemovalStatus


# =============================================================================
# Household Registry API Tests
# =============================================================================

@pytest.mark.django_db
class TestHouseholdCreateAPI:
    """Tests for POST /api/households/"""

    def test_create_household(self, client_for, alice):
        url = reverse('households:household-create')
        response = client_for(alice).post(url, {'name': 'Flat 4B'})

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['name'] == 'Flat 4B'
        assert response.data['invite_code'].startswith('HH-')
        assert response.data['my_role'] == HouseholdRole.ADMIN
        assert response.data['member_count'] == 1

    def test_create_household_blank_name(self, client_for, alice):
        url = reverse('households:household-create')
        response = client_for(alice).post(url, {'name': '   '})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_create_household_already_affiliated(self, client_for, household, alice):
        url = reverse('households:household-create')
        response = client_for(alice).post(url, {'name': 'Another'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'already_in_household'

    def test_create_household_unauthenticated(self, api_client):
        url = reverse('households:household-create')
        response = api_client.post(url, {'name': 'Flat 4B'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestCurrentHouseholdAPI:
    """Tests for GET /api/households/current/"""

    def test_current_household(self, client_for, pair_household, bob):
        url = reverse('households:current')
        response = client_for(bob).get(url)

        assert response.status_code == status.HTTP_200_OK
        data = response.data['household']
        assert data['id'] == str(pair_household.id)
        assert data['my_role'] == HouseholdRole.MEMBER
        assert len(data['members']) == 2

    def test_current_household_unaffiliated(self, client_for, outsider):
        url = reverse('households:current')
        response = client_for(outsider).get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['household'] is None


# =============================================================================
# Membership API Tests
# =============================================================================

@pytest.mark.django_db
class TestJoinLeaveAPI:
    """Tests for join / leave / transfer-admin endpoints."""

    def test_join_with_lowercase_code(self, client_for, household, bob):
        url = reverse('households:join')
        response = client_for(bob).post(url, {'invite_code': household.invite_code.lower()})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['id'] == str(household.id)
        assert response.data['my_role'] == HouseholdRole.MEMBER
        bob.refresh_from_db()
        assert bob.household_id == household.id

    def test_join_invalid_code(self, client_for, outsider):
        url = reverse('households:join')
        response = client_for(outsider).post(url, {'invite_code': 'HH-XXXXXX'})

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['code'] == 'invalid_invite_code'

    def test_admin_leave_blocked(self, client_for, trio_household, alice):
        url = reverse('households:leave')
        response = client_for(alice).post(url)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'admin_must_transfer_first'

    def test_member_leave(self, client_for, trio_household, carol):
        url = reverse('households:leave')
        response = client_for(carol).post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['household_deleted'] is False
        assert trio_household.members.count() == 2

    def test_leave_unaffiliated(self, client_for, outsider):
        url = reverse('households:leave')
        response = client_for(outsider).post(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['code'] == 'not_in_household'

    def test_transfer_admin(self, client_for, pair_household, alice, bob):
        url = reverse('households:transfer-admin')
        response = client_for(alice).post(url, {'new_admin_id': str(bob.id)})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['role'] == HouseholdRole.ADMIN
        alice.refresh_from_db()
        assert alice.role == HouseholdRole.MEMBER

    def test_transfer_admin_by_member(self, client_for, pair_household, alice, bob):
        url = reverse('households:transfer-admin')
        response = client_for(bob).post(url, {'new_admin_id': str(alice.id)})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['code'] == 'not_admin'

    def test_regenerate_code(self, client_for, household, alice):
        old_code = household.invite_code
        url = reverse('households:regenerate-code')
        response = client_for(alice).post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['invite_code'] != old_code
        household.refresh_from_db()
        assert household.invite_code == response.data['invite_code']


# =============================================================================
# Removal Voting API Tests
# =============================================================================

@pytest.mark.django_db
class TestRemovalAPI:
    """Tests for removal request and vote endpoints."""

    def test_request_and_vote(self, client_for, trio_household, alice, bob, carol):
        create_url = reverse('households:removal-request-create')
        response = client_for(alice).post(
            create_url,
            {'target_user_id': str(bob.id), 'reason': 'noise complaints'}
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == RemovalStatus.PENDING
        removal_request_id = response.data['id']

        vote_url = reverse('households:removal-request-vote', args=[removal_request_id])
        response = client_for(carol).post(vote_url, {'vote': 'approve'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['approve_votes'] == 1
        assert response.data['total_eligible'] == 2
        assert response.data['result'] == RemovalStatus.APPROVED
        assert response.data['removal_request']['my_vote'] == 'approve'
        bob.refresh_from_db()
        assert bob.household_id is None

    def test_two_member_auto_approval(self, client_for, pair_household, alice, bob):
        url = reverse('households:removal-request-create')
        response = client_for(alice).post(url, {'target_user_id': str(bob.id)})

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == RemovalStatus.APPROVED
        assert response.data['votes'] == []

    def test_request_by_member_forbidden(self, client_for, trio_household, bob, carol):
        url = reverse('households:removal-request-create')
        response = client_for(bob).post(url, {'target_user_id': str(carol.id)})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['code'] == 'not_admin'

    def test_vote_invalid_value(self, client_for, trio_household, alice, bob, carol):
        removal_request = RemovalRequest.objects.create(
            household=trio_household,
            target_user=bob,
            requested_by=alice,
        )
        url = reverse('households:removal-request-vote', args=[removal_request.id])
        response = client_for(carol).post(url, {'vote': 'abstain'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'invalid_vote'

    def test_vote_missing_request(self, client_for, trio_household, carol):
        url = reverse('households:removal-request-vote', args=[uuid4()])
        response = client_for(carol).post(url, {'vote': 'approve'})

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['code'] == 'removal_request_not_found'

    def test_target_cannot_vote(self, client_for, trio_household, alice, bob):
        removal_request = RemovalRequest.objects.create(
            household=trio_household,
            target_user=bob,
            requested_by=alice,
        )
        url = reverse('households:removal-request-vote', args=[removal_request.id])
        response = client_for(bob).post(url, {'vote': 'reject'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'cannot_vote_on_own_removal'

    def test_list_pending(self, client_for, five_household, alice, bob, erin):
        RemovalRequest.objects.create(
            household=five_household,
            target_user=erin,
            requested_by=alice,
        )
        url = reverse('households:removal-request-list')
        response = client_for(bob).get(url)

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1
        assert response.data[0]['target_user']['id'] == str(erin.id)
        assert response.data[0]['my_vote'] is None

    def test_list_pending_unaffiliated(self, client_for, outsider):
        url = reverse('households:removal-request-list')
        response = client_for(outsider).get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data == []


@pytest.mark.django_db
def test_scenario_create_join_share_household(client_for, alice, bob):
    """Creator is admin; joiner is member of the same household."""
    response = client_for(alice).post(reverse('households:household-create'), {'name': 'Flat 4B'})
    code = response.data['invite_code']

    response = client_for(bob).post(reverse('households:join'), {'invite_code': code.lower()})

    assert response.status_code == status.HTTP_200_OK
    household = Household.objects.get(invite_code=code)
    roles = dict(household.members.values_list('email', 'role'))
    assert roles == {
        'alice@example.com': HouseholdRole.ADMIN,
        'bob@example.com': HouseholdRole.MEMBER,
    }
