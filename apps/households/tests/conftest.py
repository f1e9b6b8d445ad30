import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, HouseholdRole
from apps.households.models import Household
from apps.households.services import generate_invite_code
from apps.notifications.registry import set_connection_registry


class RecordingRegistry:
    """Connection registry that records deliveries instead of sending them."""

    def __init__(self):
        self.broadcasts = []
        self.direct = []
        self.rooms = {}

    def register(self, user_id, connection, household_id=None):
        self.rooms[str(user_id)] = str(household_id) if household_id else None

    def unregister(self, user_id):
        self.rooms.pop(str(user_id), None)

    def assign_household(self, user_id, household_id):
        self.rooms[str(user_id)] = str(household_id) if household_id else None

    def broadcast(self, household_id, event, payload):
        self.broadcasts.append((str(household_id), event, payload))

    def send_to_user(self, user_id, event, payload):
        self.direct.append((str(user_id), event, payload))

    def events(self):
        return [event for _, event, _ in self.broadcasts]


def make_user(email, display_name):
    return User.objects.create_user(
        email=email,
        password='TestPass123!',
        display_name=display_name,
    )


def add_member(household, user, role=HouseholdRole.MEMBER):
    user.household = household
    user.role = role
    user.save(update_fields=['household', 'role'])
    return user


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
def registry():
    """Swap in a recording registry for the duration of the test."""
    recording = RecordingRegistry()
    previous = set_connection_registry(recording)
    yield recording
    set_connection_registry(previous)


@pytest.fixture
def alice(db):
    """Household admin."""
    return make_user('alice@example.com', 'Alice')


@pytest.fixture
def bob(db):
    return make_user('bob@example.com', 'Bob')


@pytest.fixture
def carol(db):
    return make_user('carol@example.com', 'Carol')


@pytest.fixture
def dave(db):
    return make_user('dave@example.com', 'Dave')


@pytest.fixture
def erin(db):
    return make_user('erin@example.com', 'Erin')


@pytest.fixture
def outsider(db):
    """User not in any household."""
    return make_user('outsider@example.com', 'Outsider')


@pytest.fixture
def household(db, alice):
    """Household with alice as its only member and admin."""
    household = Household.objects.create(
        name='Flat 4B',
        invite_code=generate_invite_code(),
        created_by=alice,
    )
    add_member(household, alice, role=HouseholdRole.ADMIN)
    return household


@pytest.fixture
def pair_household(household, bob):
    """Alice (admin) and bob."""
    add_member(household, bob)
    return household


@pytest.fixture
def trio_household(pair_household, carol):
    """Alice (admin), bob and carol."""
    add_member(pair_household, carol)
    return pair_household


@pytest.fixture
def five_household(trio_household, dave, erin):
    """Alice (admin), bob, carol, dave and erin."""
    add_member(trio_household, dave)
    add_member(trio_household, erin)
    return trio_household
