import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.friends.models import Friendship, FriendshipStatus


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Create and return the requesting user."""
    return User.objects.create_user(
        email='alice@example.com',
        username='alice',
        password='TestPass123!',
        name='Alice Smith',
    )


@pytest.fixture
def other_user(db):
    """Create and return a second user."""
    return User.objects.create_user(
        email='bob@example.com',
        username='bob',
        password='TestPass123!',
        name='Bob Johnson',
    )


@pytest.fixture
def third_user(db):
    return User.objects.create_user(
        email='carol@example.com',
        username='carol',
        password='TestPass123!',
        name='Carol Bobbins',
    )


@pytest.fixture
def authenticated_client(api_client, user):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def other_client(other_user):
    """Return API client authenticated as other_user."""
    client = APIClient()
    refresh = RefreshToken.for_user(other_user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def pending_request(user, other_user):
    """Pending request from other_user to user."""
    return Friendship.objects.create(
        user=other_user,
        friend=user,
        status=FriendshipStatus.PENDING,
    )


@pytest.fixture
def friendship(user, other_user):
    """Accepted friendship in both directions."""
    Friendship.objects.create(user=user, friend=other_user, status=FriendshipStatus.ACCEPTED)
    Friendship.objects.create(user=other_user, friend=user, status=FriendshipStatus.ACCEPTED)
