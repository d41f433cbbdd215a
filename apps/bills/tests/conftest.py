import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Bill creator."""
    return User.objects.create_user(
        email='alice@example.com',
        username='alice',
        password='TestPass123!',
        name='Alice',
    )


@pytest.fixture
def other_user(db):
    return User.objects.create_user(
        email='bob@example.com',
        username='bob',
        password='TestPass123!',
        name='Bob',
    )


@pytest.fixture
def third_user(db):
    return User.objects.create_user(
        email='carol@example.com',
        username='carol',
        password='TestPass123!',
        name='Carol',
    )


@pytest.fixture
def authenticated_client(api_client, user):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def third_client(third_user):
    client = APIClient()
    refresh = RefreshToken.for_user(third_user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client
