from decimal import Decimal

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.payments.models import PaymentRequest


def client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def payee(db):
    """User who is owed money."""
    return User.objects.create_user(
        email='alice@example.com',
        username='alice',
        password='TestPass123!',
        name='Alice',
    )


@pytest.fixture
def payer(db):
    """User who owes money."""
    return User.objects.create_user(
        email='bob@example.com',
        username='bob',
        password='TestPass123!',
        name='Bob',
    )


@pytest.fixture
def outsider(db):
    return User.objects.create_user(
        email='eve@example.com',
        username='eve',
        password='TestPass123!',
        name='Eve',
    )


@pytest.fixture
def payee_client(payee):
    return client_for(payee)


@pytest.fixture
def payer_client(payer):
    return client_for(payer)


@pytest.fixture
def outsider_client(outsider):
    return client_for(outsider)


@pytest.fixture
def payment_request(payer, payee):
    """A freshly sent request: payer owes payee 25.00."""
    return PaymentRequest.objects.create(
        payer=payer,
        payee=payee,
        amount=Decimal('25.00'),
        description='Concert tickets',
    )
