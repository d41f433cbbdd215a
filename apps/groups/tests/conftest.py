from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.groups.models import Group, GroupMember, GroupRole, Invitation, Expense, ExpenseSplit


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
def user(db):
    """Group creator and admin."""
    return User.objects.create_user(
        email='owner@example.com',
        username='owner',
        password='TestPass123!',
        name='Group Owner',
    )


@pytest.fixture
def member_user(db):
    return User.objects.create_user(
        email='member@example.com',
        username='member',
        password='TestPass123!',
        name='Group Member',
    )


@pytest.fixture
def other_user(db):
    """Create and return a user not in any group."""
    return User.objects.create_user(
        email='other@example.com',
        username='other',
        password='TestPass123!',
        name='Other User',
    )


@pytest.fixture
def authenticated_client(user):
    """Return API client authenticated as the group admin."""
    return client_for(user)


@pytest.fixture
def member_client(member_user):
    return client_for(member_user)


@pytest.fixture
def other_client(other_user):
    return client_for(other_user)


@pytest.fixture
def group(user):
    """Group with user as admin."""
    group = Group.objects.create(name='Flatmates', description='Shared flat', created_by=user)
    GroupMember.objects.create(group=group, user=user, role=GroupRole.ADMIN)
    return group


@pytest.fixture
def group_with_member(group, member_user):
    GroupMember.objects.create(group=group, user=member_user, role=GroupRole.MEMBER)
    return group


@pytest.fixture
def invitation(group, user, other_user):
    """Open invitation for other_user's email."""
    return Invitation.objects.create(group=group, invited_by=user, email=other_user.email)


@pytest.fixture
def expired_invitation(group, user, other_user):
    return Invitation.objects.create(
        group=group,
        invited_by=user,
        email=other_user.email,
        expires_at=timezone.now() - timedelta(days=1),
    )


@pytest.fixture
def expense(group_with_member, user, member_user):
    """30.00 paid by user, split evenly with member_user."""
    expense = Expense.objects.create(
        group=group_with_member,
        paid_by=user,
        title='Groceries',
        amount=Decimal('30.00'),
    )
    ExpenseSplit.objects.create(expense=expense, user=user, amount=Decimal('15.00'), paid=True)
    ExpenseSplit.objects.create(expense=expense, user=member_user, amount=Decimal('15.00'))
    return expense
