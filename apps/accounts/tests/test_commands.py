from io import StringIO

import pytest
from django.core.management import call_command

from apps.accounts.models import User
from apps.friends.models import Friendship, FriendshipStatus
from apps.groups.models import Group
from apps.payments.models import PaymentRequest


@pytest.mark.django_db
class TestCreateSampleData:

    def test_creates_users_and_relations(self):
        call_command('create_sample_data', stdout=StringIO())

        assert User.objects.filter(email__in=[
            'alice@example.com', 'bob@example.com', 'carol@example.com', 'david@example.com',
        ]).count() == 4
        alice = User.objects.get(email='alice@example.com')
        assert alice.check_password('password123')
        assert Friendship.objects.filter(user=alice, status=FriendshipStatus.ACCEPTED).count() == 2
        assert Friendship.objects.filter(friend=alice, status=FriendshipStatus.PENDING).count() == 1
        group = Group.objects.get(name='Weekend Trip')
        assert group.memberships.count() == 3
        assert group.expenses.get().splits.count() == 3
        assert PaymentRequest.objects.filter(payee=alice).count() == 1

    def test_running_twice_does_not_duplicate(self):
        call_command('create_sample_data', stdout=StringIO())
        call_command('create_sample_data', stdout=StringIO())

        assert Group.objects.filter(name='Weekend Trip').count() == 1
        assert PaymentRequest.objects.count() == 1

    def test_clear(self):
        call_command('create_sample_data', stdout=StringIO())
        call_command('create_sample_data', '--clear', stdout=StringIO())

        assert User.objects.count() == 4
        assert Friendship.objects.count() == 7
