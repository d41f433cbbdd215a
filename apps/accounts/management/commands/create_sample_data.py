"""
Management command to create sample data for trying out the API.

Usage:
    python manage.py create_sample_data [--clear]

This creates:
- 4 users (alice, bob, carol, david)
- Friendships between them, plus one pending request
- 1 group (Weekend Trip) with a shared expense
- 1 payment request from bob to alice
"""

from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.accounts.models import User
from apps.bills.models import Bill
from apps.friends.models import Friendship, FriendshipStatus
from apps.groups.models import Group, GroupMember, GroupRole, Expense, ExpenseSplit
from apps.payments.models import PaymentRequest, PaymentStatus

SAMPLE_PASSWORD = 'password123'

SAMPLE_USERS = [
    ('alice@example.com', 'alice', 'Alice Anderson'),
    ('bob@example.com', 'bob', 'Bob Brown'),
    ('carol@example.com', 'carol', 'Carol Clark'),
    ('david@example.com', 'david', 'David Davis'),
]


class Command(BaseCommand):
    help = 'Create sample data for testing the API'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing data before creating new sample data',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self.clear_data()

        self.stdout.write('Creating sample data...')

        users = self.create_users()
        self.create_friendships(users)
        self.create_group(users)
        self.create_payment_requests(users)

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        self.stdout.write('')
        self.stdout.write('Test accounts:')
        for email, _, _ in SAMPLE_USERS:
            self.stdout.write(f'  {email} / {SAMPLE_PASSWORD}')

    def clear_data(self):
        """Clear all non-superuser data from the database."""
        PaymentRequest.objects.all().delete()
        Bill.objects.all().delete()
        Group.objects.all().delete()
        Friendship.objects.all().delete()
        User.objects.filter(is_superuser=False).delete()

    def create_users(self):
        self.stdout.write('  Creating users...')

        users = {}
        for email, username, name in SAMPLE_USERS:
            user, _ = User.objects.get_or_create(
                email=email,
                defaults={'username': username, 'name': name},
            )
            user.set_password(SAMPLE_PASSWORD)
            user.save()
            users[username] = user
        return users

    def create_friendships(self, users):
        """Alice is friends with bob and carol; david has asked alice."""
        self.stdout.write('  Creating friendships...')

        accepted = [('alice', 'bob'), ('alice', 'carol'), ('bob', 'carol')]
        for a, b in accepted:
            for user, friend in ((users[a], users[b]), (users[b], users[a])):
                Friendship.objects.get_or_create(
                    user=user,
                    friend=friend,
                    defaults={'status': FriendshipStatus.ACCEPTED},
                )

        Friendship.objects.get_or_create(
            user=users['david'],
            friend=users['alice'],
            defaults={'status': FriendshipStatus.PENDING},
        )

    def create_group(self, users):
        self.stdout.write('  Creating group...')

        group, created = Group.objects.get_or_create(
            name='Weekend Trip',
            created_by=users['alice'],
            defaults={'description': 'Cabin weekend in the mountains'},
        )
        roles = {'alice': GroupRole.ADMIN, 'bob': GroupRole.MEMBER, 'carol': GroupRole.MEMBER}
        for username, role in roles.items():
            GroupMember.objects.get_or_create(
                group=group,
                user=users[username],
                defaults={'role': role},
            )

        if created:
            expense = Expense.objects.create(
                group=group,
                paid_by=users['alice'],
                title='Cabin rental',
                amount=Decimal('300.00'),
                category='accommodation',
            )
            for username in roles:
                ExpenseSplit.objects.create(
                    expense=expense,
                    user=users[username],
                    amount=Decimal('100.00'),
                    paid=username == 'alice',
                )
        return group

    def create_payment_requests(self, users):
        self.stdout.write('  Creating payment requests...')

        PaymentRequest.objects.get_or_create(
            payer=users['bob'],
            payee=users['alice'],
            description='Concert tickets',
            defaults={
                'amount': Decimal('45.00'),
                'status': PaymentStatus.SENT,
            },
        )
