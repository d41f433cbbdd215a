from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.groups.models import Group, GroupMember, GroupRole, Invitation, Expense, ExpenseSplit
from apps.groups.services import (
    create_group,
    delete_group,
    leave_group,
    remove_member,
    update_member_role,
    send_invitation,
    accept_invitation,
    create_expense,
    update_expense,
    NotMemberError,
    InsufficientPermissionsError,
    InvalidGroupDataError,
    LastAdminError,
    MemberNotFoundError,
    AlreadyMemberError,
    AlreadyInvitedError,
    InvitationExpiredError,
    InvitationAlreadyAcceptedError,
    InvitationEmailMismatchError,
    InvalidExpenseError,
)


@pytest.mark.django_db
class TestGroupManagement:

    def test_create_group_makes_creator_admin(self, user):
        group = create_group(name='  Trip  ', created_by=user, description=' Summer ')

        assert group.name == 'Trip'
        assert group.description == 'Summer'
        assert group.get_user_role(user) == GroupRole.ADMIN

    def test_create_group_blank_name(self, user):
        with pytest.raises(InvalidGroupDataError):
            create_group(name='   ', created_by=user)

    def test_delete_group_cascades(self, expense, invitation, user):
        group_id = expense.group_id

        delete_group(group_id=group_id, user=user)

        assert not Group.objects.filter(id=group_id).exists()
        assert not GroupMember.objects.filter(group_id=group_id).exists()
        assert not Invitation.objects.filter(group_id=group_id).exists()
        assert not Expense.objects.filter(group_id=group_id).exists()
        assert not ExpenseSplit.objects.filter(expense_id=expense.id).exists()

    def test_member_cannot_delete_group(self, group_with_member, member_user):
        with pytest.raises(InsufficientPermissionsError):
            delete_group(group_id=group_with_member.id, user=member_user)

    def test_outsider_cannot_delete_group(self, group, other_user):
        with pytest.raises(NotMemberError):
            delete_group(group_id=group.id, user=other_user)


@pytest.mark.django_db
class TestMembership:

    def test_only_admin_cannot_leave(self, group, user):
        with pytest.raises(LastAdminError):
            leave_group(group_id=group.id, user=user)

    def test_admin_can_leave_when_another_admin_exists(self, group_with_member, user, member_user):
        update_member_role(
            group_id=group_with_member.id,
            user_id=member_user.id,
            new_role=GroupRole.ADMIN,
            updated_by=user,
        )

        leave_group(group_id=group_with_member.id, user=user)

        assert not group_with_member.has_member(user)

    def test_leave_when_not_member(self, group, other_user):
        with pytest.raises(MemberNotFoundError):
            leave_group(group_id=group.id, user=other_user)

    def test_cannot_remove_only_admin(self, group, user):
        with pytest.raises(LastAdminError):
            remove_member(group_id=group.id, user_id=user.id, removed_by=user)

    def test_cannot_demote_only_admin(self, group, user):
        with pytest.raises(LastAdminError):
            update_member_role(group_id=group.id, user_id=user.id, new_role=GroupRole.MEMBER, updated_by=user)

    def test_member_can_remove_self(self, group_with_member, member_user):
        remove_member(group_id=group_with_member.id, user_id=member_user.id, removed_by=member_user)

        assert not group_with_member.has_member(member_user)

    def test_member_cannot_remove_others(self, group_with_member, user, member_user):
        with pytest.raises(InsufficientPermissionsError):
            remove_member(group_id=group_with_member.id, user_id=user.id, removed_by=member_user)


@pytest.mark.django_db
class TestInvitations:

    def test_token_is_64_hex_chars(self, group, user, other_user):
        invitation = send_invitation(group_id=group.id, email=other_user.email, invited_by=user)

        assert len(invitation.token) == 64
        int(invitation.token, 16)

    def test_expires_in_seven_days(self, group, user, other_user):
        invitation = send_invitation(group_id=group.id, email=other_user.email, invited_by=user)

        delta = invitation.expires_at - timezone.now()
        assert timedelta(days=6, hours=23) < delta <= timedelta(days=7)

    def test_already_invited(self, invitation, group, user, other_user):
        with pytest.raises(AlreadyInvitedError):
            send_invitation(group_id=group.id, email=other_user.email.upper(), invited_by=user)

    def test_already_member(self, group_with_member, user, member_user):
        with pytest.raises(AlreadyMemberError):
            send_invitation(group_id=group_with_member.id, email=member_user.email, invited_by=user)

    def test_accept_adds_member(self, invitation, other_user):
        membership = accept_invitation(token=invitation.token, user=other_user)

        assert membership.role == GroupRole.MEMBER
        invitation.refresh_from_db()
        assert invitation.accepted

    def test_accept_expired(self, expired_invitation, other_user):
        with pytest.raises(InvitationExpiredError):
            accept_invitation(token=expired_invitation.token, user=other_user)

    def test_accept_wrong_email(self, invitation, member_user):
        with pytest.raises(InvitationEmailMismatchError):
            accept_invitation(token=invitation.token, user=member_user)

    def test_accept_rechecks_locked_invitation(self, invitation, group, other_user, monkeypatch):
        stale = Invitation.objects.get(pk=invitation.pk)
        Invitation.objects.filter(pk=invitation.pk).update(accepted=True)
        monkeypatch.setattr(
            'apps.groups.services.invitation_management.get_open_invitation',
            lambda *, token: stale,
        )

        with pytest.raises(InvitationAlreadyAcceptedError):
            accept_invitation(token=invitation.token, user=other_user)

        assert not group.has_member(other_user)


@pytest.mark.django_db
class TestExpenses:

    def test_payer_split_marked_paid(self, group_with_member, user, member_user):
        expense = create_expense(
            group_id=group_with_member.id,
            paid_by=user,
            title='Pizza',
            amount=Decimal('20.00'),
            splits=[
                {'user_id': user.id, 'amount': Decimal('10.00')},
                {'user_id': member_user.id, 'amount': Decimal('10.00')},
            ],
        )

        paid = {split.user_id: split.paid for split in expense.splits.all()}
        assert paid == {user.id: True, member_user.id: False}

    def test_split_sum_within_a_cent(self, group_with_member, user, member_user):
        expense = create_expense(
            group_id=group_with_member.id,
            paid_by=user,
            title='Thirds',
            amount=Decimal('10.00'),
            splits=[
                {'user_id': user.id, 'amount': Decimal('3.33')},
                {'user_id': member_user.id, 'amount': Decimal('6.66')},
            ],
        )

        assert expense.amount == Decimal('10.00')

    def test_split_sum_mismatch(self, group_with_member, user, member_user):
        with pytest.raises(InvalidExpenseError, match='Split amounts must equal'):
            create_expense(
                group_id=group_with_member.id,
                paid_by=user,
                title='Off',
                amount=Decimal('10.00'),
                splits=[{'user_id': user.id, 'amount': Decimal('9.00')}],
            )

    def test_split_user_must_be_member(self, group, user, other_user):
        with pytest.raises(InvalidExpenseError, match='not members'):
            create_expense(
                group_id=group.id,
                paid_by=user,
                title='Outsider',
                amount=Decimal('10.00'),
                splits=[{'user_id': other_user.id, 'amount': Decimal('10.00')}],
            )

    @pytest.mark.parametrize('title,amount,message', [
        ('  ', Decimal('5.00'), 'Title is required'),
        ('Snacks', Decimal('0'), 'Valid amount is required'),
        ('Snacks', Decimal('-1'), 'Valid amount is required'),
    ])
    def test_header_validation(self, group, user, title, amount, message):
        with pytest.raises(InvalidExpenseError, match=message):
            create_expense(
                group_id=group.id,
                paid_by=user,
                title=title,
                amount=amount,
                splits=[{'user_id': user.id, 'amount': amount}],
            )

    def test_splits_required(self, group, user):
        with pytest.raises(InvalidExpenseError, match='splits are required'):
            create_expense(group_id=group.id, paid_by=user, title='Nothing', amount=Decimal('1.00'), splits=[])

    def test_update_by_non_payer(self, expense, member_user):
        with pytest.raises(InsufficientPermissionsError):
            update_expense(
                group_id=expense.group_id,
                expense_id=expense.id,
                user=member_user,
                title='Hijack',
                amount=Decimal('30.00'),
            )

    def test_update_amount_without_splits_must_still_balance(self, expense, user):
        with pytest.raises(InvalidExpenseError):
            update_expense(
                group_id=expense.group_id,
                expense_id=expense.id,
                user=user,
                title='Groceries',
                amount=Decimal('40.00'),
            )
