"""
Expense management service.

Expenses belong to a group and are paid by the member who records them.
Their splits must name group members and add up to the expense amount
(to the cent). Only the payer may change or delete an expense.
"""

import logging
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.db.models import Prefetch, QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.groups.models import Expense, ExpenseSplit, GroupMember, SplitType

from .exceptions import (
    ExpenseNotFoundError,
    InvalidExpenseError,
    InsufficientPermissionsError,
)
from .group_management import get_membership

logger = logging.getLogger(__name__)

SPLIT_TOLERANCE = Decimal('0.01')


def _expense_queryset() -> QuerySet[Expense]:
    return (
        Expense.objects
        .select_related('paid_by')
        .prefetch_related(
            Prefetch('splits', queryset=ExpenseSplit.objects.select_related('user'))
        )
    )


def _validate_header(title: str, amount) -> str:
    title = (title or '').strip()
    if not title:
        raise InvalidExpenseError("Title is required")
    if amount is None or Decimal(amount) <= 0:
        raise InvalidExpenseError("Valid amount is required")
    return title


def _validate_splits(*, group_id: UUID, amount: Decimal, splits: List[dict]) -> None:
    if not splits:
        raise InvalidExpenseError("Expense splits are required")

    member_ids = {
        str(pk) for pk in
        GroupMember.objects.filter(group_id=group_id).values_list('user_id', flat=True)
    }
    if any(str(split['user_id']) not in member_ids for split in splits):
        raise InvalidExpenseError("Some users are not members of this group")

    total = sum((Decimal(split['amount']) for split in splits), Decimal('0'))
    if abs(total - Decimal(amount)) > SPLIT_TOLERANCE:
        raise InvalidExpenseError("Split amounts must equal the total expense amount")


def _create_splits(expense: Expense, splits: List[dict]) -> None:
    ExpenseSplit.objects.bulk_create([
        ExpenseSplit(
            expense=expense,
            user_id=split['user_id'],
            amount=split['amount'],
            # The payer's own share is already settled
            paid=str(split['user_id']) == str(expense.paid_by_id),
        )
        for split in splits
    ])


def list_expenses(*, group_id: UUID, user: User) -> QuerySet[Expense]:
    """Group expenses, most recent date first (members only)."""
    get_membership(group_id=group_id, user=user)
    return _expense_queryset().filter(group_id=group_id).order_by('-date')


def get_expense(*, group_id: UUID, expense_id: UUID, user: User) -> Expense:
    """
    Single expense with splits (members only).

    Raises:
        NotMemberError: If user is not a member
        ExpenseNotFoundError: If the expense is not in this group
    """
    get_membership(group_id=group_id, user=user)
    try:
        return _expense_queryset().get(id=expense_id, group_id=group_id)
    except Expense.DoesNotExist:
        raise ExpenseNotFoundError("Expense not found")


@transaction.atomic
def create_expense(
    *,
    group_id: UUID,
    paid_by: User,
    title: str,
    amount: Decimal,
    splits: List[dict],
    description: str = '',
    currency: Optional[str] = None,
    category: str = '',
    split_type: str = SplitType.EQUAL,
    date=None,
) -> Expense:
    """
    Record an expense paid by ``paid_by`` and its splits.

    Args:
        group_id: UUID of the group
        paid_by: Member who paid (the caller)
        title: Expense title
        amount: Total amount, must be positive
        splits: ``[{'user_id': UUID, 'amount': Decimal}, ...]``

    Returns:
        Created Expense

    Raises:
        NotMemberError: If paid_by is not a member
        InvalidExpenseError: If fields or splits are invalid
    """
    group, _ = get_membership(group_id=group_id, user=paid_by)
    title = _validate_header(title, amount)
    _validate_splits(group_id=group.id, amount=amount, splits=splits)

    expense = Expense.objects.create(
        group=group,
        paid_by=paid_by,
        title=title,
        description=(description or '').strip(),
        amount=amount,
        currency=currency or settings.DEFAULT_CURRENCY,
        category=(category or '').strip(),
        split_type=split_type or SplitType.EQUAL,
        date=date or timezone.now(),
    )
    _create_splits(expense, splits)

    logger.info("Expense %s created in group %s by %s", expense.id, group.id, paid_by.id)
    return _expense_queryset().get(pk=expense.pk)


def _get_own_expense(*, group_id: UUID, expense_id: UUID, user: User, verb: str) -> Expense:
    get_membership(group_id=group_id, user=user)
    try:
        expense = Expense.objects.select_for_update().get(id=expense_id, group_id=group_id)
    except Expense.DoesNotExist:
        raise ExpenseNotFoundError("Expense not found")

    if expense.paid_by_id != user.id:
        raise InsufficientPermissionsError(f"Only the person who paid can {verb} this expense")
    return expense


@transaction.atomic
def update_expense(
    *,
    group_id: UUID,
    expense_id: UUID,
    user: User,
    title: str,
    amount: Decimal,
    description: str = '',
    currency: Optional[str] = None,
    category: str = '',
    split_type: Optional[str] = None,
    date=None,
    splits: Optional[List[dict]] = None,
) -> Expense:
    """
    Replace an expense's fields (payer only).

    When ``splits`` is given they replace the old splits; otherwise the
    existing splits must still add up to the new amount.

    Raises:
        NotMemberError: If user is not a member
        ExpenseNotFoundError: If the expense is not in this group
        InsufficientPermissionsError: If user did not pay the expense
        InvalidExpenseError: If fields or splits are invalid
    """
    expense = _get_own_expense(group_id=group_id, expense_id=expense_id, user=user, verb='edit')
    title = _validate_header(title, amount)

    if splits is not None:
        _validate_splits(group_id=group_id, amount=amount, splits=splits)
    else:
        existing = [
            {'user_id': s.user_id, 'amount': s.amount}
            for s in expense.splits.all()
        ]
        _validate_splits(group_id=group_id, amount=amount, splits=existing)

    expense.title = title
    expense.description = (description or '').strip()
    expense.amount = amount
    expense.currency = currency or settings.DEFAULT_CURRENCY
    expense.category = (category or '').strip()
    if split_type:
        expense.split_type = split_type
    expense.date = date or timezone.now()
    expense.save()

    if splits is not None:
        expense.splits.all().delete()
        _create_splits(expense, splits)

    logger.info("Expense %s updated by %s", expense.id, user.id)
    return _expense_queryset().get(pk=expense.pk)


@transaction.atomic
def delete_expense(*, group_id: UUID, expense_id: UUID, user: User) -> None:
    """
    Delete an expense and its splits (payer only).

    Raises:
        NotMemberError: If user is not a member
        ExpenseNotFoundError: If the expense is not in this group
        InsufficientPermissionsError: If user did not pay the expense
    """
    expense = _get_own_expense(group_id=group_id, expense_id=expense_id, user=user, verb='delete')
    expense.delete()
    logger.info("Expense %s deleted by %s", expense_id, user.id)
