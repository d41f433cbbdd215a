"""
Friend detail service: balance summary and shared bill history.
"""

from decimal import Decimal
from typing import Any, Dict

from django.conf import settings

from apps.accounts.models import User
from apps.bills.models import Bill, BillParticipant, BillStatus
from apps.friends.models import FriendshipStatus

from .exceptions import FriendNotFoundError

HISTORY_LIMIT = 20


def get_friend_detail(*, user: User, username: str) -> Dict[str, Any]:
    """
    Summarise what ``user`` and the friend ``username`` owe each other.

    Only active bills both users participate in are counted. The
    outstanding amount of a participant is ``amount_owed - amount_paid``.
    ``they_owe - you_owe`` gives the net: the viewer is owed when it is
    zero or positive.

    Returns:
        Dict with ``friend``, ``summary`` and ``history`` keys

    Raises:
        FriendNotFoundError: If username is not an accepted friend of user
    """
    try:
        friend = User.objects.get(
            username=username,
            friend_of__user=user,
            friend_of__status=FriendshipStatus.ACCEPTED,
        )
    except User.DoesNotExist:
        raise FriendNotFoundError("Friend not found or not in your friend list")

    currency = settings.DEFAULT_CURRENCY

    shared_bills = (
        Bill.objects
        .filter(status=BillStatus.ACTIVE, participants__user=user)
        .filter(participants__user=friend)
        .distinct()
        .order_by('-created_at')
    )

    participations = {
        (p.bill_id, p.user_id): p
        for p in BillParticipant.objects.filter(
            bill__in=shared_bills,
            user__in=[user, friend],
        )
    }

    you_owe = Decimal('0.00')
    they_owe = Decimal('0.00')
    history = []

    for bill in shared_bills:
        yours = participations[(bill.id, user.id)].outstanding
        theirs = participations[(bill.id, friend.id)].outstanding
        you_owe += yours
        they_owe += theirs

        if len(history) < HISTORY_LIMIT:
            history.append({
                'id': bill.id,
                'label': bill.title,
                'date': bill.created_at.date(),
                'amount': -yours if yours > 0 else theirs,
                'currency': currency,
            })

    net = they_owe - you_owe

    return {
        'friend': friend,
        'summary': {
            'amount': abs(net),
            'status': 'owed' if net >= 0 else 'owe',
            'currency': currency,
        },
        'history': history,
    }
