"""
Friend request service.

Handles sending, listing and answering friend requests, plus the
accepted friend list.
"""

import logging
from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import Count, Q, QuerySet

from apps.accounts.models import User
from apps.bills.models import BillStatus
from apps.friends.models import Friendship, FriendshipStatus

from .exceptions import (
    UserNotFoundError,
    InvalidFriendRequestError,
    FriendRequestNotFoundError,
)

logger = logging.getLogger(__name__)

ACCEPT = 'accept'
REJECT = 'reject'


def send_friend_request(*, user: User, friend_id: UUID) -> Friendship:
    """
    Send a friend request from ``user`` to ``friend_id``.

    Args:
        user: User sending the request
        friend_id: UUID of the user to befriend

    Returns:
        Created pending Friendship

    Raises:
        InvalidFriendRequestError: Self-request, or a row already exists
        UserNotFoundError: If the target user does not exist
    """
    if str(friend_id) == str(user.id):
        raise InvalidFriendRequestError("Cannot add yourself as a friend")

    existing = Friendship.objects.filter(user=user, friend_id=friend_id).first()
    if existing is not None:
        if existing.status == FriendshipStatus.PENDING:
            raise InvalidFriendRequestError("Friend request already sent")
        if existing.status == FriendshipStatus.ACCEPTED:
            raise InvalidFriendRequestError("Already friends")
        raise InvalidFriendRequestError("Cannot send friend request")

    if not User.objects.filter(id=friend_id).exists():
        raise UserNotFoundError("User not found")

    try:
        with transaction.atomic():
            friendship = Friendship.objects.create(
                user=user,
                friend_id=friend_id,
                status=FriendshipStatus.PENDING,
            )
    except IntegrityError:
        raise InvalidFriendRequestError("Friend request already sent")

    logger.info("Friend request %s sent from %s to %s", friendship.id, user.id, friend_id)
    return friendship


def get_pending_requests(*, user: User) -> QuerySet[Friendship]:
    """Pending requests addressed to ``user``, newest first."""
    return (
        Friendship.objects
        .filter(friend=user, status=FriendshipStatus.PENDING)
        .select_related('user')
        .order_by('-created_at')
    )


@transaction.atomic
def respond_to_friend_request(
    *,
    user: User,
    friendship_id: UUID,
    action: str
) -> str:
    """
    Accept or reject a pending request addressed to ``user``.

    Accepting marks the row accepted and creates the reciprocal accepted
    row (left untouched if it already exists). Rejecting deletes the row.

    Args:
        user: Recipient of the request
        friendship_id: UUID of the pending Friendship
        action: 'accept' or 'reject'

    Returns:
        The action performed

    Raises:
        ValueError: If action is not accept/reject
        FriendRequestNotFoundError: If no such pending request targets user
    """
    if action not in (ACCEPT, REJECT):
        raise ValueError("Invalid request parameters")

    try:
        friendship = (
            Friendship.objects
            .select_for_update()
            .get(id=friendship_id, friend=user, status=FriendshipStatus.PENDING)
        )
    except Friendship.DoesNotExist:
        raise FriendRequestNotFoundError("Friend request not found")

    if action == REJECT:
        friendship.delete()
        logger.info("Friend request %s rejected by %s", friendship_id, user.id)
        return action

    friendship.status = FriendshipStatus.ACCEPTED
    friendship.save(update_fields=['status', 'updated_at'])

    Friendship.objects.get_or_create(
        user=user,
        friend_id=friendship.user_id,
        defaults={'status': FriendshipStatus.ACCEPTED},
    )

    logger.info("Friend request %s accepted by %s", friendship_id, user.id)
    return action


def get_friends(*, user: User) -> QuerySet[User]:
    """
    Accepted friends of ``user`` ordered by name.

    Each user is annotated with ``bills_count``: distinct active bills
    the friend participates in.
    """
    return (
        User.objects
        .filter(
            friend_of__user=user,
            friend_of__status=FriendshipStatus.ACCEPTED,
        )
        .annotate(
            bills_count=Count(
                'bill_participations__bill',
                filter=Q(bill_participations__bill__status=BillStatus.ACTIVE),
                distinct=True,
            )
        )
        .order_by('name', 'username')
    )
