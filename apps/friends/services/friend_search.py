"""
User search service for finding people to befriend.
"""

from typing import List

from django.db.models import Case, IntegerField, OuterRef, Q, Subquery, Value, When

from apps.accounts.models import User
from apps.friends.models import Friendship, FriendshipStatus

from .exceptions import SearchQueryTooShortError

MIN_QUERY_LENGTH = 2
MAX_RESULTS = 20


def search_users(*, user: User, query: str) -> List[User]:
    """
    Search users by name or username.

    Excludes ``user`` and everyone ``user`` already has a pending or
    accepted row toward; blocked users stay visible. Username-prefix
    matches rank first, then name-prefix matches, then the rest.

    Each returned user carries ``friendship_status`` (None or 'blocked').

    Raises:
        SearchQueryTooShortError: If the trimmed query is under 2 characters
    """
    query = (query or '').strip()
    if len(query) < MIN_QUERY_LENGTH:
        raise SearchQueryTooShortError(
            f"Search query must be at least {MIN_QUERY_LENGTH} characters"
        )

    outgoing = Friendship.objects.filter(user=user, friend=OuterRef('pk'))

    return list(
        User.objects
        .exclude(id=user.id)
        .filter(Q(name__icontains=query) | Q(username__icontains=query))
        .annotate(friendship_status=Subquery(outgoing.values('status')[:1]))
        .filter(
            Q(friendship_status__isnull=True)
            | Q(friendship_status=FriendshipStatus.BLOCKED)
        )
        .annotate(
            match_rank=Case(
                When(username__istartswith=query, then=Value(1)),
                When(name__istartswith=query, then=Value(2)),
                default=Value(3),
                output_field=IntegerField(),
            )
        )
        .order_by('match_rank', 'username')[:MAX_RESULTS]
    )
