"""
Friends app services layer.

Friendships are directional rows; services keep both directions in step.
"""

from .exceptions import (
    FriendsServiceError,
    UserNotFoundError,
    InvalidFriendRequestError,
    FriendRequestNotFoundError,
    FriendNotFoundError,
    SearchQueryTooShortError,
)

from .friend_requests import (
    send_friend_request,
    get_pending_requests,
    respond_to_friend_request,
    get_friends,
)

from .friend_search import search_users

from .friend_summary import get_friend_detail


__all__ = [
    # Exceptions
    'FriendsServiceError',
    'UserNotFoundError',
    'InvalidFriendRequestError',
    'FriendRequestNotFoundError',
    'FriendNotFoundError',
    'SearchQueryTooShortError',

    # Friend requests
    'send_friend_request',
    'get_pending_requests',
    'respond_to_friend_request',
    'get_friends',

    # Search
    'search_users',

    # Friend detail
    'get_friend_detail',
]
