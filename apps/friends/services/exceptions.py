"""
Domain-specific exceptions for friends app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class FriendsServiceError(Exception):
    """Base exception for all friends service errors."""
    pass


class UserNotFoundError(FriendsServiceError):
    """Raised when the target user does not exist."""
    pass


class InvalidFriendRequestError(FriendsServiceError):
    """Raised when a friend request cannot be sent (self, duplicate, blocked)."""
    pass


class FriendRequestNotFoundError(FriendsServiceError):
    """Raised when a pending request addressed to the user does not exist."""
    pass


class FriendNotFoundError(FriendsServiceError):
    """Raised when a username is not in the user's accepted friend list."""
    pass


class SearchQueryTooShortError(FriendsServiceError):
    """Raised when a user search query is shorter than the minimum length."""
    pass
