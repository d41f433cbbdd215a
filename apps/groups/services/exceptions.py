"""
Domain-specific exceptions for groups app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class GroupsServiceError(Exception):
    """Base exception for all groups service errors."""
    pass


class GroupNotFoundError(GroupsServiceError):
    """Raised when a group does not exist."""
    pass


class NotMemberError(GroupsServiceError):
    """Raised when a user tries to perform an action requiring membership."""
    pass


class InsufficientPermissionsError(GroupsServiceError):
    """Raised when a user lacks required permissions for an action."""
    pass


class InvalidGroupDataError(GroupsServiceError):
    """Raised when group fields fail business validation."""
    pass


class UserNotFoundError(GroupsServiceError):
    pass


class MemberNotFoundError(GroupsServiceError):
    """Raised when the target user has no membership in the group."""
    pass


class AlreadyMemberError(GroupsServiceError):
    """Raised when a user is already in the group."""
    pass


class LastAdminError(GroupsServiceError):
    """Raised when an action would leave a group without an admin."""
    pass


class AlreadyInvitedError(GroupsServiceError):
    """Raised when an open invitation exists for the email."""
    pass


class InvitationNotFoundError(GroupsServiceError):
    pass


class InvitationExpiredError(GroupsServiceError):
    pass


class InvitationAlreadyAcceptedError(GroupsServiceError):
    pass


class InvitationEmailMismatchError(GroupsServiceError):
    """Raised when an invitation is redeemed by a different account."""
    pass


class ExpenseNotFoundError(GroupsServiceError):
    pass


class InvalidExpenseError(GroupsServiceError):
    """Raised when expense fields or splits fail validation."""
    pass
