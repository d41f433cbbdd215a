"""
Domain exceptions for bills app.
"""


class BillServiceError(Exception):
    """Base exception for bill service errors."""
    pass


class NoParticipantsError(BillServiceError):
    """Raised when a bill is saved without participants."""
    pass


class UnknownParticipantError(BillServiceError):
    """Raised when a participant or share holder does not exist."""
    pass


class InvalidSplitError(BillServiceError):
    """Raised when an item's shares cannot be split."""
    pass
