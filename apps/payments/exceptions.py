class PaymentsServiceError(Exception):
    """Base exception for payment request services."""
    pass


class PaymentRequestNotFoundError(PaymentsServiceError):
    """Payment request does not exist or the user is not part of it."""
    pass


class NotParticipantError(PaymentsServiceError):
    """User is neither payer nor payee."""
    pass


class WrongActorError(PaymentsServiceError):
    """Action reserved for the other side of the request."""
    pass


class InvalidStatusError(PaymentsServiceError):
    """Status is outside the allowed set."""
    pass


class NoFieldsToUpdateError(PaymentsServiceError):
    pass


class DuplicatePaymentRequestError(PaymentsServiceError):
    """A request already exists for this bill, payer and payee."""
    pass


class CannotCancelCompletedError(PaymentsServiceError):
    pass


class PayerNotFoundError(PaymentsServiceError):
    pass


class SelfPaymentRequestError(PaymentsServiceError):
    pass


class BillNotFoundError(PaymentsServiceError):
    pass
