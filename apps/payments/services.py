"""
Payment Request Services
========================

Listing, creating and moving payment requests between statuses.

Transitions are not ordered: any participant update may set any allowed
status, and each action only checks that the right side of the request is
acting (payer accepts, rejects and marks paid; payee confirms, disputes
and reminds).
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.db.models import F, Q, QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.bills.models import Bill

from .exceptions import (
    PaymentRequestNotFoundError,
    NotParticipantError,
    WrongActorError,
    InvalidStatusError,
    NoFieldsToUpdateError,
    DuplicatePaymentRequestError,
    CannotCancelCompletedError,
    PayerNotFoundError,
    BillNotFoundError,
    SelfPaymentRequestError,
)
from .models import PaymentRequest, PaymentStatus

logger = logging.getLogger(__name__)

PAYER = 'payer'
PAYEE = 'payee'

# action name -> (side allowed to perform it, resulting status)
ACTIONS = {
    'accept': (PAYER, PaymentStatus.ACCEPTED),
    'reject': (PAYER, PaymentStatus.REJECTED),
    'mark_paid': (PAYER, PaymentStatus.PAID_PENDING_CONFIRMATION),
    'confirm': (PAYEE, PaymentStatus.COMPLETED),
    'dispute': (PAYEE, PaymentStatus.DISPUTED),
    'remind': (PAYEE, None),
}


def _base_queryset() -> QuerySet:
    return PaymentRequest.objects.select_related('payer', 'payee', 'bill')


def _get_for_participant(*, user: User, request_id: UUID) -> PaymentRequest:
    """
    Fetch a request the user takes part in.

    Raises:
        PaymentRequestNotFoundError: If the request does not exist
        NotParticipantError: If user is neither payer nor payee
    """
    try:
        payment_request = _base_queryset().get(id=request_id)
    except PaymentRequest.DoesNotExist:
        raise PaymentRequestNotFoundError("Payment request not found")

    if not payment_request.is_participant(user):
        raise NotParticipantError("Not authorized to access this payment request")

    return payment_request


def list_payment_requests(
    *,
    user: User,
    status: Optional[str] = None,
    request_type: Optional[str] = None,
) -> QuerySet:
    """
    Requests where user is payer or payee, newest first.

    Args:
        user: Viewer
        status: Optional exact status filter
        request_type: 'incoming' (user pays) or 'outgoing' (user is owed)

    Returns:
        QuerySet of PaymentRequest
    """
    queryset = _base_queryset().filter(Q(payer=user) | Q(payee=user))

    if status:
        queryset = queryset.filter(status=status)

    if request_type == 'incoming':
        queryset = queryset.filter(payer=user)
    elif request_type == 'outgoing':
        queryset = queryset.filter(payee=user)

    return queryset.order_by('-created_at')


def get_payment_request(*, user: User, request_id: UUID) -> PaymentRequest:
    """
    Get a single request.

    Requests the user is not part of are reported as missing.

    Raises:
        PaymentRequestNotFoundError: If missing or not visible to user
    """
    try:
        return _get_for_participant(user=user, request_id=request_id)
    except NotParticipantError:
        raise PaymentRequestNotFoundError("Payment request not found")


def create_payment_request(
    *,
    payee: User,
    payer_id: UUID,
    amount: Decimal,
    bill_id: Optional[UUID] = None,
    currency: Optional[str] = None,
    description: str = '',
    due_date=None,
    payment_method: str = 'manual',
    notes: str = '',
) -> PaymentRequest:
    """
    Ask another user to pay ``payee``.

    Args:
        payee: User creating the request (will receive the money)
        payer_id: User who owes
        amount: Amount owed
        bill_id: Optional bill the request settles

    Returns:
        PaymentRequest: New request with status ``sent``

    Raises:
        SelfPaymentRequestError: If payer and payee are the same user
        PayerNotFoundError: If the payer does not exist
        BillNotFoundError: If bill_id is given but unknown
        DuplicatePaymentRequestError: If a request for the same bill,
            payer and payee exists
    """
    if str(payer_id) == str(payee.id):
        raise SelfPaymentRequestError("Cannot request a payment from yourself")

    if not User.objects.filter(id=payer_id, is_active=True).exists():
        raise PayerNotFoundError("Payer not found")

    if bill_id is not None and not Bill.objects.filter(id=bill_id).exists():
        raise BillNotFoundError("Bill not found")

    # Only requests tied to a bill are deduplicated
    if bill_id is not None and PaymentRequest.objects.filter(
        bill_id=bill_id, payer_id=payer_id, payee=payee,
    ).exists():
        raise DuplicatePaymentRequestError("Payment request already exists for this bill")

    payment_request = PaymentRequest.objects.create(
        bill_id=bill_id,
        payer_id=payer_id,
        payee=payee,
        amount=amount,
        currency=currency or settings.DEFAULT_CURRENCY,
        description=description,
        due_date=due_date,
        payment_method=payment_method or 'manual',
        notes=notes,
    )

    logger.info(
        "Payment request %s created: payer=%s payee=%s",
        payment_request.id, payer_id, payee.id,
    )
    return payment_request


@transaction.atomic
def update_payment_request(
    *,
    user: User,
    request_id: UUID,
    status: Optional[str] = None,
    notes: Optional[str] = None,
    payment_method: Optional[str] = None,
) -> PaymentRequest:
    """
    Update status, notes or payment method.

    Any participant may set any allowed status. Setting ``completed``
    stamps ``completed_at``.

    Raises:
        PaymentRequestNotFoundError: If the request does not exist
        NotParticipantError: If user is neither payer nor payee
        NoFieldsToUpdateError: If nothing was supplied
        InvalidStatusError: If status is outside the allowed set
    """
    payment_request = _get_for_participant(user=user, request_id=request_id)

    update_fields = []
    if status is not None:
        if status not in PaymentStatus.values:
            raise InvalidStatusError(f"Invalid status: {status}")
        payment_request.status = status
        update_fields.append('status')
        if status == PaymentStatus.COMPLETED:
            payment_request.completed_at = timezone.now()
            update_fields.append('completed_at')

    if notes is not None:
        payment_request.notes = notes
        update_fields.append('notes')

    if payment_method is not None:
        payment_request.payment_method = payment_method
        update_fields.append('payment_method')

    if not update_fields:
        raise NoFieldsToUpdateError("No valid fields to update")

    payment_request.save(update_fields=update_fields + ['updated_at'])

    logger.info(
        "Payment request %s updated by %s: %s",
        payment_request.id, user.id, ', '.join(update_fields),
    )
    return payment_request


def cancel_payment_request(*, user: User, request_id: UUID) -> PaymentRequest:
    """
    Cancel a request. Completed requests cannot be cancelled.

    Raises:
        PaymentRequestNotFoundError: If the request does not exist
        NotParticipantError: If user is neither payer nor payee
        CannotCancelCompletedError: If the request is completed
    """
    payment_request = _get_for_participant(user=user, request_id=request_id)

    if payment_request.status == PaymentStatus.COMPLETED:
        raise CannotCancelCompletedError("Cannot cancel completed payment")

    PaymentRequest.objects.filter(id=payment_request.id).update(
        status=PaymentStatus.CANCELLED,
        updated_at=timezone.now(),
    )
    payment_request.refresh_from_db()

    logger.info("Payment request %s cancelled by %s", payment_request.id, user.id)
    return payment_request


def perform_action(*, user: User, request_id: UUID, action: str) -> PaymentRequest:
    """
    Apply a named action (see ``ACTIONS``) to a request.

    Args:
        user: Acting user
        request_id: Request to act on
        action: One of accept, reject, mark_paid, confirm, dispute, remind

    Returns:
        PaymentRequest: Request after the update

    Raises:
        ValueError: If action is unknown
        PaymentRequestNotFoundError: If the request does not exist
        WrongActorError: If user is not the side allowed to act
    """
    if action not in ACTIONS:
        raise ValueError(f"Unknown action: {action}")

    side, new_status = ACTIONS[action]

    try:
        payment_request = _get_for_participant(user=user, request_id=request_id)
    except NotParticipantError:
        raise WrongActorError(f"Only the {side} can {action.replace('_', ' ')} this request")

    actor_id = payment_request.payer_id if side == PAYER else payment_request.payee_id
    if user.id != actor_id:
        raise WrongActorError(f"Only the {side} can {action.replace('_', ' ')} this request")

    now = timezone.now()
    if new_status is None:
        changes = {
            'reminder_count': F('reminder_count') + 1,
            'last_reminder_sent': now,
        }
    else:
        changes = {'status': new_status}
        if new_status == PaymentStatus.COMPLETED:
            changes['completed_at'] = now

    PaymentRequest.objects.filter(id=payment_request.id).update(updated_at=now, **changes)
    payment_request.refresh_from_db()

    logger.info(
        "Payment request %s: %s by %s (status=%s)",
        payment_request.id, action, user.id, payment_request.status,
    )
    return payment_request
