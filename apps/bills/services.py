"""
Bill Services Module
====================

Saves an itemised bill together with the payment requests it implies.

Each item's price including tax is divided between the users holding
shares of it, in proportion to their shares. Amounts are computed in
integer cents and the leftover cents go one each to the first holders,
so the splits of an item always sum exactly to the item total.

Example::

    from apps.bills.services import BillSplitService

    bill, requests = BillSplitService.save_and_request(
        created_by=alice,
        bill_data={
            'title': 'Dinner',
            'merchant': 'Trattoria',
            'currency': 'USD',
            'total': Decimal('33.00'),
            'items': [{
                'name': 'Pizza',
                'total_price': Decimal('30.00'),
                'tax_percentage': Decimal('10'),
                'shares': [
                    {'user_id': alice.id, 'amount': 1},
                    {'user_id': bob.id, 'amount': 2},
                ],
            }],
        },
        participants=[
            {'user_id': alice.id, 'total': Decimal('11.00')},
            {'user_id': bob.id, 'total': Decimal('22.00')},
        ],
    )
    # One pending PaymentRequest: bob pays alice 22.00
"""

import logging
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP
from typing import List, Tuple

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User
from apps.payments.models import PaymentRequest, PaymentStatus

from .exceptions import NoParticipantsError, UnknownParticipantError, InvalidSplitError
from .models import Bill, BillItem, BillItemSplit, BillParticipant, ParticipantRole

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


def to_cents(amount: Decimal) -> int:
    return int((Decimal(amount) * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def allocate_cents(total_cents: int, weights: List[Decimal]) -> List[int]:
    """
    Split ``total_cents`` proportionally to ``weights``.

    Every part is floored, then the remaining cents are handed out one
    each to the first parts. The result always sums to ``total_cents``.
    """
    weight_sum = sum(weights)
    if weight_sum <= 0:
        raise InvalidSplitError("Shares must add up to more than zero")

    parts = [
        int((Decimal(total_cents) * w / weight_sum).to_integral_value(rounding=ROUND_DOWN))
        for w in weights
    ]
    remainder = total_cents - sum(parts)
    for i in range(remainder):
        parts[i % len(parts)] += 1
    return parts


class BillSplitService:
    """Service for saving bills and raising the resulting payment requests."""

    @staticmethod
    def item_tax(total_price: Decimal, tax_percentage: Decimal) -> Decimal:
        return (Decimal(total_price) * Decimal(tax_percentage) / 100).quantize(CENT, rounding=ROUND_HALF_UP)

    @staticmethod
    def split_item(item: BillItem, shares: List[dict]) -> List[BillItemSplit]:
        """
        Build (unsaved) splits of ``item`` for every share holder with a
        positive share. Repeated holders are merged, their amounts summed.
        """
        merged = {}
        for share in shares:
            key = str(share['user_id'])
            if key in merged:
                merged[key]['amount'] += Decimal(share['amount'])
            else:
                merged[key] = {'user_id': share['user_id'], 'amount': Decimal(share['amount'])}

        holders = [s for s in merged.values() if s['amount'] > 0]
        if not holders:
            return []

        weights = [Decimal(s['amount']) for s in holders]
        total_cents = to_cents(item.total_price + item.tax_amount)
        subtotal_cents = to_cents(item.total_price)

        totals = allocate_cents(total_cents, weights)
        subtotals = allocate_cents(subtotal_cents, weights)

        splits = []
        for holder, total, subtotal in zip(holders, totals, subtotals):
            total_amount = Decimal(total) / 100
            subtotal_amount = Decimal(subtotal) / 100
            splits.append(BillItemSplit(
                bill_item=item,
                user_id=holder['user_id'],
                share_amount=Decimal(holder['amount']),
                subtotal_amount=subtotal_amount,
                tax_amount=total_amount - subtotal_amount,
                total_amount=total_amount,
            ))
        return splits

    @staticmethod
    @transaction.atomic
    def save_and_request(
        *,
        created_by: User,
        bill_data: dict,
        participants: List[dict],
    ) -> Tuple[Bill, List[PaymentRequest]]:
        """
        Save a bill, its items, item splits and participants, and create a
        pending payment request for every other participant who owes money.

        Everything happens in one transaction; any failure rolls back the
        whole bill.

        Args:
            created_by: User saving the bill; receives the payments
            bill_data: Bill header, totals and ``items`` with ``shares``
            participants: ``[{'user_id': UUID, 'total': Decimal}, ...]``

        Returns:
            tuple: (Bill, list of created PaymentRequest)

        Raises:
            NoParticipantsError: If participants is empty
            UnknownParticipantError: If a participant or share holder does not exist
            InvalidSplitError: If an item's shares sum to zero
        """
        if not participants:
            raise NoParticipantsError("Missing bill data or participants")

        items = bill_data.get('items', [])
        referenced = {str(p['user_id']) for p in participants}
        for item in items:
            referenced.update(str(s['user_id']) for s in item.get('shares', []))
        found = {str(pk) for pk in User.objects.filter(id__in=referenced).values_list('id', flat=True)}
        missing = referenced - found
        if missing:
            raise UnknownParticipantError(f"Unknown users: {', '.join(sorted(missing))}")

        currency = bill_data.get('currency') or settings.DEFAULT_CURRENCY
        merchant = bill_data.get('merchant', '')

        bill = Bill.objects.create(
            title=bill_data.get('title') or 'Bill Split',
            description=bill_data.get('description', ''),
            merchant=merchant,
            total_amount=bill_data['total'],
            subtotal=bill_data.get('subtotal', Decimal('0.00')),
            tax_amount=bill_data.get('total_tax', Decimal('0.00')),
            currency=currency,
            created_by=created_by,
            bill_date=bill_data.get('bill_date') or timezone.now(),
        )

        for line_number, item_data in enumerate(items):
            item = BillItem.objects.create(
                bill=bill,
                name=item_data['name'],
                unit_price=item_data.get('unit_price', Decimal('0.00')),
                quantity=item_data.get('quantity', Decimal('1')),
                total_price=item_data['total_price'],
                tax_percentage=item_data.get('tax_percentage', Decimal('0.00')),
                tax_amount=BillSplitService.item_tax(
                    item_data['total_price'],
                    item_data.get('tax_percentage', Decimal('0.00')),
                ),
                line_number=line_number,
            )
            BillItemSplit.objects.bulk_create(
                BillSplitService.split_item(item, item_data.get('shares', []))
            )

        creator_listed = False
        for participant in participants:
            is_creator = str(participant['user_id']) == str(created_by.id)
            creator_listed = creator_listed or is_creator
            BillParticipant.objects.update_or_create(
                bill=bill,
                user_id=participant['user_id'],
                defaults={
                    'role': ParticipantRole.CREATOR if is_creator else ParticipantRole.PARTICIPANT,
                    'total_share': participant['total'],
                    # The creator paid the bill up front
                    'amount_owed': Decimal('0.00') if is_creator else participant['total'],
                },
            )
        if not creator_listed:
            BillParticipant.objects.create(
                bill=bill,
                user=created_by,
                role=ParticipantRole.CREATOR,
            )

        payment_requests = []
        requested = set()
        for participant in participants:
            payer_key = str(participant['user_id'])
            if payer_key == str(created_by.id) or payer_key in requested or participant['total'] <= 0:
                continue
            requested.add(payer_key)
            payment_requests.append(PaymentRequest.objects.create(
                bill=bill,
                payer_id=participant['user_id'],
                payee=created_by,
                amount=participant['total'],
                currency=currency,
                description=f"Payment for bill split: {merchant or 'Bill'}",
                status=PaymentStatus.PENDING,
            ))

        logger.info(
            "Bill %s saved by %s with %d payment request(s)",
            bill.id, created_by.id, len(payment_requests),
        )
        return bill, payment_requests
