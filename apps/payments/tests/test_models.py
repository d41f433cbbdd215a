from decimal import Decimal

import pytest
from django.db import IntegrityError, transaction

from apps.payments.models import PaymentRequest, PaymentStatus


@pytest.mark.django_db
class TestPaymentRequestModel:

    def test_defaults(self, payment_request):
        assert payment_request.status == PaymentStatus.SENT
        assert payment_request.currency == 'USD'
        assert payment_request.payment_method == 'manual'
        assert payment_request.reminder_count == 0

    @pytest.mark.parametrize('status', PaymentStatus.values)
    def test_allowed_statuses_saved(self, payer, payee, status):
        request = PaymentRequest.objects.create(payer=payer, payee=payee, amount=Decimal('1.00'), status=status)

        assert PaymentRequest.objects.get(pk=request.pk).status == status

    def test_check_constraint_rejects_unknown_status(self, payment_request):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                PaymentRequest.objects.filter(pk=payment_request.pk).update(status='paid')

    def test_terminal_statuses(self, payment_request):
        assert not payment_request.is_terminal
        payment_request.status = PaymentStatus.DISPUTED
        assert payment_request.is_terminal
