from decimal import Decimal

import pytest
from django.urls import reverse
from rest_framework import status

from apps.bills.models import Bill
from apps.payments.models import PaymentRequest, PaymentStatus


def detail_url(payment_request):
    return reverse('payments:request-detail', kwargs={'pk': payment_request.id})


def action_url(name, payment_request):
    return reverse(f'payments:request-{name}', kwargs={'pk': payment_request.id})


# =============================================================================
# List / Create
# =============================================================================

@pytest.mark.django_db
class TestPaymentRequestList:
    """Tests for GET /api/payments/requests/"""

    def test_payee_sees_sent_label(self, payee_client, payment_request):
        response = payee_client.get(reverse('payments:request-list'))

        assert response.status_code == status.HTTP_200_OK
        entry = response.data['requests'][0]
        assert entry['status'] == 'sent'
        assert entry['contextual_status'] == 'Sent'
        assert entry['status_description'] == 'You sent a request. Waiting for their response.'
        assert entry['payer_name'] == 'Bob'

    def test_payer_sees_waiting_label(self, payer_client, payment_request):
        response = payer_client.get(reverse('payments:request-list'))

        entry = response.data['requests'][0]
        assert entry['contextual_status'] == 'Waiting for your response'
        assert entry['status_description'] == 'You have a new payment request.'

    def test_outsider_sees_nothing(self, outsider_client, payment_request):
        response = outsider_client.get(reverse('payments:request-list'))

        assert response.data['requests'] == []

    def test_type_filter(self, payer_client, payee_client, payment_request):
        url = reverse('payments:request-list')

        assert len(payer_client.get(url, {'type': 'incoming'}).data['requests']) == 1
        assert len(payer_client.get(url, {'type': 'outgoing'}).data['requests']) == 0
        assert len(payee_client.get(url, {'type': 'outgoing'}).data['requests']) == 1

    def test_status_filter(self, payee_client, payment_request):
        url = reverse('payments:request-list')

        assert len(payee_client.get(url, {'status': 'sent'}).data['requests']) == 1
        assert len(payee_client.get(url, {'status': 'completed'}).data['requests']) == 0

    def test_newest_first(self, payee_client, payer, payee, payment_request):
        newer = PaymentRequest.objects.create(payer=payer, payee=payee, amount=Decimal('3.00'))

        response = payee_client.get(reverse('payments:request-list'))

        assert response.data['requests'][0]['id'] == str(newer.id)

    def test_unauthenticated(self, api_client):
        response = api_client.get(reverse('payments:request-list'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestPaymentRequestCreate:
    """Tests for POST /api/payments/requests/"""

    def test_create(self, payee_client, payer, payee):
        response = payee_client.post(
            reverse('payments:request-list'),
            {'payer_id': str(payer.id), 'amount': '15.00', 'description': 'Taxi'},
            format='json',
        )

        assert response.status_code == status.HTTP_201_CREATED
        request = PaymentRequest.objects.get()
        assert request.payee == payee
        assert request.payer == payer
        assert request.status == PaymentStatus.SENT
        assert request.currency == 'USD'

    def test_amount_required(self, payee_client, payer):
        response = payee_client.post(
            reverse('payments:request-list'),
            {'payer_id': str(payer.id)},
            format='json',
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_payer_required(self, payee_client):
        response = payee_client.post(reverse('payments:request-list'), {'amount': '5.00'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_cannot_request_from_self(self, payee_client, payee):
        response = payee_client.post(
            reverse('payments:request-list'),
            {'payer_id': str(payee.id), 'amount': '5.00'},
            format='json',
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_duplicate_for_same_bill(self, payee_client, payer, payee):
        bill = Bill.objects.create(title='Lunch', total_amount=Decimal('10.00'), created_by=payee)
        PaymentRequest.objects.create(bill=bill, payer=payer, payee=payee, amount=Decimal('5.00'))

        response = payee_client.post(
            reverse('payments:request-list'),
            {'payer_id': str(payer.id), 'amount': '5.00', 'bill_id': str(bill.id)},
            format='json',
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Payment request already exists for this bill'

    def test_repeat_requests_without_bill(self, payee_client, payer, payee):
        url = reverse('payments:request-list')

        first = payee_client.post(url, {'payer_id': str(payer.id), 'amount': '10.00'}, format='json')
        second = payee_client.post(
            url,
            {'payer_id': str(payer.id), 'amount': '5.00', 'description': 'Taxi'},
            format='json',
        )

        assert first.status_code == status.HTTP_201_CREATED
        assert second.status_code == status.HTTP_201_CREATED
        assert PaymentRequest.objects.filter(payer=payer, payee=payee, bill__isnull=True).count() == 2


# =============================================================================
# Detail / Update / Cancel
# =============================================================================

@pytest.mark.django_db
class TestPaymentRequestDetail:
    """Tests for /api/payments/<id>/"""

    def test_get_as_participant(self, payer_client, payment_request):
        response = payer_client.get(detail_url(payment_request))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['request']['amount'] == '25.00'

    def test_get_as_outsider(self, outsider_client, payment_request):
        response = outsider_client.get(detail_url(payment_request))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_patch_status_to_completed_stamps_time(self, payee_client, payment_request):
        response = payee_client.patch(detail_url(payment_request), {'status': 'completed'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        payment_request.refresh_from_db()
        assert payment_request.status == PaymentStatus.COMPLETED
        assert payment_request.completed_at is not None

    def test_patch_does_not_enforce_order(self, payer_client, payment_request):
        """Any allowed status can be set directly."""
        response = payer_client.patch(detail_url(payment_request), {'status': 'disputed'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        payment_request.refresh_from_db()
        assert payment_request.status == PaymentStatus.DISPUTED

    def test_patch_invalid_status(self, payee_client, payment_request):
        response = payee_client.patch(detail_url(payment_request), {'status': 'paid'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        payment_request.refresh_from_db()
        assert payment_request.status == PaymentStatus.SENT

    def test_patch_notes_and_method(self, payer_client, payment_request):
        response = payer_client.patch(
            detail_url(payment_request),
            {'notes': 'Paying Friday', 'payment_method': 'bank_transfer'},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        payment_request.refresh_from_db()
        assert payment_request.notes == 'Paying Friday'
        assert payment_request.payment_method == 'bank_transfer'

    def test_patch_nothing(self, payee_client, payment_request):
        response = payee_client.patch(detail_url(payment_request), {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_patch_as_outsider(self, outsider_client, payment_request):
        response = outsider_client.patch(detail_url(payment_request), {'status': 'completed'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_delete_cancels(self, payer_client, payment_request):
        response = payer_client.delete(detail_url(payment_request))

        assert response.status_code == status.HTTP_200_OK
        payment_request.refresh_from_db()
        assert payment_request.status == PaymentStatus.CANCELLED

    def test_delete_completed_refused(self, payee_client, payment_request):
        payment_request.status = PaymentStatus.COMPLETED
        payment_request.save()

        response = payee_client.delete(detail_url(payment_request))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        payment_request.refresh_from_db()
        assert payment_request.status == PaymentStatus.COMPLETED

    def test_delete_as_outsider(self, outsider_client, payment_request):
        response = outsider_client.delete(detail_url(payment_request))

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Actions
# =============================================================================

@pytest.mark.django_db
class TestPaymentActions:
    """Tests for POST /api/payments/<id>/<action>/"""

    @pytest.mark.parametrize('action,expected', [
        ('accept', PaymentStatus.ACCEPTED),
        ('reject', PaymentStatus.REJECTED),
        ('mark-paid', PaymentStatus.PAID_PENDING_CONFIRMATION),
    ])
    def test_payer_actions(self, payer_client, payment_request, action, expected):
        response = payer_client.post(action_url(action, payment_request))

        assert response.status_code == status.HTTP_200_OK
        payment_request.refresh_from_db()
        assert payment_request.status == expected

    @pytest.mark.parametrize('action', ['accept', 'reject', 'mark-paid'])
    def test_payer_actions_refused_for_payee(self, payee_client, payment_request, action):
        response = payee_client.post(action_url(action, payment_request))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        payment_request.refresh_from_db()
        assert payment_request.status == PaymentStatus.SENT

    def test_confirm(self, payee_client, payment_request):
        response = payee_client.post(action_url('confirm', payment_request))

        assert response.status_code == status.HTTP_200_OK
        payment_request.refresh_from_db()
        assert payment_request.status == PaymentStatus.COMPLETED
        assert payment_request.completed_at is not None

    def test_dispute(self, payee_client, payment_request):
        response = payee_client.post(action_url('dispute', payment_request))

        assert response.status_code == status.HTTP_200_OK
        payment_request.refresh_from_db()
        assert payment_request.status == PaymentStatus.DISPUTED

    @pytest.mark.parametrize('action', ['confirm', 'dispute', 'remind'])
    def test_payee_actions_refused_for_payer(self, payer_client, payment_request, action):
        response = payer_client.post(action_url(action, payment_request))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_remind_counts_reminders(self, payee_client, payment_request):
        payee_client.post(action_url('remind', payment_request))
        response = payee_client.post(action_url('remind', payment_request))

        assert response.status_code == status.HTTP_200_OK
        payment_request.refresh_from_db()
        assert payment_request.reminder_count == 2
        assert payment_request.last_reminder_sent is not None
        assert payment_request.status == PaymentStatus.SENT

    def test_outsider_cannot_act(self, outsider_client, payment_request):
        response = outsider_client.post(action_url('accept', payment_request))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_missing_request(self, payer_client):
        url = reverse('payments:request-accept', kwargs={'pk': '00000000-0000-0000-0000-000000000000'})
        response = payer_client.post(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_full_flow_labels(self, payer_client, payee_client, payment_request):
        """Labels follow the status as the request moves along."""
        payer_client.post(action_url('accept', payment_request))
        payer_client.post(action_url('mark-paid', payment_request))

        response = payee_client.get(detail_url(payment_request))
        assert response.data['request']['contextual_status'] == 'paid_pending_confirmation'

        payee_client.post(action_url('confirm', payment_request))
        response = payer_client.get(detail_url(payment_request))
        assert response.data['request']['status'] == 'completed'
        assert response.data['request']['contextual_status'] == 'completed'
