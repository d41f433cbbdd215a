import pytest
from django.urls import reverse
from rest_framework import status

from apps.bills.models import Bill
from apps.payments.models import PaymentRequest


def save_payload(user, other_user):
    return {
        'bill_data': {
            'title': 'Groceries',
            'merchant': 'Corner Shop',
            'currency': 'EUR',
            'total': '20.00',
            'items': [
                {
                    'name': 'Bread',
                    'total_price': '4.00',
                    'shares': [{'user_id': str(user.id), 'amount': '1'}],
                },
                {
                    'name': 'Cheese',
                    'total_price': '16.00',
                    'shares': [
                        {'user_id': str(user.id), 'amount': '1'},
                        {'user_id': str(other_user.id), 'amount': '1'},
                    ],
                },
            ],
        },
        'participants': [
            {'user_id': str(user.id), 'total': '12.00'},
            {'user_id': str(other_user.id), 'total': '8.00'},
        ],
    }


@pytest.mark.django_db
class TestSaveAndRequest:
    """Tests for POST /api/bills/save-and-request/"""

    def test_save_bill(self, authenticated_client, user, other_user):
        url = reverse('bills:bill-save-and-request')
        response = authenticated_client.post(url, save_payload(user, other_user), format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['success'] is True
        bill = Bill.objects.get(id=response.data['bill']['id'])
        assert bill.currency == 'EUR'
        assert bill.items.count() == 2

        assert len(response.data['payment_requests']) == 1
        request = PaymentRequest.objects.get()
        assert request.payer == other_user
        assert request.currency == 'EUR'

    def test_repeated_share_holder(self, authenticated_client, user, other_user):
        payload = save_payload(user, other_user)
        payload['bill_data']['items'][1]['shares'] = [
            {'user_id': str(other_user.id), 'amount': '1'},
            {'user_id': str(other_user.id), 'amount': '1'},
        ]

        url = reverse('bills:bill-save-and-request')
        response = authenticated_client.post(url, payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        bill = Bill.objects.get(id=response.data['bill']['id'])
        cheese = bill.items.get(name='Cheese')
        assert cheese.splits.count() == 1
        assert cheese.splits.get().user == other_user

    def test_missing_participants(self, authenticated_client, user, other_user):
        payload = save_payload(user, other_user)
        payload['participants'] = []

        response = authenticated_client.post(reverse('bills:bill-save-and-request'), payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert Bill.objects.count() == 0

    def test_unknown_participant(self, authenticated_client, user, other_user):
        payload = save_payload(user, other_user)
        payload['participants'].append({'user_id': '00000000-0000-0000-0000-000000000000', 'total': '1.00'})

        response = authenticated_client.post(reverse('bills:bill-save-and-request'), payload, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert Bill.objects.count() == 0

    def test_unauthenticated(self, api_client, user, other_user):
        response = api_client.post(
            reverse('bills:bill-save-and-request'),
            save_payload(user, other_user),
            format='json',
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestBillRead:
    """Tests for GET /api/bills/ and /api/bills/<id>/"""

    @pytest.fixture
    def bill(self, authenticated_client, user, other_user):
        response = authenticated_client.post(
            reverse('bills:bill-save-and-request'),
            save_payload(user, other_user),
            format='json',
        )
        return Bill.objects.get(id=response.data['bill']['id'])

    def test_list_includes_created_bills(self, authenticated_client, bill):
        response = authenticated_client.get(reverse('bills:bill-list'))

        assert response.status_code == status.HTTP_200_OK
        assert [b['id'] for b in response.data['results']] == [str(bill.id)]

    def test_detail_has_items_and_participants(self, authenticated_client, bill):
        response = authenticated_client.get(reverse('bills:bill-detail', kwargs={'pk': bill.id}))

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['items']) == 2
        assert len(response.data['participants']) == 2
        cheese = next(i for i in response.data['items'] if i['name'] == 'Cheese')
        assert len(cheese['splits']) == 2

    def test_outsider_cannot_see_bill(self, third_client, bill):
        response = third_client.get(reverse('bills:bill-detail', kwargs={'pk': bill.id}))

        assert response.status_code == status.HTTP_404_NOT_FOUND

        response = third_client.get(reverse('bills:bill-list'))
        assert response.data['results'] == []
