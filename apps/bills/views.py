from django.db.models import Prefetch, Q
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from .exceptions import BillServiceError, UnknownParticipantError
from .models import Bill, BillItem, BillParticipant
from .serializers import (
    BillSerializer,
    BillListSerializer,
    SaveAndRequestInputSerializer,
)
from .services import BillSplitService


class BillPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class BillViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Bills the current user created or takes part in.

    list: Get the user's bills
    retrieve: Get a bill with items, splits and participants
    save_and_request: Save an itemised bill and raise payment requests
    """

    serializer_class = BillSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = BillPagination

    def get_queryset(self):
        user = self.request.user
        return (
            Bill.objects
            .filter(Q(created_by=user) | Q(participants__user=user))
            .select_related('created_by')
            .prefetch_related(
                Prefetch('items', queryset=BillItem.objects.prefetch_related('splits__user')),
                Prefetch('participants', queryset=BillParticipant.objects.select_related('user')),
            )
            .distinct()
        )

    def get_serializer_class(self):
        if self.action == 'list':
            return BillListSerializer
        return BillSerializer

    @extend_schema(request=SaveAndRequestInputSerializer, responses={201: BillSerializer})
    @action(detail=False, methods=['post'], url_path='save-and-request')
    def save_and_request(self, request):
        """Save a bill and create payment requests for every participant who owes."""
        serializer = SaveAndRequestInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            bill, payment_requests = BillSplitService.save_and_request(
                created_by=request.user,
                bill_data=serializer.validated_data['bill_data'],
                participants=serializer.validated_data['participants'],
            )
        except UnknownParticipantError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except BillServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            'success': True,
            'bill': {'id': bill.id},
            'payment_requests': [
                {'id': pr.id, 'payer_id': pr.payer_id, 'amount': pr.amount}
                for pr in payment_requests
            ],
        }, status=status.HTTP_201_CREATED)
