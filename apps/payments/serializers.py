from decimal import Decimal

from rest_framework import serializers
from .models import PaymentRequest, PaymentStatus
from .status_display import get_contextual_status, get_status_description


class PaymentRequestSerializer(serializers.ModelSerializer):
    """
    Payment request as seen by the requesting user.

    ``contextual_status`` and ``status_description`` depend on whether the
    viewer (``request.user`` from the serializer context) is payer or payee.
    """

    bill_id = serializers.UUIDField(read_only=True, allow_null=True)
    bill_title = serializers.CharField(source='bill.title', read_only=True, default=None)
    bill_total = serializers.DecimalField(
        source='bill.total_amount',
        max_digits=10,
        decimal_places=2,
        read_only=True,
        default=None,
    )
    payer_id = serializers.UUIDField(read_only=True)
    payer_name = serializers.CharField(source='payer.get_display_name', read_only=True)
    payer_email = serializers.EmailField(source='payer.email', read_only=True)
    payee_id = serializers.UUIDField(read_only=True)
    payee_name = serializers.CharField(source='payee.get_display_name', read_only=True)
    payee_email = serializers.EmailField(source='payee.email', read_only=True)
    contextual_status = serializers.SerializerMethodField()
    status_description = serializers.SerializerMethodField()

    class Meta:
        model = PaymentRequest
        fields = [
            'id',
            'bill_id',
            'bill_title',
            'bill_total',
            'payer_id',
            'payer_name',
            'payer_email',
            'payee_id',
            'payee_name',
            'payee_email',
            'amount',
            'currency',
            'description',
            'status',
            'contextual_status',
            'status_description',
            'payment_method',
            'due_date',
            'notes',
            'reminder_count',
            'last_reminder_sent',
            'created_at',
            'updated_at',
            'completed_at',
        ]
        read_only_fields = fields

    def _viewer_id(self):
        request = self.context.get('request')
        return request.user.id if request is not None else None

    def get_contextual_status(self, obj):
        viewer_id = self._viewer_id()
        return get_contextual_status(
            obj.status,
            is_payer=obj.payer_id == viewer_id,
            is_payee=obj.payee_id == viewer_id,
        )

    def get_status_description(self, obj):
        return get_status_description(obj.status, is_payee=obj.payee_id == self._viewer_id())


class PaymentRequestCreateSerializer(serializers.Serializer):
    """Input for creating a payment request. The creator is the payee."""

    payer_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    bill_id = serializers.UUIDField(required=False, allow_null=True)
    currency = serializers.CharField(max_length=3, required=False)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    due_date = serializers.DateTimeField(required=False, allow_null=True)
    payment_method = serializers.CharField(max_length=50, required=False, default='manual')
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class PaymentRequestUpdateSerializer(serializers.Serializer):
    # Status is checked by the service so the error body stays uniform
    status = serializers.CharField(max_length=30, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    payment_method = serializers.CharField(max_length=50, required=False)


class PaymentRequestQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PaymentStatus.choices, required=False)
    type = serializers.ChoiceField(choices=['incoming', 'outgoing'], required=False)
