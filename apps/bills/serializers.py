from decimal import Decimal

from rest_framework import serializers
from .models import Bill, BillItem, BillItemSplit, BillParticipant
from apps.accounts.serializers import UserPublicSerializer


# =============================================================================
# Input Serializers
# =============================================================================

class ItemShareInputSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=3, min_value=Decimal('0'))


class BillItemInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, default=Decimal('0.00'))
    quantity = serializers.DecimalField(max_digits=10, decimal_places=3, required=False, default=Decimal('1'))
    total_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'))
    tax_percentage = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        required=False,
        default=Decimal('0.00'),
        min_value=Decimal('0'),
    )
    shares = ItemShareInputSerializer(many=True, required=False, default=list)


class BillDataInputSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    description = serializers.CharField(required=False, allow_blank=True, default='')
    merchant = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    currency = serializers.CharField(max_length=3, required=False)
    total = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'))
    subtotal = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, default=Decimal('0.00'))
    total_tax = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, default=Decimal('0.00'))
    bill_date = serializers.DateTimeField(required=False)
    items = BillItemInputSerializer(many=True, required=False, default=list)


class ParticipantInputSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    total = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'))


class SaveAndRequestInputSerializer(serializers.Serializer):
    """Input for POST /api/bills/save-and-request/."""

    bill_data = BillDataInputSerializer()
    participants = ParticipantInputSerializer(many=True, allow_empty=False)


# =============================================================================
# Output Serializers
# =============================================================================

class BillItemSplitSerializer(serializers.ModelSerializer):
    user = UserPublicSerializer(read_only=True)

    class Meta:
        model = BillItemSplit
        fields = ['id', 'user', 'share_amount', 'subtotal_amount', 'tax_amount', 'total_amount']
        read_only_fields = fields


class BillItemSerializer(serializers.ModelSerializer):
    splits = BillItemSplitSerializer(many=True, read_only=True)

    class Meta:
        model = BillItem
        fields = [
            'id',
            'name',
            'unit_price',
            'quantity',
            'total_price',
            'tax_percentage',
            'tax_amount',
            'line_number',
            'splits',
        ]
        read_only_fields = fields


class BillParticipantSerializer(serializers.ModelSerializer):
    user = UserPublicSerializer(read_only=True)

    class Meta:
        model = BillParticipant
        fields = ['id', 'user', 'role', 'total_share', 'amount_owed', 'amount_paid', 'joined_at']
        read_only_fields = fields


class BillListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list views."""

    created_by = UserPublicSerializer(read_only=True)

    class Meta:
        model = Bill
        fields = [
            'id',
            'title',
            'merchant',
            'total_amount',
            'currency',
            'status',
            'created_by',
            'bill_date',
            'created_at',
        ]
        read_only_fields = fields


class BillSerializer(serializers.ModelSerializer):
    """Full bill with items, splits and participants."""

    created_by = UserPublicSerializer(read_only=True)
    items = BillItemSerializer(many=True, read_only=True)
    participants = BillParticipantSerializer(many=True, read_only=True)

    class Meta:
        model = Bill
        fields = [
            'id',
            'title',
            'description',
            'merchant',
            'total_amount',
            'subtotal',
            'tax_amount',
            'currency',
            'source',
            'status',
            'created_by',
            'bill_date',
            'items',
            'participants',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields
