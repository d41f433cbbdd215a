from django.db import models
from django.utils import timezone
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class BillStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    SETTLED = 'settled', 'Settled'
    ARCHIVED = 'archived', 'Archived'


class BillSource(models.TextChoices):
    MANUAL = 'manual', 'Manual'
    RECEIPT = 'receipt', 'Receipt'


class ParticipantRole(models.TextChoices):
    CREATOR = 'creator', 'Creator'
    PARTICIPANT = 'participant', 'Participant'


class Bill(models.Model):
    """An itemised bill split between participants."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    merchant = models.CharField(max_length=200, blank=True)

    total_amount = models.DecimalField(max_digits=10, decimal_places=2)
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    tax_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    currency = models.CharField(max_length=3, default='USD')

    created_by = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='bills_created')
    source = models.CharField(max_length=20, choices=BillSource.choices, default=BillSource.MANUAL)
    status = models.CharField(max_length=20, choices=BillStatus.choices, default=BillStatus.ACTIVE)
    bill_date = models.DateTimeField(default=timezone.now)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'bills'
        indexes = [
            models.Index(fields=['created_by', 'created_at']),
            models.Index(fields=['status']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.title} - {self.total_amount} {self.currency}"


class BillItem(models.Model):
    """Line item on a bill."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    bill = models.ForeignKey(Bill, on_delete=models.CASCADE, related_name='items')
    name = models.CharField(max_length=200)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    quantity = models.DecimalField(max_digits=10, decimal_places=3, default=Decimal('1'))
    total_price = models.DecimalField(max_digits=10, decimal_places=2)
    tax_percentage = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    tax_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    line_number = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'bill_items'
        ordering = ['line_number']

    def __str__(self):
        return f"{self.name} ({self.total_price})"


class BillItemSplit(models.Model):
    """One user's share of a bill item."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    bill_item = models.ForeignKey(BillItem, on_delete=models.CASCADE, related_name='splits')
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='bill_item_splits')
    share_amount = models.DecimalField(
        max_digits=10,
        decimal_places=3,
        validators=[MinValueValidator(Decimal('0'))]
    )
    subtotal_amount = models.DecimalField(max_digits=10, decimal_places=2)
    tax_amount = models.DecimalField(max_digits=10, decimal_places=2)
    total_amount = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        db_table = 'bill_item_splits'
        unique_together = [['bill_item', 'user']]

    def __str__(self):
        return f"{self.user} owes {self.total_amount} for {self.bill_item.name}"


class BillParticipant(models.Model):
    """User taking part in a bill with their total share."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    bill = models.ForeignKey(Bill, on_delete=models.CASCADE, related_name='participants')
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='bill_participations')
    role = models.CharField(max_length=20, choices=ParticipantRole.choices, default=ParticipantRole.PARTICIPANT)
    total_share = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    amount_owed = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    amount_paid = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'bill_participants'
        unique_together = [['bill', 'user']]
        indexes = [
            models.Index(fields=['user', 'bill']),
        ]
        ordering = ['joined_at']

    def __str__(self):
        return f"{self.user} in {self.bill.title} ({self.role})"

    @property
    def outstanding(self):
        """Amount still owed on this bill."""
        return self.amount_owed - self.amount_paid
