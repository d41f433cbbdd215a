from django.db import models
from django.conf import settings
import uuid


class PaymentStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    SENT = 'sent', 'Sent'
    ACCEPTED = 'accepted', 'Accepted'
    PAID_PENDING_CONFIRMATION = 'paid_pending_confirmation', 'Paid, pending confirmation'
    COMPLETED = 'completed', 'Completed'
    REJECTED = 'rejected', 'Rejected'
    CANCELLED = 'cancelled', 'Cancelled'
    DISPUTED = 'disputed', 'Disputed'


TERMINAL_STATUSES = frozenset({
    PaymentStatus.COMPLETED,
    PaymentStatus.REJECTED,
    PaymentStatus.CANCELLED,
    PaymentStatus.DISPUTED,
})


class PaymentRequest(models.Model):
    """
    A request from the payee for the payer to settle an amount.

    The status column is restricted to ``PaymentStatus`` by a database
    CHECK constraint, so writes that bypass the ORM choices still fail.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    bill = models.ForeignKey(
        'bills.Bill',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='payment_requests',
    )
    payer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='payment_requests_to_pay',
    )
    payee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='payment_requests_to_receive',
    )

    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default='USD')
    description = models.TextField(blank=True)
    status = models.CharField(
        max_length=30,
        choices=PaymentStatus.choices,
        default=PaymentStatus.SENT,
        db_index=True,
    )
    payment_method = models.CharField(max_length=50, default='manual')
    due_date = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    # Reminders
    reminder_count = models.PositiveIntegerField(default=0)
    last_reminder_sent = models.DateTimeField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'payment_requests'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['payer', 'status']),
            models.Index(fields=['payee', 'status']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(status__in=PaymentStatus.values),
                name='payment_requests_status_check',
            ),
        ]

    def __str__(self):
        return f"{self.payer} owes {self.payee} {self.amount} {self.currency} ({self.status})"

    @property
    def is_terminal(self):
        return self.status in TERMINAL_STATUSES

    def is_participant(self, user):
        return user.id in (self.payer_id, self.payee_id)
