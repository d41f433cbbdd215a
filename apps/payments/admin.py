from django.contrib import admin
from apps.payments.models import PaymentRequest


@admin.register(PaymentRequest)
class PaymentRequestAdmin(admin.ModelAdmin):
    """Admin interface for payment requests."""

    list_display = ['id', 'payer', 'payee', 'amount', 'currency', 'status', 'reminder_count', 'created_at']
    list_filter = ['status', 'currency', 'payment_method', 'created_at']
    search_fields = ['payer__email', 'payee__email', 'description']
    readonly_fields = ['created_at', 'updated_at', 'completed_at', 'last_reminder_sent']
    raw_id_fields = ['bill', 'payer', 'payee']
    date_hierarchy = 'created_at'
