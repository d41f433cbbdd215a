from django.contrib import admin
from apps.bills.models import Bill, BillItem, BillItemSplit, BillParticipant


class BillItemInline(admin.TabularInline):
    model = BillItem
    extra = 0
    fields = ['line_number', 'name', 'quantity', 'unit_price', 'total_price', 'tax_percentage', 'tax_amount']


class BillParticipantInline(admin.TabularInline):
    model = BillParticipant
    extra = 0
    fields = ['user', 'role', 'total_share', 'amount_owed', 'amount_paid', 'joined_at']
    readonly_fields = ['joined_at']
    raw_id_fields = ['user']


@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    """Admin interface for bills."""

    list_display = ['title', 'merchant', 'total_amount', 'currency', 'status', 'created_by', 'created_at']
    list_filter = ['status', 'source', 'currency', 'created_at']
    search_fields = ['title', 'merchant', 'created_by__email']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [BillItemInline, BillParticipantInline]
    date_hierarchy = 'created_at'
    raw_id_fields = ['created_by']


@admin.register(BillItemSplit)
class BillItemSplitAdmin(admin.ModelAdmin):
    list_display = ['bill_item', 'user', 'share_amount', 'total_amount']
    search_fields = ['bill_item__name', 'user__email']
    raw_id_fields = ['bill_item', 'user']
