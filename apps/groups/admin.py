from django.contrib import admin
from apps.groups.models import Group, GroupMember, Invitation, Expense, ExpenseSplit


class GroupMemberInline(admin.TabularInline):
    """Inline admin for group members."""
    model = GroupMember
    extra = 0
    fields = ['user', 'role', 'joined_at']
    readonly_fields = ['joined_at']
    raw_id_fields = ['user']


class ExpenseSplitInline(admin.TabularInline):
    model = ExpenseSplit
    extra = 0
    fields = ['user', 'amount', 'paid']
    raw_id_fields = ['user']


@admin.register(Group)
class GroupAdmin(admin.ModelAdmin):
    """Admin interface for Groups."""

    list_display = ['name', 'created_by', 'member_count', 'created_at']
    list_filter = ['created_at']
    search_fields = ['name', 'description', 'created_by__email']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [GroupMemberInline]
    date_hierarchy = 'created_at'
    ordering = ['-created_at']
    raw_id_fields = ['created_by']

    fieldsets = (
        ('Basic Information', {
            'fields': ('name', 'description', 'avatar', 'created_by')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def member_count(self, obj):
        """Show number of members."""
        return obj.memberships.count()
    member_count.short_description = 'Members'


@admin.register(Invitation)
class InvitationAdmin(admin.ModelAdmin):
    list_display = ['email', 'group', 'invited_by', 'accepted', 'expires_at', 'created_at']
    list_filter = ['accepted', 'created_at']
    search_fields = ['email', 'group__name', 'invited_by__email']
    readonly_fields = ['token', 'created_at']
    raw_id_fields = ['group', 'invited_by']


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    """Admin interface for group expenses."""

    list_display = ['title', 'group', 'paid_by', 'amount', 'currency', 'date']
    list_filter = ['currency', 'split_type', 'date']
    search_fields = ['title', 'group__name', 'paid_by__email']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [ExpenseSplitInline]
    raw_id_fields = ['group', 'paid_by']

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('group', 'paid_by')
