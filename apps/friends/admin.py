from django.contrib import admin
from apps.friends.models import Friendship


@admin.register(Friendship)
class FriendshipAdmin(admin.ModelAdmin):
    """Admin interface for friendships."""

    list_display = ['user', 'friend', 'status', 'created_at', 'updated_at']
    list_filter = ['status', 'created_at']
    search_fields = ['user__email', 'user__username', 'friend__email', 'friend__username']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['-created_at']
    raw_id_fields = ['user', 'friend']
