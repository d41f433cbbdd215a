from rest_framework import serializers
from .models import Friendship


class FriendSerializer(serializers.Serializer):
    """Accepted friend with the number of active bills they take part in."""

    id = serializers.UUIDField(read_only=True)
    name = serializers.CharField(read_only=True)
    username = serializers.CharField(read_only=True)
    avatar = serializers.SerializerMethodField()
    bills = serializers.IntegerField(source='bills_count', read_only=True)

    def get_avatar(self, obj):
        return obj.get_avatar_url()


class FriendRequestSerializer(serializers.ModelSerializer):
    """Pending request, presented from the recipient's side."""

    friendship_id = serializers.UUIDField(source='id', read_only=True)
    id = serializers.UUIDField(source='user.id', read_only=True)
    name = serializers.CharField(source='user.name', read_only=True)
    username = serializers.CharField(source='user.username', read_only=True)
    avatar = serializers.SerializerMethodField()
    requested_at = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Friendship
        fields = ['friendship_id', 'id', 'name', 'username', 'avatar', 'requested_at']
        read_only_fields = fields

    def get_avatar(self, obj):
        return obj.user.get_avatar_url()


class UserSearchResultSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    name = serializers.CharField(read_only=True)
    username = serializers.CharField(read_only=True)
    avatar = serializers.SerializerMethodField()
    friendship_status = serializers.CharField(read_only=True, allow_null=True)

    def get_avatar(self, obj):
        return obj.get_avatar_url()


class AddFriendSerializer(serializers.Serializer):
    """Input for POST /api/friends/add/."""

    friend_id = serializers.UUIDField(required=True)


class RespondFriendRequestSerializer(serializers.Serializer):
    """Input for PUT /api/friends/requests/."""

    friendship_id = serializers.UUIDField(required=True)
    action = serializers.ChoiceField(choices=['accept', 'reject'], required=True)


class SearchQuerySerializer(serializers.Serializer):
    q = serializers.CharField(required=False, allow_blank=True, default='', trim_whitespace=True)


class FriendHistoryEntrySerializer(serializers.Serializer):
    id = serializers.UUIDField()
    label = serializers.CharField()
    date = serializers.DateField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    currency = serializers.CharField()


class FriendSummarySerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    status = serializers.ChoiceField(choices=['owed', 'owe'])
    currency = serializers.CharField()


class FriendDetailSerializer(serializers.Serializer):
    """Friend profile with balance summary and shared bill history."""

    id = serializers.UUIDField(source='friend.id')
    name = serializers.CharField(source='friend.name')
    username = serializers.CharField(source='friend.username')
    avatar = serializers.SerializerMethodField()
    summary = FriendSummarySerializer()
    history = FriendHistoryEntrySerializer(many=True)

    def get_avatar(self, obj):
        return obj['friend'].get_avatar_url()
