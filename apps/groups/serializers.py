from decimal import Decimal

from rest_framework import serializers
from .models import Group, GroupMember, GroupRole, Invitation, Expense, ExpenseSplit, SplitType
from apps.accounts.serializers import UserPublicSerializer


class MemberUserSerializer(UserPublicSerializer):
    """Public user info plus the email members are added and invited by."""

    class Meta(UserPublicSerializer.Meta):
        fields = UserPublicSerializer.Meta.fields + ['email']
        read_only_fields = fields


class GroupMemberSerializer(serializers.ModelSerializer):
    """Detailed member information."""

    user = MemberUserSerializer(read_only=True)

    class Meta:
        model = GroupMember
        fields = ['id', 'user', 'role', 'joined_at']
        read_only_fields = fields


class GroupListSerializer(serializers.ModelSerializer):
    """
    Lightweight serializer for list views.

    Expects ``member_count`` and ``user_role`` annotations.
    """

    created_by = UserPublicSerializer(read_only=True)
    member_count = serializers.IntegerField(read_only=True)
    user_role = serializers.CharField(read_only=True)

    class Meta:
        model = Group
        fields = [
            'id',
            'name',
            'description',
            'avatar',
            'created_by',
            'member_count',
            'user_role',
            'created_at',
        ]
        read_only_fields = fields


class GroupSerializer(serializers.ModelSerializer):
    """Main serializer for groups, with members."""

    created_by = UserPublicSerializer(read_only=True)
    members = GroupMemberSerializer(source='memberships', many=True, read_only=True)
    user_role = serializers.SerializerMethodField()

    class Meta:
        model = Group
        fields = [
            'id',
            'name',
            'description',
            'avatar',
            'created_by',
            'members',
            'user_role',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_user_role(self, obj):
        """Get current user's role in the group."""
        request = self.context.get('request')
        if request and request.user.is_authenticated:
            for membership in obj.memberships.all():
                if membership.user_id == request.user.id:
                    return membership.role
        return None


class GroupCreateSerializer(serializers.Serializer):
    """Serializer for creating groups."""

    name = serializers.CharField(max_length=100)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')
    avatar = serializers.URLField(max_length=500, required=False, allow_blank=True, default='')


class GroupUpdateSerializer(serializers.Serializer):
    """Partial update of group fields. A supplied name must not be blank."""

    name = serializers.CharField(max_length=100, required=False)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True)
    avatar = serializers.URLField(max_length=500, required=False, allow_blank=True)


class GroupSettingsSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')


class AddMemberSerializer(serializers.Serializer):
    email = serializers.EmailField()
    role = serializers.ChoiceField(choices=GroupRole.choices, default=GroupRole.MEMBER)


class UpdateMemberRoleSerializer(serializers.Serializer):
    """Serializer for updating member role."""

    role = serializers.ChoiceField(choices=GroupRole.choices, required=True)


# =============================================================================
# Invitations
# =============================================================================

class InvitationCreateSerializer(serializers.Serializer):
    email = serializers.EmailField()


class InvitationSerializer(serializers.ModelSerializer):
    invited_by = UserPublicSerializer(read_only=True)

    class Meta:
        model = Invitation
        fields = ['id', 'email', 'invited_by', 'expires_at', 'created_at']
        read_only_fields = fields


class InvitationDetailsSerializer(serializers.ModelSerializer):
    """What an invitee sees before joining."""

    group_id = serializers.UUIDField(source='group.id', read_only=True)
    group_name = serializers.CharField(source='group.name', read_only=True)
    group_description = serializers.CharField(source='group.description', read_only=True)
    inviter_name = serializers.CharField(source='invited_by.get_display_name', read_only=True)

    class Meta:
        model = Invitation
        fields = ['group_id', 'group_name', 'group_description', 'inviter_name', 'email', 'expires_at']
        read_only_fields = fields


class TokenSerializer(serializers.Serializer):
    token = serializers.CharField(max_length=64)


# =============================================================================
# Expenses
# =============================================================================

class ExpenseSplitInputSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'))


class ExpenseInputSerializer(serializers.Serializer):
    """
    Expense fields as sent by clients.

    Business rules (positive amount, splits present and balanced) are
    checked by the expense service.
    """

    title = serializers.CharField(max_length=200, allow_blank=True, trim_whitespace=True)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    currency = serializers.CharField(max_length=3, required=False)
    category = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    split_type = serializers.ChoiceField(choices=SplitType.choices, required=False)
    date = serializers.DateTimeField(required=False)
    splits = ExpenseSplitInputSerializer(many=True, required=False)


class ExpenseSplitSerializer(serializers.ModelSerializer):
    user = UserPublicSerializer(read_only=True)

    class Meta:
        model = ExpenseSplit
        fields = ['id', 'user', 'amount', 'paid']
        read_only_fields = fields


class ExpenseSerializer(serializers.ModelSerializer):
    paid_by = UserPublicSerializer(read_only=True)
    splits = ExpenseSplitSerializer(many=True, read_only=True)

    class Meta:
        model = Expense
        fields = [
            'id',
            'group',
            'title',
            'description',
            'amount',
            'currency',
            'category',
            'split_type',
            'date',
            'paid_by',
            'splits',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields
