from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, username_validator


class UserSerializer(serializers.ModelSerializer):
    """Basic user serializer for profile display."""

    avatar_url = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'username',
            'name',
            'avatar',
            'avatar_url',
            'created_at',
            'last_login',
        ]
        read_only_fields = ['id', 'email', 'username', 'created_at', 'last_login']

    def get_avatar_url(self, obj):
        return obj.get_avatar_url()


class UserRegistrationSerializer(serializers.Serializer):
    """Serializer for user registration."""

    email = serializers.EmailField(required=True)
    username = serializers.CharField(
        required=True,
        min_length=3,
        max_length=20,
        validators=[username_validator],
    )
    name = serializers.CharField(required=True, min_length=2, max_length=100)
    password = serializers.CharField(
        write_only=True,
        required=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )

    def validate_email(self, value):
        return User.objects.normalize_email(value)


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class UserPublicSerializer(serializers.ModelSerializer):
    """Public user info (for friends, groups, payment requests)."""

    avatar = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'name', 'username', 'avatar']
        read_only_fields = fields

    def get_avatar(self, obj):
        return obj.get_avatar_url()
