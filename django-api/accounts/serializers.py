from rest_framework import serializers


class RegisterSerializer(serializers.Serializer):
    user_name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=8, trim_whitespace=False)


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)


class UserSerializer(serializers.Serializer):
    """Serializer for the authenticated user's own profile."""

    id = serializers.UUIDField()
    user_name = serializers.CharField()
    email = serializers.EmailField()
    created_at = serializers.DateTimeField()
