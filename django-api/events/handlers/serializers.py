"""Serializers for transforming domain models to API responses.

Input serializers only parse formats (UUIDs, ISO-8601 timestamps); the
business rules on those values are enforced by the services.
"""

from rest_framework import serializers


class UserSummarySerializer(serializers.Serializer):
    """Serializer for the public fields of a user."""

    id = serializers.UUIDField(source="id.value")
    user_name = serializers.CharField()


class EventSerializer(serializers.Serializer):
    """Serializer for Event domain model."""

    id = serializers.UUIDField(source="id.value")
    title = serializers.CharField()
    start_time = serializers.DateTimeField()
    end_time = serializers.DateTimeField()
    status = serializers.CharField(source="status.value")
    owner = UserSummarySerializer()
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class SwapSerializer(serializers.Serializer):
    """Serializer for Swap domain model."""

    id = serializers.UUIDField(source="id.value")
    status = serializers.CharField(source="status.value")
    requester = UserSummarySerializer()
    responder = UserSummarySerializer()
    my_slot = EventSerializer()
    their_slot = EventSerializer()
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class EventInputSerializer(serializers.Serializer):
    """Request body for creating or updating an event; every field is optional here."""

    title = serializers.CharField(required=False, allow_blank=True, max_length=255)
    start_time = serializers.DateTimeField(required=False)
    end_time = serializers.DateTimeField(required=False)


class SwapRequestSerializer(serializers.Serializer):
    event_id = serializers.CharField(required=False, allow_blank=True)
    target_event_id = serializers.CharField(required=False, allow_blank=True)


class AcceptField(serializers.Field):
    """Boolean flag that also accepts the strings "true" and "false".

    Any other value is passed through unchanged so that the service can
    reject it with a domain error.
    """

    def to_internal_value(self, data):
        if isinstance(data, str) and data.lower() in ("true", "false"):
            return data.lower() == "true"
        return data

    def to_representation(self, value):
        return value


class SwapResponseSerializer(serializers.Serializer):
    accept = AcceptField(required=False, allow_null=True)
