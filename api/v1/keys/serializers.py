"""
Serializers for the public key API endpoints.
"""

from rest_framework import serializers


class KeyRequestSerializer(serializers.Serializer):
    """Serializer for validate and status requests."""

    key = serializers.CharField(required=True, max_length=64)


class KeyDataSerializer(serializers.Serializer):
    """Serializer for the key snapshot returned on successful validation."""

    key = serializers.CharField()
    expires_at = serializers.DateTimeField()
    days_remaining = serializers.IntegerField()
    uses_remaining = serializers.IntegerField()
    total_uses = serializers.IntegerField()
    duration_days = serializers.IntegerField()
    customer_name = serializers.CharField(allow_blank=True)
    customer_email = serializers.CharField(allow_blank=True)


class ValidationResponseSerializer(serializers.Serializer):
    """Serializer for validate response."""

    valid = serializers.BooleanField()
    message = serializers.CharField()
    status = serializers.ChoiceField(
        choices=["active", "invalid", "expired", "revoked", "exhausted", "error"]
    )
    key_data = KeyDataSerializer(required=False)


class StatusResponseSerializer(serializers.Serializer):
    """Serializer for status response. Only ``found`` is sent for unknown keys."""

    found = serializers.BooleanField()
    status = serializers.CharField(required=False)
    expires_at = serializers.DateTimeField(required=False)
    days_remaining = serializers.IntegerField(required=False)
    uses_remaining = serializers.IntegerField(required=False)
    total_uses = serializers.IntegerField(required=False)


class PublicSettingsSerializer(serializers.Serializer):
    """Serializer for client-visible settings."""

    redirect_url = serializers.CharField()
    auto_expire = serializers.BooleanField()
    enable_logging = serializers.BooleanField()


class StatsSerializer(serializers.Serializer):
    """Serializer for store statistics."""

    total_keys = serializers.IntegerField()
    active_keys = serializers.IntegerField()
    expired_keys = serializers.IntegerField()
    total_revenue = serializers.FloatField()
    total_uses = serializers.IntegerField()
