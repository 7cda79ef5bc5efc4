"""
Serializers for the administrative API endpoints.
"""

from rest_framework import serializers


class CreateKeyRequestSerializer(serializers.Serializer):
    """Serializer for create key request."""

    duration_days = serializers.IntegerField(required=True, min_value=1)
    uses_limit = serializers.IntegerField(required=True, min_value=1)
    price = serializers.FloatField(required=False, allow_null=True, min_value=0)
    customer_name = serializers.CharField(required=False, allow_blank=True, default="", max_length=200)
    customer_email = serializers.EmailField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class KeyRecordSerializer(serializers.Serializer):
    """Serializer for KeyRecordDTO."""

    id = serializers.CharField()
    key = serializers.CharField()
    status = serializers.CharField()
    created_at = serializers.DateTimeField()
    expires_at = serializers.DateTimeField()
    duration_days = serializers.IntegerField()
    uses_remaining = serializers.IntegerField()
    total_uses = serializers.IntegerField()
    price = serializers.FloatField()
    customer_name = serializers.CharField(allow_blank=True)
    customer_email = serializers.CharField(allow_blank=True)
    notes = serializers.CharField(allow_blank=True)
    usage_count = serializers.IntegerField()


class ListKeysQuerySerializer(serializers.Serializer):
    """Serializer for list keys query parameters."""

    status = serializers.ChoiceField(choices=["active", "expired", "revoked"], required=False)
    search = serializers.CharField(required=False, allow_blank=True)


class ExpireKeysRequestSerializer(serializers.Serializer):
    """Serializer for the expiry sweep request."""

    dry_run = serializers.BooleanField(required=False, default=False)


class ExpireKeysResponseSerializer(serializers.Serializer):
    expired = serializers.IntegerField()
    dry_run = serializers.BooleanField()


class PruneLogsRequestSerializer(serializers.Serializer):
    """Serializer for the log pruning request."""

    older_than_days = serializers.IntegerField(required=False, default=30, min_value=0)


class PruneLogsResponseSerializer(serializers.Serializer):
    cleared = serializers.IntegerField()


class ActivityLogSerializer(serializers.Serializer):
    """Serializer for ActivityLogDTO."""

    timestamp = serializers.DateTimeField()
    message = serializers.CharField()
    type = serializers.CharField()


class UpdateSettingsRequestSerializer(serializers.Serializer):
    """Serializer for settings update. Omitted fields are left unchanged."""

    redirect_url = serializers.URLField(required=False)
    auto_expire = serializers.BooleanField(required=False)
    enable_logging = serializers.BooleanField(required=False)
    new_admin_password = serializers.CharField(required=False, min_length=1, trim_whitespace=False)
