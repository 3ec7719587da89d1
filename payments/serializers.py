import json
from rest_framework import serializers

AUTHORIZATION_FIELDS = (
    "authorization_code",
    "card_type",
    "last4",
    "bank",
    "channel",
)


class AuthorizationSerializer(serializers.Serializer):
    authorization_code = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    card_type = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    last4 = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    bank = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    channel = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        # absent or empty details are dropped, never stored as nulls
        return {k: v for k, v in value.items() if v not in (None, "")}


class MetadataField(serializers.Field):
    """Paystack sends metadata as an object, a JSON string, or ""."""

    def to_internal_value(self, data):
        if data in (None, ""):
            return {}
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except ValueError:
                raise serializers.ValidationError("metadata is not valid JSON")
        if not isinstance(data, dict):
            raise serializers.ValidationError("metadata must be an object")
        return data

    def to_representation(self, value):
        return value


class ProviderTransactionSerializer(serializers.Serializer):
    """A transaction object as returned by Paystack's verify endpoint."""

    id = serializers.CharField()
    status = serializers.CharField()
    reference = serializers.CharField(required=False)
    amount = serializers.IntegerField(required=False, min_value=0)
    currency = serializers.CharField(required=False, max_length=3)
    channel = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    receipt_url = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    paid_at = serializers.DateTimeField(required=False, allow_null=True)
    authorization = AuthorizationSerializer(required=False, allow_null=True)
    metadata = MetadataField(required=False)

    def validate_status(self, value):
        if value != "success":
            raise serializers.ValidationError("transaction is not successful")
        return value


class WebhookEventSerializer(serializers.Serializer):
    event = serializers.CharField()
    data = serializers.DictField()

    @property
    def reference(self):
        data = self.validated_data.get("data") or {}
        return str(data.get("reference") or "")
