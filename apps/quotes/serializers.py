from rest_framework import serializers
from .models import Quote, QuoteAnswer


# =============================================================================
# Input Serializers
# =============================================================================

class QuoteAnswersInputSerializer(serializers.Serializer):
    """
    Validate input for saving quote answers.

    Fields:
        answers (dict): option_key -> any JSON value
    """

    answers = serializers.DictField(child=serializers.JSONField(), allow_empty=False)

    def validate_answers(self, value):
        """Option keys must be non-blank and fit the column."""
        for key in value:
            if not key.strip():
                raise serializers.ValidationError('Option keys cannot be blank')
            if len(key) > 100:
                raise serializers.ValidationError(f'Option key too long: {key[:20]}...')
        return value


# =============================================================================
# Output Serializers
# =============================================================================

class QuoteAnswerSerializer(serializers.ModelSerializer):

    class Meta:
        model = QuoteAnswer
        fields = ['option_key', 'value']


class QuoteSerializer(serializers.ModelSerializer):
    """Full quote with answers."""

    service_name = serializers.CharField(source='service.name', read_only=True)
    tier_name = serializers.CharField(source='tier.name', read_only=True, default=None)
    answers = QuoteAnswerSerializer(many=True, read_only=True)

    class Meta:
        model = Quote
        fields = [
            'id',
            'quote_number',
            'service',
            'service_name',
            'tier',
            'tier_name',
            'status',
            'estimate_subtotal',
            'customer_notes',
            'answers',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class QuoteListSerializer(serializers.ModelSerializer):
    """Compact quote for list views."""

    service_name = serializers.CharField(source='service.name', read_only=True)

    class Meta:
        model = Quote
        fields = ['id', 'quote_number', 'service_name', 'status', 'estimate_subtotal', 'updated_at']
        read_only_fields = fields


class QuoteEstimateSerializer(serializers.Serializer):
    quote_id = serializers.UUIDField()
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
