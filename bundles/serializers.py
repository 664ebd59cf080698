from rest_framework import serializers

from bundles.services.descriptors import SlotSelection


class SlotSelectionSerializer(serializers.Serializer):
    """One slot's choices: either product_ids or the single product_id form."""
    slot_id = serializers.IntegerField(min_value=1)
    product_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    product_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1), required=False, allow_empty=True
    )

    def validate(self, data):
        if data.get('product_ids') is None:
            single = data.get('product_id')
            data['product_ids'] = [single] if single is not None else []
        data.pop('product_id', None)
        return data

    def to_selection(self):
        return SlotSelection(
            slot_id=self.validated_data['slot_id'],
            product_ids=tuple(self.validated_data['product_ids']),
        )


class BundleSelectionSerializer(serializers.Serializer):
    """Serializer for pricing / add-to-cart requests."""
    bundle = serializers.CharField(help_text="Bundle slug or numeric id")
    selections = SlotSelectionSerializer(many=True, required=False, default=list)

    def get_selections(self):
        return [
            SlotSelection(slot_id=item['slot_id'], product_ids=tuple(item['product_ids']))
            for item in self.validated_data.get('selections', [])
        ]


class PricedLineSerializer(serializers.Serializer):
    slot_id = serializers.IntegerField(allow_null=True)
    slot_name = serializers.CharField(allow_blank=True)
    product_id = serializers.IntegerField()
    product_name = serializers.CharField()
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2)


class PricingBreakdownSerializer(serializers.Serializer):
    """Renders PricingBreakdown.as_dict() for storefront responses."""
    bundle_id = serializers.IntegerField()
    bundle_type = serializers.CharField()
    currency = serializers.CharField()
    discount_type = serializers.CharField()
    discount_value = serializers.DecimalField(max_digits=12, decimal_places=2)
    original_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    discounted_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    savings = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    savings_percentage = serializers.DecimalField(max_digits=5, decimal_places=2, allow_null=True)
    availability = serializers.CharField()
    stock_remaining = serializers.IntegerField(allow_null=True)
    items = PricedLineSerializer(many=True)

    def to_representation(self, instance):
        if hasattr(instance, 'as_dict'):
            instance = instance.as_dict()
        return super().to_representation(instance)


class SelectionErrorSerializer(serializers.Serializer):
    code = serializers.CharField()
    slot_id = serializers.IntegerField()
    slot_name = serializers.CharField(allow_blank=True)
    product_id = serializers.IntegerField(allow_null=True)
    message = serializers.CharField()

    def to_representation(self, instance):
        if hasattr(instance, 'as_dict'):
            instance = instance.as_dict()
        return super().to_representation(instance)


def selection_errors_payload(error):
    """Per-slot feedback body for a SelectionValidationError."""
    return {
        'error': 'Invalid selections',
        'errors': SelectionErrorSerializer(error.errors, many=True).data,
    }
