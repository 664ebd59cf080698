from django.test import SimpleTestCase

from bundles.exceptions import SelectionError, SelectionValidationError
from bundles.serializers import (
    BundleSelectionSerializer, PricingBreakdownSerializer, SlotSelectionSerializer, selection_errors_payload,
)
from bundles.services.descriptors import SlotSelection
from bundles.services.pricing import BundlePricingCalculator, PricingConfig
from bundles.tests.helpers import two_item_fixed_bundle


class SelectionSerializerTests(SimpleTestCase):
    def test_single_product_form_is_normalized(self):
        serializer = SlotSelectionSerializer(data={'slot_id': 4, 'product_id': 9})

        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(serializer.to_selection(), SlotSelection(slot_id=4, product_ids=(9,)))

    def test_slot_without_products(self):
        serializer = SlotSelectionSerializer(data={'slot_id': 4})

        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(serializer.to_selection().product_ids, ())

    def test_rejects_non_positive_ids(self):
        serializer = SlotSelectionSerializer(data={'slot_id': 0, 'product_ids': [1, -2]})

        self.assertFalse(serializer.is_valid())
        self.assertIn('slot_id', serializer.errors)
        self.assertIn('product_ids', serializer.errors)

    def test_bundle_request(self):
        serializer = BundleSelectionSerializer(data={
            'bundle': 'starter-kit',
            'selections': [{'slot_id': 1, 'product_ids': [5, 6]}, {'slot_id': 2, 'product_id': 7}],
        })

        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(serializer.validated_data['bundle'], 'starter-kit')
        self.assertEqual(serializer.get_selections(), [
            SlotSelection(slot_id=1, product_ids=(5, 6)),
            SlotSelection(slot_id=2, product_ids=(7,)),
        ])

    def test_bundle_request_without_selections(self):
        serializer = BundleSelectionSerializer(data={'bundle': '12'})

        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(serializer.get_selections(), [])


class OutputSerializerTests(SimpleTestCase):
    def test_breakdown_rendered_with_string_decimals(self):
        breakdown = BundlePricingCalculator(config=PricingConfig()).compute(two_item_fixed_bundle())

        data = PricingBreakdownSerializer(breakdown).data

        self.assertEqual(data['currency'], 'PKR')
        self.assertEqual(data['original_price'], '10000.00')
        self.assertEqual(data['discounted_price'], '9000.00')
        self.assertEqual(data['savings'], '1000.00')
        self.assertEqual(data['savings_percentage'], '10.00')
        self.assertEqual(data['availability'], 'available')
        self.assertEqual([line['line_total'] for line in data['items']], ['5000.00', '5000.00'])

    def test_hidden_savings_render_as_null(self):
        breakdown = BundlePricingCalculator(config=PricingConfig()).compute(
            two_item_fixed_bundle(show_savings=False)
        )

        data = PricingBreakdownSerializer(breakdown).data

        self.assertIsNone(data['savings'])
        self.assertIsNone(data['savings_percentage'])

    def test_selection_errors_payload(self):
        error = SelectionValidationError([
            SelectionError(
                code=SelectionError.MISSING_REQUIRED_SLOT, slot_id=3,
                message="Selection required for slot: Main", slot_name='Main',
            ),
        ])

        payload = selection_errors_payload(error)

        self.assertEqual(payload['error'], 'Invalid selections')
        self.assertEqual(payload['errors'][0]['code'], 'missing_required_slot')
        self.assertEqual(payload['errors'][0]['slot_id'], 3)
        self.assertIsNone(payload['errors'][0]['product_id'])
