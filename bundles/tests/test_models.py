from datetime import timedelta
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone

from bundles.models import Bundle, BundleItem, BundleSlot, Cart, CartItem, Product


class BundleModelTests(TestCase):
    def setUp(self):
        self.product = Product.objects.create(name="Phone Case", price=Decimal('800.00'))

    def test_slug_generated_and_deduplicated(self):
        first = Bundle.objects.create(name="Travel Pack")
        second = Bundle.objects.create(name="Travel Pack")

        self.assertEqual(first.slug, 'travel-pack')
        self.assertEqual(second.slug, 'travel-pack-1')

    def test_bundle_type_cannot_change(self):
        bundle = Bundle.objects.create(name="Travel Pack", bundle_type=Bundle.BundleType.FIXED)
        bundle.bundle_type = Bundle.BundleType.CONFIGURABLE

        with self.assertRaises(ValidationError) as ctx:
            bundle.save()
        self.assertIn('bundle_type', ctx.exception.message_dict)

    def test_slug_locked_once_published(self):
        bundle = Bundle.objects.create(name="Travel Pack", is_active=True)
        self.assertTrue(bundle.was_published)
        bundle.slug = 'renamed-pack'

        with self.assertRaises(ValidationError) as ctx:
            bundle.save()
        self.assertIn('slug', ctx.exception.message_dict)

    def test_draft_slug_can_change(self):
        bundle = Bundle.objects.create(name="Travel Pack", is_active=False)
        bundle.slug = 'renamed-pack'
        bundle.save()

        bundle.refresh_from_db()
        self.assertEqual(bundle.slug, 'renamed-pack')
        self.assertFalse(bundle.was_published)

    def test_clean_rejects_out_of_range_values(self):
        cases = [
            (dict(discount_type=Bundle.DiscountType.PERCENTAGE, discount_value=Decimal('120')), 'discount_value'),
            (dict(discount_type=Bundle.DiscountType.FIXED_PRICE, discount_value=Decimal('-1')), 'discount_value'),
            (dict(starts_at=timezone.now(), ends_at=timezone.now() - timedelta(days=1)), 'ends_at'),
            (dict(stock_limit=-3), 'stock_limit'),
        ]
        for attrs, field_name in cases:
            with self.subTest(field=field_name, attrs=attrs):
                bundle = Bundle(name="Draft", **attrs)
                with self.assertRaises(ValidationError) as ctx:
                    bundle.clean()
                self.assertIn(field_name, ctx.exception.message_dict)

    def test_soft_delete_hides_bundle_from_default_manager(self):
        bundle = Bundle.objects.create(name="Travel Pack")

        bundle.soft_delete()

        self.assertFalse(Bundle.objects.filter(pk=bundle.pk).exists())
        self.assertTrue(Bundle.all_objects.filter(pk=bundle.pk).exists())

    def test_available_queryset(self):
        now = timezone.now()
        live = Bundle.objects.create(name="Live")
        Bundle.objects.create(name="Off", is_active=False)
        Bundle.objects.create(name="Later", starts_at=now + timedelta(days=2))
        Bundle.objects.create(name="Over", ends_at=now - timedelta(days=2))
        Bundle.objects.create(name="Gone", stock_limit=3, stock_sold=3)
        Bundle.objects.create(name="Deleted").soft_delete()

        self.assertEqual(list(Bundle.objects.available(now)), [live])

    def test_stock_remaining_never_negative(self):
        self.assertIsNone(Bundle(name="x").stock_remaining)
        self.assertEqual(Bundle(name="x", stock_limit=5, stock_sold=2).stock_remaining, 3)
        self.assertEqual(Bundle(name="x", stock_limit=5, stock_sold=8).stock_remaining, 0)

    def test_saving_out_of_range_discount_is_flagged(self):
        with self.assertLogs('bundles.signals', level='WARNING') as logs:
            Bundle.objects.create(
                name="Broken", discount_type=Bundle.DiscountType.PERCENTAGE, discount_value=Decimal('150'),
            )

        self.assertIn('invalid discount configuration', logs.output[0])
        self.assertEqual(logs.records[0].flag, 'invalid_configuration')


class CompositionModelTests(TestCase):
    def setUp(self):
        self.product = Product.objects.create(name="Charger", price=Decimal('1200.00'))
        self.fixed = Bundle.objects.create(name="Fixed", bundle_type=Bundle.BundleType.FIXED)
        self.configurable = Bundle.objects.create(name="Pick", bundle_type=Bundle.BundleType.CONFIGURABLE)

    def test_items_belong_to_fixed_bundles_only(self):
        BundleItem(bundle=self.fixed, product=self.product, quantity=1).clean()

        with self.assertRaises(ValidationError) as ctx:
            BundleItem(bundle=self.configurable, product=self.product, quantity=1).clean()
        self.assertIn('bundle', ctx.exception.message_dict)

    def test_item_quantity_and_override(self):
        with self.assertRaises(ValidationError) as ctx:
            BundleItem(bundle=self.fixed, product=self.product, quantity=0, price_override=Decimal('-5')).clean()
        self.assertIn('quantity', ctx.exception.message_dict)
        self.assertIn('price_override', ctx.exception.message_dict)

    def test_slots_belong_to_configurable_bundles_only(self):
        BundleSlot(bundle=self.configurable, name="Main").clean()

        with self.assertRaises(ValidationError):
            BundleSlot(bundle=self.fixed, name="Main").clean()

    def test_slot_bounds(self):
        with self.assertRaises(ValidationError) as ctx:
            BundleSlot(bundle=self.configurable, name="Main", min_selections=3, max_selections=2).clean()
        self.assertIn('max_selections', ctx.exception.message_dict)

        with self.assertRaises(ValidationError) as ctx:
            BundleSlot(bundle=self.configurable, name="Main", is_required=True, min_selections=0).clean()
        self.assertIn('min_selections', ctx.exception.message_dict)


class ProductAndCartModelTests(TestCase):
    def test_product_stock_rules(self):
        in_stock = Product(name="a", stock_status=Product.StockStatus.IN_STOCK)
        backorder = Product(name="b", stock_status=Product.StockStatus.ON_BACKORDER)
        allowed = Product(name="c", stock_status=Product.StockStatus.ON_BACKORDER, allow_backorders=True)
        out = Product(name="d", stock_status=Product.StockStatus.OUT_OF_STOCK, allow_backorders=True)

        self.assertTrue(in_stock.is_in_stock)
        self.assertFalse(backorder.is_in_stock)
        self.assertTrue(allowed.is_in_stock)
        self.assertFalse(out.is_in_stock)

    def test_product_availability(self):
        self.assertTrue(Product(name="a").is_available)
        self.assertFalse(Product(name="a", is_active=False).is_available)
        self.assertFalse(Product(name="a", deleted_at=timezone.now()).is_available)

    def test_cart_expiry_defaults_to_a_day(self):
        cart = Cart.objects.create(session_key='abc')

        self.assertFalse(cart.is_expired())
        self.assertAlmostEqual(
            (cart.expires_at - timezone.now()).total_seconds(), 24 * 3600, delta=60,
        )

    def test_cart_item_unit_price_falls_back_to_live_price(self):
        cart = Cart.objects.create(session_key='abc')
        product = Product.objects.create(name="Cable", price=Decimal('150.00'))

        stored = CartItem.objects.create(cart=cart, product=product, unit_price=Decimal('120.00'))
        live = CartItem.objects.create(cart=cart, product=product)

        self.assertEqual(stored.get_unit_price(), Decimal('120.00'))
        self.assertEqual(live.get_unit_price(), Decimal('150.00'))
