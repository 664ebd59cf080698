"""Builders for in-memory descriptors used by the engine tests."""
from decimal import Decimal

from bundles.services.descriptors import (
    Availability, ConfigurableBundleDescriptor, FixedBundleDescriptor,
    ProductSnapshot, ResolvedCandidate, ResolvedItem, ResolvedSlot,
)


def snapshot(product_id, price, in_stock=True, available=True, name=None):
    return ProductSnapshot(
        product_id=product_id,
        name=name or f"Product {product_id}",
        price=Decimal(price),
        is_in_stock=in_stock,
        is_available=available,
    )


def item(product, quantity=1, price_override=None, product_id=None):
    return ResolvedItem(
        product_id=product_id if product_id is not None else product.product_id,
        quantity=quantity,
        price_override=Decimal(price_override) if price_override is not None else None,
        product=product,
    )


def candidate(product, price_override=None):
    return ResolvedCandidate(
        product_id=product.product_id,
        price_override=Decimal(price_override) if price_override is not None else None,
        product=product,
    )


def slot(slot_id, candidates, required=True, min_selections=1, max_selections=1, name=None):
    return ResolvedSlot(
        slot_id=slot_id,
        name=name or f"Slot {slot_id}",
        is_required=required,
        min_selections=min_selections,
        max_selections=max_selections,
        candidates=tuple(candidates),
    )


def fixed_descriptor(items, discount_type='percentage', discount_value='0', **overrides):
    attrs = dict(
        bundle_id=1,
        slug='fixed-bundle',
        name='Fixed bundle',
        discount_type=discount_type,
        discount_value=Decimal(discount_value),
        is_active=True,
        availability=Availability.AVAILABLE,
    )
    attrs.update(overrides)
    return FixedBundleDescriptor(items=tuple(items), **attrs)


def configurable_descriptor(slots, discount_type='percentage', discount_value='0', **overrides):
    attrs = dict(
        bundle_id=2,
        slug='configurable-bundle',
        name='Configurable bundle',
        discount_type=discount_type,
        discount_value=Decimal(discount_value),
        is_active=True,
        availability=Availability.AVAILABLE,
    )
    attrs.update(overrides)
    return ConfigurableBundleDescriptor(slots=tuple(slots), **attrs)


def two_item_fixed_bundle(discount_type='percentage', discount_value='10', **overrides):
    """Product A 5000 x1, Product B 3000 x2 overridden to 2500."""
    product_a = snapshot(1, '5000', name='Product A')
    product_b = snapshot(2, '3000', name='Product B')
    return fixed_descriptor(
        [item(product_a, 1), item(product_b, 2, price_override='2500')],
        discount_type=discount_type,
        discount_value=discount_value,
        **overrides
    )


def starter_kit_bundle(discount_type='percentage', discount_value='0', p2_in_stock=True):
    """
    Slot 10 required (exactly one of P1=1000, P2=1500);
    slot 20 optional (up to two of P3=400, P4=600).
    """
    main = slot(10, [
        candidate(snapshot(101, '1000')),
        candidate(snapshot(102, '1500', in_stock=p2_in_stock)),
    ], name='Main')
    extras = slot(20, [
        candidate(snapshot(103, '400')),
        candidate(snapshot(104, '600')),
    ], required=False, min_selections=0, max_selections=2, name='Extras')
    return configurable_descriptor([main, extras], discount_type=discount_type, discount_value=discount_value)
