"""Cart service for adding priced bundles to shopping carts."""
import logging
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Tuple

from django.db import transaction
from django.db.models import F

from bundles.exceptions import BundleNotFound, SelectionValidationError
from bundles.models import Bundle, Cart, CartItem
from bundles.services.engine import BundlePricingService
from bundles.services.resolver import require_available

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BundleSelectionSnapshot:
    """What a grouped cart line was added as."""
    bundle_id: int
    bundle_name: str
    group_id: uuid.UUID
    selections: Tuple[dict, ...] = ()


@dataclass
class CartLine:
    """A cart row plus, for bundle parents, the rows added with it."""
    item: CartItem
    bundle_ref: Optional[BundleSelectionSnapshot] = None
    children: List['CartLine'] = field(default_factory=list)

    @property
    def is_bundle(self):
        return self.bundle_ref is not None

    @property
    def total(self):
        own = self.item.get_unit_price() * self.item.quantity
        return own + sum((child.total for child in self.children), Decimal('0.00'))


@dataclass
class BundleCartResult:
    created: bool
    group_id: Optional[uuid.UUID]
    items: List[CartItem]
    message: str = ''


class BundleCartService:
    def __init__(self, pricing_service=None):
        self.pricing = pricing_service or BundlePricingService()

    @staticmethod
    def get_or_create_cart(session_key=None):
        """Get existing open cart for the session or create a new one."""
        cart = None
        if session_key:
            cart = Cart.objects.filter(session_key=session_key, is_submitted=False).first()

        if not cart:
            cart = Cart.objects.create(session_key=session_key or '')

        # Clean up expired cart
        if cart.is_expired():
            cart.delete()
            return BundleCartService.get_or_create_cart(session_key)

        return cart

    def add_bundle_to_cart(self, cart, identifier, selections=None, now=None):
        """
        Price a bundle against the live catalog and write it into the cart
        according to the bundle's cart_display mode.

        Raises BundleNotFound, BundleUnavailable, SelectionValidationError,
        or ValueError for a submitted cart / empty configurable selection.
        """
        if cart.is_submitted:
            raise ValueError("Cart already submitted")

        descriptor = require_available(self.pricing.resolve_bundle(identifier, now=now))
        validated = None
        if descriptor.is_configurable:
            validated = self.pricing.validate_selections(descriptor, selections or [])
            if len(validated) == 0:
                raise ValueError("Selections are required for this bundle.")
        breakdown = self.pricing.compute_pricing(descriptor, validated)

        with transaction.atomic():
            bundle = Bundle.objects.select_for_update().get(pk=descriptor.bundle_id)
            if descriptor.cart_display == Bundle.CartDisplay.INDIVIDUAL:
                result = self._add_as_individual(cart, bundle, breakdown)
            else:
                existing = self._existing_parent(cart, bundle)
                if existing is not None:
                    group_items = list(cart.items.filter(bundle_group_id=existing.bundle_group_id))
                    return BundleCartResult(
                        created=False,
                        group_id=existing.bundle_group_id,
                        items=group_items,
                        message="Bundle already in cart.",
                    )
                result = self._add_as_group(
                    cart, bundle, breakdown, validated,
                    with_children=descriptor.cart_display == Bundle.CartDisplay.GROUPED,
                )

            Bundle.objects.filter(pk=bundle.pk).update(add_to_cart_count=F('add_to_cart_count') + 1)

        logger.info(
            "Bundle %s added to cart %s as %s (%d lines)",
            descriptor.slug, cart.pk, descriptor.cart_display, len(result.items),
        )
        return result

    @staticmethod
    def _existing_parent(cart, bundle):
        return cart.items.filter(bundle=bundle, is_bundle_parent=True).first()

    def _add_as_group(self, cart, bundle, breakdown, validated, with_children):
        """Parent line carries the bundle price; children are listed at zero."""
        config = self.pricing.config
        group_id = uuid.uuid4()
        parent = CartItem.objects.create(
            cart=cart,
            product=None,
            bundle=bundle,
            bundle_group_id=group_id,
            is_bundle_parent=True,
            bundle_slot_selections=validated.as_payload() if validated is not None else None,
            quantity=1,
            unit_price=config.money(breakdown.discounted_price),
        )
        items = [parent]
        if with_children:
            for line in breakdown.lines:
                items.append(CartItem.objects.create(
                    cart=cart,
                    product_id=line.product_id,
                    bundle=bundle,
                    bundle_group_id=group_id,
                    quantity=line.quantity,
                    unit_price=Decimal('0.00'),
                ))
        return BundleCartResult(created=True, group_id=group_id, items=items, message="Bundle added to cart.")

    def _add_as_individual(self, cart, bundle, breakdown):
        """Bundle products become ordinary lines, merged into matching plain lines."""
        config = self.pricing.config
        group_id = uuid.uuid4()
        items = []
        for line in breakdown.lines:
            existing = cart.items.filter(product_id=line.product_id, bundle__isnull=True).first()
            if existing:
                existing.quantity += line.quantity
                existing.save(update_fields=['quantity'])
                items.append(existing)
            else:
                items.append(CartItem.objects.create(
                    cart=cart,
                    product_id=line.product_id,
                    bundle=bundle,
                    bundle_group_id=group_id,
                    quantity=line.quantity,
                    unit_price=config.money(line.unit_price),
                ))
        return BundleCartResult(created=True, group_id=group_id, items=items, message="Bundle products added to cart.")

    @staticmethod
    def remove_bundle_from_cart(cart, bundle_id):
        """Remove every line that was added through the bundle."""
        deleted, _ = cart.items.filter(bundle_id=bundle_id).delete()
        return deleted

    @staticmethod
    def build_cart_lines(cart):
        """Cart rows as a tree: bundle parents own the rows of their group."""
        items = list(cart.items.select_related('product', 'bundle'))
        parents = {
            item.bundle_group_id: CartLine(
                item=item,
                bundle_ref=BundleSelectionSnapshot(
                    bundle_id=item.bundle_id,
                    bundle_name=item.bundle.name if item.bundle else '',
                    group_id=item.bundle_group_id,
                    selections=tuple(item.bundle_slot_selections or ()),
                ),
            )
            for item in items
            if item.is_bundle_parent
        }

        lines = []
        for item in items:
            if item.is_bundle_parent:
                lines.append(parents[item.bundle_group_id])
            elif item.bundle_group_id in parents:
                parents[item.bundle_group_id].children.append(CartLine(item=item))
            else:
                lines.append(CartLine(item=item))
        return lines

    def calculate_cart_bundle_discount(self, cart):
        """Sum of live savings over the bundle parents in the cart."""
        total = Decimal('0')
        parents = cart.items.filter(is_bundle_parent=True, bundle__isnull=False)
        for item in parents:
            try:
                descriptor = self.pricing.resolve_bundle(item.bundle_id)
                breakdown = self.pricing.compute_pricing(descriptor, item.bundle_slot_selections or [])
            except (BundleNotFound, SelectionValidationError) as e:
                logger.warning("Skipping bundle line %s in cart %s: %s", item.pk, cart.pk, e)
                continue
            total += breakdown.savings * item.quantity
        return self.pricing.config.money(total)
