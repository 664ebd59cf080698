"""Bundle descriptor resolution."""
import logging

from asgiref.sync import sync_to_async
from django.utils import timezone

from bundles.exceptions import BundleNotFound, BundleUnavailable
from bundles.services.catalog import DjangoBundleStore, DjangoProductProvider
from bundles.services.descriptors import (
    Availability, ConfigurableBundleDescriptor, FixedBundleDescriptor,
    ResolvedCandidate, ResolvedItem, ResolvedSlot,
)

logger = logging.getLogger(__name__)


def window_availability(is_active, starts_at, ends_at, stock_limit, stock_sold, now):
    """Availability from the bundle's own flags, ignoring its composition."""
    if not is_active:
        return Availability.INACTIVE
    if starts_at and starts_at > now:
        return Availability.NOT_STARTED
    if ends_at and ends_at < now:
        return Availability.EXPIRED
    if stock_limit is not None and stock_sold >= stock_limit:
        return Availability.SOLD_OUT
    return Availability.AVAILABLE


def time_remaining(ends_at, show_countdown, now):
    if not ends_at or not show_countdown or ends_at < now:
        return None
    delta = ends_at - now
    total_seconds = int(delta.total_seconds())
    hours, remainder = divmod(delta.seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return {
        'days': delta.days,
        'hours': hours,
        'minutes': minutes,
        'seconds': seconds,
        'total_seconds': total_seconds,
    }


class BundleResolver:
    """
    Loads a bundle by slug or id into a descriptor annotated with live
    product price and stock. Read-only; every call hits the provider again.
    """

    def __init__(self, store=None, provider=None):
        self.store = store or DjangoBundleStore()
        self.provider = provider or DjangoProductProvider()

    def resolve(self, identifier, now=None):
        bundle = self.store.get_bundle(identifier)
        if bundle is None:
            raise BundleNotFound(identifier)

        now = now or timezone.now()
        common = dict(
            bundle_id=bundle.pk,
            slug=bundle.slug,
            name=bundle.name,
            discount_type=bundle.discount_type,
            discount_value=bundle.discount_value,
            is_active=bundle.is_active,
            starts_at=bundle.starts_at,
            ends_at=bundle.ends_at,
            stock_limit=bundle.stock_limit,
            stock_sold=bundle.stock_sold,
            cart_display=bundle.cart_display,
            allow_coupon_stacking=bundle.allow_coupon_stacking,
            show_savings=bundle.show_savings,
            show_countdown=bundle.show_countdown,
            time_remaining=time_remaining(bundle.ends_at, bundle.show_countdown, now),
        )
        availability = window_availability(
            bundle.is_active, bundle.starts_at, bundle.ends_at,
            bundle.stock_limit, bundle.stock_sold, now,
        )

        if bundle.is_fixed:
            descriptor = self._resolve_fixed(bundle, common, availability)
        else:
            descriptor = self._resolve_configurable(bundle, common, availability)

        if not descriptor.is_available:
            logger.info("Bundle %s resolved as unavailable: %s", bundle.slug, descriptor.availability.value)
        return descriptor

    def _resolve_fixed(self, bundle, common, availability):
        bundle_items = list(bundle.items.all())
        products = self.provider.get_products([item.product_id for item in bundle_items])
        items = tuple(
            ResolvedItem(
                product_id=item.product_id,
                quantity=item.quantity,
                price_override=item.price_override,
                product=products.get(item.product_id),
            )
            for item in bundle_items
        )
        if availability.is_available:
            if any(not item.is_available for item in items):
                availability = Availability.INCOMPLETE
            elif any(not item.product.is_in_stock for item in items):
                availability = Availability.OUT_OF_STOCK
        return FixedBundleDescriptor(items=items, availability=availability, **common)

    def _resolve_configurable(self, bundle, common, availability):
        bundle_slots = list(bundle.slots.all())
        product_ids = [entry.product_id for slot in bundle_slots for entry in slot.products.all()]
        products = self.provider.get_products(product_ids)
        slots = tuple(
            ResolvedSlot(
                slot_id=slot.pk,
                name=slot.name,
                is_required=slot.is_required,
                min_selections=slot.min_selections,
                max_selections=slot.max_selections,
                candidates=tuple(
                    ResolvedCandidate(
                        product_id=entry.product_id,
                        price_override=entry.price_override,
                        product=products.get(entry.product_id),
                    )
                    for entry in slot.products.all()
                ),
            )
            for slot in bundle_slots
        )
        if availability.is_available and any(not slot.is_fulfillable for slot in slots):
            availability = Availability.INCOMPLETE
        return ConfigurableBundleDescriptor(slots=slots, availability=availability, **common)


def require_available(descriptor):
    """Raise BundleUnavailable for callers that must not proceed (e.g. add to cart)."""
    if not descriptor.is_available:
        raise BundleUnavailable(descriptor.slug, descriptor.availability.value)
    return descriptor


def resolve_bundle(identifier, now=None, provider=None, store=None):
    return BundleResolver(store=store, provider=provider).resolve(identifier, now=now)


async def aresolve_bundle(identifier, now=None, provider=None, store=None):
    """resolve_bundle for async hosts; the ORM reads run in a worker thread."""
    return await sync_to_async(resolve_bundle, thread_sensitive=True)(
        identifier, now=now, provider=provider, store=store,
    )
