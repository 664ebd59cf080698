"""Bundle pricing service: resolve, validate and price bundles."""
import logging

from bundles.services.pricing import BundlePricingCalculator, PricingConfig
from bundles.services.resolver import BundleResolver
from bundles.services.validation import SelectionValidator

logger = logging.getLogger(__name__)


class BundlePricingService:
    """
    Entry point for storefront / cart callers.

    The product provider and pricing config are injected once; every call
    still reads live catalog state through the provider.
    """

    def __init__(self, provider=None, store=None, config=None):
        self.config = config or PricingConfig.from_settings()
        self.resolver = BundleResolver(store=store, provider=provider)
        self.validator = SelectionValidator()
        self.calculator = BundlePricingCalculator(config=self.config, validator=self.validator)

    def resolve_bundle(self, identifier, now=None):
        return self.resolver.resolve(identifier, now=now)

    def validate_selections(self, descriptor, selections):
        return self.validator.validate(descriptor, selections)

    def compute_pricing(self, descriptor, selections=None):
        return self.calculator.compute(descriptor, selections)

    def get_pricing_breakdown(self, identifier, selections=None, now=None):
        """Resolve + validate + price in one call (storefront price preview)."""
        descriptor = self.resolve_bundle(identifier, now=now)
        if descriptor.is_configurable:
            selections = self.validate_selections(descriptor, selections or [])
        breakdown = self.compute_pricing(descriptor, selections)
        logger.debug(
            "Priced bundle %s: original=%s discounted=%s",
            descriptor.slug, breakdown.original_price, breakdown.discounted_price,
        )
        return descriptor, breakdown
