"""
Bundle pricing.

Computes original price, discounted price, savings and savings percentage for
a resolved bundle (and, for configurable bundles, a validated selection).
All intermediate arithmetic is unrounded Decimal; rounding happens only in
PricingBreakdown.as_dict().
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

from django.conf import settings

from bundles.services.descriptors import ValidatedSelections
from bundles.services.validation import SelectionValidator

logger = logging.getLogger(__name__)

ZERO = Decimal('0')
HUNDRED = Decimal('100')


def discount_configuration_issues(bundle):
    """
    Discount settings that must be clamped before pricing.
    Works on Bundle models and descriptors alike.
    """
    issues = []
    if bundle.discount_value is None:
        return issues
    if bundle.discount_value < 0:
        issues.append(f"negative discount_value {bundle.discount_value}")
    elif bundle.discount_type == 'percentage' and bundle.discount_value > HUNDRED:
        issues.append(f"percentage discount_value {bundle.discount_value} above 100")
    return issues


@dataclass(frozen=True)
class PricingConfig:
    """Snapshot of pricing settings passed explicitly into each calculation."""
    currency: str = 'PKR'
    money_places: int = 2
    percentage_places: int = 2
    rounding: str = ROUND_HALF_UP

    @classmethod
    def from_settings(cls):
        options = getattr(settings, 'BUNDLE_PRICING', {}) or {}
        return cls(
            currency=options.get('CURRENCY', cls.currency),
            money_places=int(options.get('MONEY_PLACES', cls.money_places)),
            percentage_places=int(options.get('PERCENTAGE_PLACES', cls.percentage_places)),
            rounding=options.get('ROUNDING', cls.rounding),
        )

    def money(self, value):
        return value.quantize(Decimal(1).scaleb(-self.money_places), rounding=self.rounding)

    def percentage(self, value):
        return value.quantize(Decimal(1).scaleb(-self.percentage_places), rounding=self.rounding)


@dataclass(frozen=True)
class PricedLine:
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    slot_id: Optional[int] = None
    slot_name: str = ''

    @property
    def line_total(self):
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class PricingBreakdown:
    bundle_id: int
    bundle_type: str
    discount_type: str
    discount_value: Decimal
    original_price: Decimal
    discounted_price: Decimal
    savings: Decimal
    savings_percentage: Decimal
    availability: str
    stock_remaining: Optional[int] = None
    show_savings: bool = True
    lines: Tuple[PricedLine, ...] = ()
    configuration_issues: Tuple[str, ...] = ()
    config: PricingConfig = field(default_factory=PricingConfig, compare=False)

    def as_dict(self):
        """Presentation form: money and percentages rounded, savings hidden when the bundle hides them."""
        config = self.config
        return {
            'bundle_id': self.bundle_id,
            'bundle_type': self.bundle_type,
            'currency': config.currency,
            'discount_type': self.discount_type,
            'discount_value': self.discount_value,
            'original_price': config.money(self.original_price),
            'discounted_price': config.money(self.discounted_price),
            'savings': config.money(self.savings) if self.show_savings else None,
            'savings_percentage': config.percentage(self.savings_percentage) if self.show_savings else None,
            'availability': self.availability,
            'stock_remaining': self.stock_remaining,
            'items': [
                {
                    'slot_id': line.slot_id,
                    'slot_name': line.slot_name,
                    'product_id': line.product_id,
                    'product_name': line.product_name,
                    'quantity': line.quantity,
                    'unit_price': config.money(line.unit_price),
                    'line_total': config.money(line.line_total),
                }
                for line in self.lines
            ],
        }


class BundlePricingCalculator:
    """Pure function of (descriptor, selections, config)."""

    def __init__(self, config=None, validator=None):
        self.config = config or PricingConfig.from_settings()
        self.validator = validator or SelectionValidator()

    def compute(self, descriptor, selections=None):
        if descriptor.is_fixed:
            lines = self._fixed_lines(descriptor)
        else:
            if not isinstance(selections, ValidatedSelections):
                selections = self.validator.validate(descriptor, selections or [])
            lines = self._configurable_lines(descriptor, selections)

        original_price = sum((line.line_total for line in lines), ZERO)
        discount_value, issues = self._effective_discount(descriptor)
        discounted_price = self._discounted_price(descriptor.discount_type, discount_value, original_price)
        savings = max(original_price - discounted_price, ZERO)
        if original_price > 0:
            savings_percentage = savings / original_price * HUNDRED
        else:
            savings_percentage = ZERO

        return PricingBreakdown(
            bundle_id=descriptor.bundle_id,
            bundle_type=descriptor.bundle_type,
            discount_type=descriptor.discount_type,
            discount_value=descriptor.discount_value,
            original_price=original_price,
            discounted_price=discounted_price,
            savings=savings,
            savings_percentage=savings_percentage,
            availability=descriptor.availability.value,
            stock_remaining=descriptor.stock_remaining,
            show_savings=descriptor.show_savings,
            lines=tuple(lines),
            configuration_issues=issues,
            config=self.config,
        )

    @staticmethod
    def _fixed_lines(descriptor):
        # Lines whose product left the catalog are not priced.
        return [
            PricedLine(
                product_id=item.product_id,
                product_name=item.product.name,
                quantity=item.quantity,
                unit_price=item.unit_price,
            )
            for item in descriptor.items
            if item.is_available
        ]

    @staticmethod
    def _configurable_lines(descriptor, selections):
        lines = []
        for selection in selections:
            slot = descriptor.slot(selection.slot_id)
            if slot is None:
                continue
            for product_id in selection.product_ids:
                candidate = slot.candidate(product_id)
                if candidate is None or not candidate.is_available:
                    continue
                lines.append(PricedLine(
                    product_id=product_id,
                    product_name=candidate.product.name,
                    quantity=1,
                    unit_price=candidate.unit_price,
                    slot_id=slot.slot_id,
                    slot_name=slot.name,
                ))
        return lines

    def _effective_discount(self, descriptor):
        """Clamp out-of-range configuration instead of failing a customer-facing call."""
        value = Decimal(descriptor.discount_value or 0)
        issues = tuple(discount_configuration_issues(descriptor))
        if value < 0:
            value = ZERO
        elif descriptor.discount_type == 'percentage' and value > HUNDRED:
            value = HUNDRED
        if issues:
            logger.warning(
                "Clamped invalid discount configuration for bundle %s: %s",
                descriptor.slug, ', '.join(issues),
                extra={'bundle_id': descriptor.bundle_id, 'flag': 'invalid_configuration'},
            )
        return value, issues

    @staticmethod
    def _discounted_price(discount_type, discount_value, original_price):
        if discount_type == 'fixed_price':
            # A bundle price never exceeds the sum of its parts.
            return min(discount_value, original_price)
        return original_price * (1 - discount_value / HUNDRED)


def compute_pricing(descriptor, selections=None, config=None):
    return BundlePricingCalculator(config=config).compute(descriptor, selections)
