"""
In-memory bundle descriptors.

A descriptor is the resolved, read-only view of a bundle the pricing engine
works on: bundle attributes plus its composition, each product annotated
with the live price / stock observed at resolution time. Fixed and
configurable bundles are distinct types so a descriptor can never carry
both items and slots.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple


class Availability(str, Enum):
    AVAILABLE = 'available'
    INACTIVE = 'inactive'
    NOT_STARTED = 'not_started'
    EXPIRED = 'expired'
    SOLD_OUT = 'sold_out'
    OUT_OF_STOCK = 'out_of_stock'
    INCOMPLETE = 'incomplete'

    @property
    def is_available(self):
        return self is Availability.AVAILABLE


@dataclass(frozen=True)
class ProductSnapshot:
    """Catalog state of one product at lookup time."""
    product_id: int
    name: str
    price: Decimal
    is_in_stock: bool
    is_available: bool = True

    @property
    def is_sellable(self):
        return self.is_available and self.is_in_stock


@dataclass(frozen=True)
class ResolvedItem:
    """A fixed-bundle line. product is None when the catalog no longer has it."""
    product_id: int
    quantity: int
    price_override: Optional[Decimal]
    product: Optional[ProductSnapshot]

    @property
    def is_available(self):
        return self.product is not None and self.product.is_available

    @property
    def unit_price(self):
        if self.price_override is not None:
            return self.price_override
        if self.product is None:
            return Decimal('0')
        return self.product.price

    @property
    def line_total(self):
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class ResolvedCandidate:
    product_id: int
    price_override: Optional[Decimal]
    product: Optional[ProductSnapshot]

    @property
    def is_available(self):
        return self.product is not None and self.product.is_available

    @property
    def is_selectable(self):
        return self.product is not None and self.product.is_sellable

    @property
    def unit_price(self):
        if self.price_override is not None:
            return self.price_override
        if self.product is None:
            return Decimal('0')
        return self.product.price


@dataclass(frozen=True)
class ResolvedSlot:
    slot_id: int
    name: str
    is_required: bool
    min_selections: int
    max_selections: int
    candidates: Tuple[ResolvedCandidate, ...] = ()

    def candidate(self, product_id):
        for candidate in self.candidates:
            if candidate.product_id == product_id:
                return candidate
        return None

    @property
    def is_fulfillable(self):
        """An optional slot can always be skipped; a required one needs enough selectable candidates."""
        if not self.is_required:
            return True
        selectable = sum(1 for candidate in self.candidates if candidate.is_selectable)
        return selectable >= max(self.min_selections, 1)


@dataclass(frozen=True)
class BundleDescriptor:
    bundle_id: int
    slug: str
    name: str
    discount_type: str
    discount_value: Decimal
    is_active: bool
    starts_at: object = None
    ends_at: object = None
    stock_limit: Optional[int] = None
    stock_sold: int = 0
    cart_display: str = 'grouped'
    allow_coupon_stacking: bool = False
    show_savings: bool = True
    show_countdown: bool = False
    availability: Availability = Availability.AVAILABLE
    time_remaining: Optional[dict] = None

    bundle_type = None

    @property
    def is_available(self):
        return self.availability.is_available

    @property
    def stock_remaining(self):
        if self.stock_limit is None:
            return None
        return max(self.stock_limit - self.stock_sold, 0)

    @property
    def is_fixed(self):
        return self.bundle_type == 'fixed'

    @property
    def is_configurable(self):
        return self.bundle_type == 'configurable'


@dataclass(frozen=True)
class FixedBundleDescriptor(BundleDescriptor):
    items: Tuple[ResolvedItem, ...] = ()

    bundle_type = 'fixed'


@dataclass(frozen=True)
class ConfigurableBundleDescriptor(BundleDescriptor):
    slots: Tuple[ResolvedSlot, ...] = ()

    bundle_type = 'configurable'

    def slot(self, slot_id):
        for slot in self.slots:
            if slot.slot_id == slot_id:
                return slot
        return None


@dataclass(frozen=True)
class SlotSelection:
    """Customer's chosen products for one slot (request scoped)."""
    slot_id: int
    product_ids: Tuple[int, ...] = ()

    @classmethod
    def from_payload(cls, payload):
        """
        Accept {'slot_id': .., 'product_ids': [..]} or the single-product form
        {'slot_id': .., 'product_id': ..}.
        """
        product_ids = payload.get('product_ids')
        if product_ids is None:
            single = payload.get('product_id')
            product_ids = [single] if single is not None else []
        return cls(slot_id=int(payload['slot_id']), product_ids=tuple(int(pid) for pid in product_ids))


@dataclass(frozen=True)
class ValidatedSelections:
    """Selections that passed validation, in bundle slot order, empty slots omitted."""
    selections: Tuple[SlotSelection, ...] = field(default_factory=tuple)

    def __iter__(self):
        return iter(self.selections)

    def __len__(self):
        return len(self.selections)

    def as_payload(self):
        return [
            {'slot_id': selection.slot_id, 'product_ids': list(selection.product_ids)}
            for selection in self.selections
        ]
