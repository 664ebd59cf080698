"""Errors raised by the bundle pricing engine."""
from dataclasses import dataclass


class BundleError(Exception):
    """Base class for bundle resolution / selection failures."""


class BundleNotFound(BundleError):
    def __init__(self, identifier):
        self.identifier = identifier
        super().__init__(f"Bundle not found: {identifier}")


class BundleUnavailable(BundleError):
    """Bundle exists but is inactive, outside its window, sold out or incomplete."""

    def __init__(self, identifier, reason):
        self.identifier = identifier
        self.reason = reason
        super().__init__(f"Bundle {identifier} is not available ({reason})")


@dataclass(frozen=True)
class SelectionError:
    """
    One violated slot constraint.

    code is one of the SelectionError.* constants; callers render message
    next to the slot identified by slot_id.
    """
    MISSING_REQUIRED_SLOT = 'missing_required_slot'
    SELECTION_COUNT_OUT_OF_RANGE = 'selection_count_out_of_range'
    UNKNOWN_PRODUCT_IN_SLOT = 'unknown_product_in_slot'
    OUT_OF_STOCK_PRODUCT_SELECTED = 'out_of_stock_product_selected'
    UNKNOWN_SLOT = 'unknown_slot'

    code: str
    slot_id: int
    message: str
    product_id: int = None
    slot_name: str = ''

    def as_dict(self):
        return {
            'code': self.code,
            'slot_id': self.slot_id,
            'slot_name': self.slot_name,
            'product_id': self.product_id,
            'message': self.message,
        }


class SelectionValidationError(BundleError):
    """Raised with every violated slot, never just the first."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__(
            "Invalid selections: " + "; ".join(error.message for error in self.errors)
        )

    @property
    def codes(self):
        return [error.code for error in self.errors]

    def for_slot(self, slot_id):
        return [error for error in self.errors if error.slot_id == slot_id]
