"""Slot selection validation for configurable bundles."""
import logging

from bundles.exceptions import SelectionError, SelectionValidationError
from bundles.services.descriptors import SlotSelection, ValidatedSelections

logger = logging.getLogger(__name__)


def _merge_by_slot(selections):
    """Combine repeated entries for one slot and drop duplicate product ids, keeping order."""
    merged = {}
    for selection in selections:
        if isinstance(selection, dict):
            selection = SlotSelection.from_payload(selection)
        product_ids = merged.setdefault(selection.slot_id, [])
        for product_id in selection.product_ids:
            if product_id not in product_ids:
                product_ids.append(product_id)
    return merged


class SelectionValidator:
    """All-or-nothing check of a customer's slot selections."""

    def validate(self, descriptor, selections):
        if not descriptor.is_configurable:
            return ValidatedSelections()

        chosen = _merge_by_slot(selections or [])
        known_slot_ids = {slot.slot_id for slot in descriptor.slots}
        errors = []

        for slot_id in chosen:
            if slot_id not in known_slot_ids:
                errors.append(SelectionError(
                    code=SelectionError.UNKNOWN_SLOT,
                    slot_id=slot_id,
                    message=f"Invalid slot ID: {slot_id}",
                ))

        normalized = []
        for slot in descriptor.slots:
            product_ids = chosen.get(slot.slot_id, [])
            errors.extend(self._slot_errors(slot, product_ids))
            if product_ids:
                normalized.append(SlotSelection(slot_id=slot.slot_id, product_ids=tuple(product_ids)))

        if errors:
            logger.debug("Bundle %s selection rejected: %s", descriptor.slug, [e.code for e in errors])
            raise SelectionValidationError(errors)
        return ValidatedSelections(selections=tuple(normalized))

    @staticmethod
    def _slot_errors(slot, product_ids):
        errors = []
        count = len(product_ids)

        if count == 0:
            if slot.is_required:
                errors.append(SelectionError(
                    code=SelectionError.MISSING_REQUIRED_SLOT,
                    slot_id=slot.slot_id,
                    slot_name=slot.name,
                    message=f"Selection required for slot: {slot.name}",
                ))
            return errors

        if count < slot.min_selections or count > slot.max_selections:
            if slot.min_selections == slot.max_selections:
                expected = f"exactly {slot.min_selections}"
            else:
                expected = f"between {slot.min_selections} and {slot.max_selections}"
            errors.append(SelectionError(
                code=SelectionError.SELECTION_COUNT_OUT_OF_RANGE,
                slot_id=slot.slot_id,
                slot_name=slot.name,
                message=f"Choose {expected} option(s) for: {slot.name} ({count} selected)",
            ))

        for product_id in product_ids:
            candidate = slot.candidate(product_id)
            if candidate is None:
                errors.append(SelectionError(
                    code=SelectionError.UNKNOWN_PRODUCT_IN_SLOT,
                    slot_id=slot.slot_id,
                    slot_name=slot.name,
                    product_id=product_id,
                    message=f"Invalid product selection for slot: {slot.name}",
                ))
            elif not candidate.is_selectable:
                name = candidate.product.name if candidate.product else str(product_id)
                errors.append(SelectionError(
                    code=SelectionError.OUT_OF_STOCK_PRODUCT_SELECTED,
                    slot_id=slot.slot_id,
                    slot_name=slot.name,
                    product_id=product_id,
                    message=f"{name} is out of stock",
                ))
        return errors


def validate_selections(descriptor, selections):
    return SelectionValidator().validate(descriptor, selections)
