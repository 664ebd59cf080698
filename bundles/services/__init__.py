# Services package
from .engine import BundlePricingService
from .cart_service import BundleCartService
from .pricing import BundlePricingCalculator, PricingConfig, compute_pricing
from .resolver import BundleResolver, aresolve_bundle, require_available, resolve_bundle
from .validation import SelectionValidator, validate_selections

__all__ = [
    'BundlePricingService', 'BundleCartService', 'BundlePricingCalculator', 'PricingConfig',
    'BundleResolver', 'SelectionValidator', 'compute_pricing', 'resolve_bundle',
    'aresolve_bundle', 'require_available', 'validate_selections',
]
