"""Product catalog and bundle store lookups used by the resolver."""
import logging

from django.db.models import Prefetch

from bundles.models import Bundle, BundleSlot, Product
from bundles.services.descriptors import ProductSnapshot

logger = logging.getLogger(__name__)


class ProductProvider:
    """
    Source of live product price / stock.

    Implementations must reflect the catalog at call time; the engine calls
    them on every resolution and never caches the answers.
    """

    def get_product(self, product_id):
        raise NotImplementedError

    def get_products(self, product_ids):
        """Return {product_id: ProductSnapshot}; unknown ids are simply absent."""
        products = {}
        for product_id in product_ids:
            snapshot = self.get_product(product_id)
            if snapshot is not None:
                products[product_id] = snapshot
        return products


class DjangoProductProvider(ProductProvider):
    """Reads products straight from the Product table."""

    @staticmethod
    def _snapshot(product):
        return ProductSnapshot(
            product_id=product.pk,
            name=product.name,
            price=product.price,
            is_in_stock=product.is_in_stock,
            is_available=product.is_available,
        )

    def get_product(self, product_id):
        product = Product.objects.filter(pk=product_id).first()
        if product is None:
            return None
        return self._snapshot(product)

    def get_products(self, product_ids):
        product_ids = set(product_ids)
        if not product_ids:
            return {}
        products = Product.objects.filter(pk__in=product_ids)
        return {product.pk: self._snapshot(product) for product in products}


class DjangoBundleStore:
    """Loads a non-deleted bundle and its composition by slug or id."""

    def get_bundle(self, identifier):
        """
        Return the Bundle or None. Soft-deleted bundles never match.

        Ints are primary keys. Strings are slugs first; an all-digit string
        falls back to the primary key only when no bundle has that slug.
        """
        queryset = Bundle.objects.prefetch_related(
            'items',
            Prefetch('slots', queryset=BundleSlot.objects.prefetch_related('products')),
        )
        if isinstance(identifier, int):
            bundle = queryset.filter(pk=identifier).first()
        else:
            identifier = str(identifier).strip()
            bundle = queryset.filter(slug=identifier).first()
            if bundle is None and identifier.isdigit():
                bundle = queryset.filter(pk=int(identifier)).first()
        if bundle is None:
            logger.debug("Bundle lookup missed for identifier %r", identifier)
        return bundle
