from django.db import models
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.utils.translation import gettext_lazy as _
from django.utils.text import slugify
from django.utils import timezone
from decimal import Decimal
from datetime import timedelta


# -------------------------------------------------------------------------
# 1. CATALOG MODELS (Product price / stock source)
# -------------------------------------------------------------------------

class Product(models.Model):
    """
    Catalog product referenced by bundles.
    Bundles never own products; price and stock are read live on every pricing call.
    """
    class StockStatus(models.TextChoices):
        IN_STOCK = 'in_stock', _('In stock')
        OUT_OF_STOCK = 'out_of_stock', _('Out of stock')
        ON_BACKORDER = 'on_backorder', _('On backorder')

    name = models.CharField(max_length=255, db_index=True)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    sku = models.CharField(max_length=100, blank=True)
    price = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    stock_status = models.CharField(max_length=20, choices=StockStatus.choices, default=StockStatus.IN_STOCK)
    allow_backorders = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['is_active', 'stock_status'], name='bundles_pro_is_acti_3f1c2a_idx'),
        ]

    def __str__(self):
        return self.name

    @property
    def is_in_stock(self):
        if self.stock_status == self.StockStatus.IN_STOCK:
            return True
        return self.allow_backorders and self.stock_status == self.StockStatus.ON_BACKORDER

    @property
    def is_available(self):
        """Product still exists in the catalog and may be sold."""
        return self.is_active and self.deleted_at is None

    def save(self, *args, **kwargs):
        """Auto-generate slug from name if not provided"""
        if not self.slug and self.name:
            base_slug = slugify(self.name)
            slug = base_slug
            counter = 1
            while Product.objects.filter(slug=slug).exclude(pk=self.pk).exists():
                slug = f"{base_slug}-{counter}"
                counter += 1
            self.slug = slug
        super().save(*args, **kwargs)


# -------------------------------------------------------------------------
# 2. BUNDLE MODELS
# -------------------------------------------------------------------------

class BundleQuerySet(models.QuerySet):
    def alive(self):
        return self.filter(deleted_at__isnull=True)

    def available(self, now=None):
        """Active, inside the time window and not sold out."""
        now = now or timezone.now()
        return self.alive().filter(
            is_active=True,
        ).filter(
            models.Q(starts_at__isnull=True) | models.Q(starts_at__lte=now),
            models.Q(ends_at__isnull=True) | models.Q(ends_at__gte=now),
        ).filter(
            models.Q(stock_limit__isnull=True) | models.Q(stock_sold__lt=models.F('stock_limit'))
        )


class AliveBundleManager(models.Manager.from_queryset(BundleQuerySet)):
    """Default manager: soft-deleted bundles are invisible."""
    def get_queryset(self):
        return super().get_queryset().alive()


class Bundle(models.Model):
    """
    A composite sellable offer.
    FIXED bundles own BundleItems, CONFIGURABLE bundles own BundleSlots; never both.
    """
    class BundleType(models.TextChoices):
        FIXED = 'fixed', _('Fixed')
        CONFIGURABLE = 'configurable', _('Configurable')

    class DiscountType(models.TextChoices):
        FIXED_PRICE = 'fixed_price', _('Fixed bundle price')
        PERCENTAGE = 'percentage', _('Percentage off items total')

    class CartDisplay(models.TextChoices):
        SINGLE_ITEM = 'single_item', _('Single cart line')
        GROUPED = 'grouped', _('Parent line with grouped children')
        INDIVIDUAL = 'individual', _('Individual product lines')

    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, blank=True, db_index=True)
    description = models.TextField(blank=True)

    bundle_type = models.CharField(max_length=20, choices=BundleType.choices, default=BundleType.FIXED)
    discount_type = models.CharField(max_length=20, choices=DiscountType.choices, default=DiscountType.PERCENTAGE)
    discount_value = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal('0.00'),
        help_text="Bundle price (fixed_price) or percentage off the items total (percentage)"
    )

    # Availability
    is_active = models.BooleanField(default=True)
    starts_at = models.DateTimeField(null=True, blank=True)
    ends_at = models.DateTimeField(null=True, blank=True)
    stock_limit = models.IntegerField(null=True, blank=True, help_text="Empty = unlimited")
    stock_sold = models.IntegerField(default=0)

    # Cart / display behaviour
    cart_display = models.CharField(max_length=20, choices=CartDisplay.choices, default=CartDisplay.GROUPED)
    allow_coupon_stacking = models.BooleanField(default=False)
    show_savings = models.BooleanField(default=True)
    show_countdown = models.BooleanField(default=False)
    display_order = models.IntegerField(default=0)

    add_to_cart_count = models.IntegerField(default=0)
    was_published = models.BooleanField(
        default=False, editable=False,
        help_text="Set the first time the bundle is saved active; locks the slug"
    )

    deleted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AliveBundleManager()
    all_objects = BundleQuerySet.as_manager()

    class Meta:
        ordering = ['display_order', '-created_at']
        indexes = [
            models.Index(fields=['is_active', 'starts_at', 'ends_at'], name='bundles_bun_is_acti_8e2d41_idx'),
        ]

    def __str__(self):
        return self.name

    @property
    def is_fixed(self):
        return self.bundle_type == self.BundleType.FIXED

    @property
    def is_configurable(self):
        return self.bundle_type == self.BundleType.CONFIGURABLE

    @property
    def stock_remaining(self):
        if self.stock_limit is None:
            return None
        return max(0, self.stock_limit - self.stock_sold)

    def clean(self):
        errors = {}
        if self.discount_value is not None and self.discount_value < 0:
            errors['discount_value'] = "Discount value cannot be negative."
        elif (self.discount_type == self.DiscountType.PERCENTAGE
                and self.discount_value is not None and self.discount_value > 100):
            errors['discount_value'] = "Percentage discount must be between 0 and 100."
        if self.starts_at and self.ends_at and self.ends_at < self.starts_at:
            errors['ends_at'] = "End date must be on or after the start date."
        if self.stock_limit is not None and self.stock_limit < 0:
            errors['stock_limit'] = "Stock limit cannot be negative."
        errors.update(self._immutable_field_errors())
        if errors:
            raise ValidationError(errors)

    def _immutable_field_errors(self):
        if not self.pk:
            return {}
        previous = Bundle.all_objects.filter(pk=self.pk).values('bundle_type', 'slug', 'was_published').first()
        if not previous:
            return {}
        errors = {}
        if previous['bundle_type'] != self.bundle_type:
            errors['bundle_type'] = "Bundle type cannot change after creation."
        if previous['was_published'] and self.slug != previous['slug']:
            errors['slug'] = "Slug cannot change once the bundle has been published."
        return errors

    def save(self, *args, **kwargs):
        """Auto-generate slug from name; enforce type/slug immutability."""
        errors = self._immutable_field_errors()
        if errors:
            raise ValidationError(errors)
        if not self.slug and self.name:
            base_slug = slugify(self.name)
            slug = base_slug
            counter = 1
            while Bundle.all_objects.filter(slug=slug).exclude(pk=self.pk).exists():
                slug = f"{base_slug}-{counter}"
                counter += 1
            self.slug = slug
        if self.is_active:
            self.was_published = True
        super().save(*args, **kwargs)

    def soft_delete(self):
        self.deleted_at = timezone.now()
        self.save(update_fields=['deleted_at', 'updated_at'])


class BundleItem(models.Model):
    """A product line of a FIXED bundle."""
    bundle = models.ForeignKey(Bundle, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='bundle_items')
    quantity = models.PositiveIntegerField(default=1)
    price_override = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True,
        help_text="Optional price for this line only; supersedes the product price"
    )
    sort_order = models.IntegerField(default=0)

    class Meta:
        ordering = ['sort_order', 'id']
        unique_together = ['bundle', 'product']

    def __str__(self):
        return f"{self.quantity} x {self.product.name} in {self.bundle.name}"

    def clean(self):
        errors = {}
        if self.quantity is not None and self.quantity < 1:
            errors['quantity'] = "Quantity must be at least 1."
        if self.price_override is not None and self.price_override < 0:
            errors['price_override'] = "Price override cannot be negative."
        if self.bundle_id and not self.bundle.is_fixed:
            errors['bundle'] = "Items can only be added to fixed bundles."
        if errors:
            raise ValidationError(errors)


class BundleSlot(models.Model):
    """A named selection group of a CONFIGURABLE bundle."""
    bundle = models.ForeignKey(Bundle, on_delete=models.CASCADE, related_name='slots')
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    slot_order = models.IntegerField(default=0)
    is_required = models.BooleanField(default=True)
    min_selections = models.PositiveIntegerField(default=1)
    max_selections = models.PositiveIntegerField(default=1)

    class Meta:
        ordering = ['slot_order', 'id']

    def __str__(self):
        return f"{self.name} ({self.bundle.name})"

    def clean(self):
        errors = {}
        if self.min_selections > self.max_selections:
            errors['max_selections'] = "Maximum selections must be at least the minimum."
        if self.is_required and self.min_selections < 1:
            errors['min_selections'] = "Required slots need at least one selection."
        if self.bundle_id and not self.bundle.is_configurable:
            errors['bundle'] = "Slots can only be added to configurable bundles."
        if errors:
            raise ValidationError(errors)


class BundleSlotProduct(models.Model):
    """A candidate product for a slot."""
    slot = models.ForeignKey(BundleSlot, on_delete=models.CASCADE, related_name='products')
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='bundle_slot_entries')
    price_override = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    sort_order = models.IntegerField(default=0)

    class Meta:
        ordering = ['sort_order', 'id']
        unique_together = ['slot', 'product']

    def __str__(self):
        return f"{self.product.name} in slot {self.slot.name}"

    def clean(self):
        if self.price_override is not None and self.price_override < 0:
            raise ValidationError({'price_override': "Price override cannot be negative."})


# -------------------------------------------------------------------------
# 3. CART MODELS
# -------------------------------------------------------------------------

class Cart(models.Model):
    """Session shopping cart."""
    session_key = models.CharField(max_length=40, db_index=True, blank=True)
    is_submitted = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    expires_at = models.DateTimeField()  # 24 hours from creation

    def is_expired(self):
        return timezone.now() > self.expires_at

    def save(self, *args, **kwargs):
        if not self.expires_at:
            self.expires_at = timezone.now() + timedelta(hours=24)
        super().save(*args, **kwargs)

    def __str__(self):
        return f"Cart {self.id} ({'Submitted' if self.is_submitted else 'Active'})"


class CartItem(models.Model):
    """
    Items in a shopping cart.
    Lines added together as one bundle share a bundle_group_id; the group's
    parent line (is_bundle_parent) carries the bundle price and selections.
    """
    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.CASCADE, null=True, blank=True)
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Price at time of adding to cart"
    )
    bundle = models.ForeignKey(
        Bundle,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='cart_items',
        help_text="Bundle this line was added through (if any)"
    )
    bundle_group_id = models.UUIDField(
        null=True, blank=True, db_index=True,
        help_text="Groups cart items added as a single bundle"
    )
    is_bundle_parent = models.BooleanField(default=False)
    bundle_slot_selections = models.JSONField(null=True, blank=True)
    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['added_at', 'id']

    def get_unit_price(self):
        """Return unit_price if set, otherwise the product's live price."""
        if self.unit_price is not None:
            return self.unit_price
        return self.product.price if self.product else Decimal('0.00')

    def __str__(self):
        label = self.bundle.name if self.is_bundle_parent and self.bundle else getattr(self.product, 'name', '?')
        return f"{label} in Cart {self.cart_id}"
