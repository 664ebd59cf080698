from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(db_index=True, max_length=255)),
                ('slug', models.SlugField(blank=True, max_length=255, unique=True)),
                ('sku', models.CharField(blank=True, max_length=100)),
                ('price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('stock_status', models.CharField(choices=[('in_stock', 'In stock'), ('out_of_stock', 'Out of stock'), ('on_backorder', 'On backorder')], default='in_stock', max_length=20)),
                ('allow_backorders', models.BooleanField(default=False)),
                ('is_active', models.BooleanField(default=True)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'indexes': [models.Index(fields=['is_active', 'stock_status'], name='bundles_pro_is_acti_3f1c2a_idx')],
            },
        ),
        migrations.CreateModel(
            name='Bundle',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('slug', models.SlugField(blank=True, max_length=255, unique=True)),
                ('description', models.TextField(blank=True)),
                ('bundle_type', models.CharField(choices=[('fixed', 'Fixed'), ('configurable', 'Configurable')], default='fixed', max_length=20)),
                ('discount_type', models.CharField(choices=[('fixed_price', 'Fixed bundle price'), ('percentage', 'Percentage off items total')], default='percentage', max_length=20)),
                ('discount_value', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Bundle price (fixed_price) or percentage off the items total (percentage)', max_digits=12)),
                ('is_active', models.BooleanField(default=True)),
                ('starts_at', models.DateTimeField(blank=True, null=True)),
                ('ends_at', models.DateTimeField(blank=True, null=True)),
                ('stock_limit', models.IntegerField(blank=True, help_text='Empty = unlimited', null=True)),
                ('stock_sold', models.IntegerField(default=0)),
                ('cart_display', models.CharField(choices=[('single_item', 'Single cart line'), ('grouped', 'Parent line with grouped children'), ('individual', 'Individual product lines')], default='grouped', max_length=20)),
                ('allow_coupon_stacking', models.BooleanField(default=False)),
                ('show_savings', models.BooleanField(default=True)),
                ('show_countdown', models.BooleanField(default=False)),
                ('display_order', models.IntegerField(default=0)),
                ('add_to_cart_count', models.IntegerField(default=0)),
                ('was_published', models.BooleanField(default=False, editable=False, help_text='Set the first time the bundle is saved active; locks the slug')),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['display_order', '-created_at'],
                'indexes': [models.Index(fields=['is_active', 'starts_at', 'ends_at'], name='bundles_bun_is_acti_8e2d41_idx')],
            },
        ),
        migrations.CreateModel(
            name='BundleItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.PositiveIntegerField(default=1)),
                ('price_override', models.DecimalField(blank=True, decimal_places=2, help_text='Optional price for this line only; supersedes the product price', max_digits=12, null=True)),
                ('sort_order', models.IntegerField(default=0)),
                ('bundle', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='bundles.bundle')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='bundle_items', to='bundles.product')),
            ],
            options={
                'ordering': ['sort_order', 'id'],
                'unique_together': {('bundle', 'product')},
            },
        ),
        migrations.CreateModel(
            name='BundleSlot',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True)),
                ('slot_order', models.IntegerField(default=0)),
                ('is_required', models.BooleanField(default=True)),
                ('min_selections', models.PositiveIntegerField(default=1)),
                ('max_selections', models.PositiveIntegerField(default=1)),
                ('bundle', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='slots', to='bundles.bundle')),
            ],
            options={
                'ordering': ['slot_order', 'id'],
            },
        ),
        migrations.CreateModel(
            name='BundleSlotProduct',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('price_override', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('sort_order', models.IntegerField(default=0)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='bundle_slot_entries', to='bundles.product')),
                ('slot', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='products', to='bundles.bundleslot')),
            ],
            options={
                'ordering': ['sort_order', 'id'],
                'unique_together': {('slot', 'product')},
            },
        ),
        migrations.CreateModel(
            name='Cart',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('session_key', models.CharField(blank=True, db_index=True, max_length=40)),
                ('is_submitted', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('expires_at', models.DateTimeField()),
            ],
        ),
        migrations.CreateModel(
            name='CartItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.PositiveIntegerField(default=1)),
                ('unit_price', models.DecimalField(blank=True, decimal_places=2, help_text='Price at time of adding to cart', max_digits=12, null=True)),
                ('bundle_group_id', models.UUIDField(blank=True, db_index=True, help_text='Groups cart items added as a single bundle', null=True)),
                ('is_bundle_parent', models.BooleanField(default=False)),
                ('bundle_slot_selections', models.JSONField(blank=True, null=True)),
                ('added_at', models.DateTimeField(auto_now_add=True)),
                ('bundle', models.ForeignKey(blank=True, help_text='Bundle this line was added through (if any)', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='cart_items', to='bundles.bundle')),
                ('cart', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='bundles.cart')),
                ('product', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, to='bundles.product')),
            ],
            options={
                'ordering': ['added_at', 'id'],
            },
        ),
    ]
