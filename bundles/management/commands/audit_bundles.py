"""Management command to flag bundles the storefront cannot sell as configured."""
from django.core.management.base import BaseCommand
from django.utils import timezone

from bundles.models import Bundle
from bundles.services.pricing import discount_configuration_issues
from bundles.services.resolver import BundleResolver


class Command(BaseCommand):
    help = 'List bundles with out-of-range discount settings or that are currently unavailable'

    def add_arguments(self, parser):
        parser.add_argument(
            '--include-inactive',
            action='store_true',
            help='Also report bundles switched off by an administrator',
        )

    def handle(self, *args, **options):
        now = timezone.now()
        resolver = BundleResolver()
        flagged = 0

        for bundle in Bundle.objects.order_by('pk'):
            problems = list(discount_configuration_issues(bundle))

            descriptor = resolver.resolve(bundle.pk, now=now)
            if not descriptor.is_available:
                if bundle.is_active or options['include_inactive']:
                    problems.append(f"unavailable: {descriptor.availability.value}")

            if problems:
                flagged += 1
                self.stdout.write(
                    self.style.WARNING(f'{bundle.slug}: {"; ".join(problems)}')
                )

        if flagged:
            self.stdout.write(self.style.WARNING(f'{flagged} bundle(s) need attention'))
        else:
            self.stdout.write(self.style.SUCCESS('All bundles are sellable as configured'))
