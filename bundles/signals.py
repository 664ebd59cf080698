"""
Signal handlers for bundle authoring.
"""
import logging
from django.db.models.signals import pre_save
from django.dispatch import receiver
from .models import Bundle
from .services.pricing import discount_configuration_issues

logger = logging.getLogger(__name__)


@receiver(pre_save, sender=Bundle)
def flag_invalid_discount_configuration(sender, instance, **kwargs):
    """
    Saves that bypass full_clean() can still store an out-of-range discount.
    Pricing clamps such values; flag them here for the back office.
    """
    issues = discount_configuration_issues(instance)
    if issues:
        logger.warning(
            "Bundle saved with invalid discount configuration",
            extra={
                'bundle_slug': instance.slug,
                'issues': issues,
                'flag': 'invalid_configuration',
            },
        )
