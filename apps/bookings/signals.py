from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

logger = logging.getLogger(__name__)


@receiver(post_save, sender='bookings.Review')
@receiver(post_delete, sender='bookings.Review')
def refresh_provider_rating(sender, instance, **kwargs):
    """Keep Provider.rating equal to the average of customer-written reviews."""
    if instance.author_role != 'customer':
        return
    provider = getattr(instance.provider, 'provider', None)
    if provider is None:
        return
    rating = provider.update_rating()
    logger.info(f"Provider {provider.user_id} rating refreshed to {rating}")
