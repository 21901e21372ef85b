"""
Profile bootstrap signals
Every new user gets a profile row at signup.
"""
from django.db.models.signals import post_save
from django.dispatch import receiver
import logging

from .models import User, Profile

logger = logging.getLogger(__name__)


@receiver(post_save, sender=User)
def create_profile_for_new_user(sender, instance, created, raw=False, **kwargs):
    """Create the profile for a freshly created user"""
    if raw or not created:
        return
    full_name = instance.get_full_name() or None
    Profile.objects.get_or_create(user=instance, defaults={'full_name': full_name})
    logger.debug(f"Created profile for user {instance.username}")
