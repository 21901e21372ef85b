"""
Online presence registry.

Clients send a heartbeat while a tab is open; a user counts as online until
PRESENCE_TTL_SECONDS pass without one. Each user has their own key in the
default cache, so concurrent heartbeats never overwrite each other.
"""
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.cache import cache
import logging
import time

logger = logging.getLogger(__name__)

PRESENCE_KEY_PREFIX = 'presence:user'
PRESENCE_TTL_SECONDS = getattr(settings, 'PRESENCE_TTL_SECONDS', 60)


def presence_key(user_id):
    return f"{PRESENCE_KEY_PREFIX}:{int(user_id)}"


def track(user_id, now=None):
    """Mark a user as online (join or heartbeat)"""
    now = now if now is not None else time.time()
    cache.set(presence_key(user_id), now, PRESENCE_TTL_SECONDS)
    logger.debug(f"Presence heartbeat for user {user_id}")


def untrack(user_id):
    """Mark a user as offline (leave)"""
    cache.delete(presence_key(user_id))


def online_user_ids(user_ids=None, now=None):
    """
    Ids of online users among user_ids (every active user when omitted).
    """
    now = now if now is not None else time.time()
    if user_ids is None:
        user_ids = get_user_model().objects.filter(is_active=True).values_list('id', flat=True)
    keys = {presence_key(user_id): int(user_id) for user_id in user_ids}
    seen = cache.get_many(list(keys))
    return {keys[key] for key, last_seen in seen.items() if now - last_seen < PRESENCE_TTL_SECONDS}


def is_online(user_id, now=None):
    return int(user_id) in online_user_ids([user_id], now)
