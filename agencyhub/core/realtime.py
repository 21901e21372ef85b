"""
Change feed signals.

Every save or delete on a tracked table appends a ChangeEvent row. Clients
poll /api/v1/realtime/changes/ with the last cursor they saw and re-fetch
the affected lists when anything comes back.
"""
from django.db import transaction
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager

from .cache_utils import bump_dashboard_version

logger = logging.getLogger(__name__)

TRACKED_TABLES = {
    'clients',
    'client_messages',
    'projects',
    'tasks',
    'project_submissions',
    'project_proposals',
    'documents',
    'designs',
    'advertising_assets',
    'financial_transactions',
    'expense_requests',
    'department_messages',
    'team_activity',
    'profiles',
    'user_roles',
    'github_repositories',
    'github_commits',
}

MAX_EVENTS_PER_POLL = 200

_thread_locals = threading.local()


@contextmanager
def suspend_change_feed():
    """
    Temporarily stop emitting change events.
    Useful for bulk operations; emit one summary event with
    emit_change() after the block.
    """
    previous = getattr(_thread_locals, 'suspended', False)
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = previous


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


def emit_change(table, event, record_id):
    """Record a change event for a table row"""
    from .models import ChangeEvent
    try:
        change = ChangeEvent.objects.create(table=table, event=event, record_id=str(record_id))
        transaction.on_commit(bump_dashboard_version)
        return change
    except Exception as e:
        logger.warning(f"Could not record change event for {table}#{record_id}: {str(e)}")
        return None


def get_changes(since=0, tables=None):
    """
    Return (events, cursor) for events after the given cursor.
    The cursor is the id of the last event returned, or the input cursor
    when nothing new happened.
    """
    from .models import ChangeEvent
    queryset = ChangeEvent.objects.filter(id__gt=since)
    if tables:
        queryset = queryset.filter(table__in=tables)
    events = list(queryset.order_by('id')[:MAX_EVENTS_PER_POLL])
    cursor = events[-1].id if events else since
    return events, cursor


def latest_cursor():
    from .models import ChangeEvent
    last = ChangeEvent.objects.order_by('-id').values_list('id', flat=True).first()
    return last or 0


# --- Signal Handlers ---

@receiver(post_save)
def record_save(sender, instance, created, raw=False, **kwargs):
    """Emit INSERT/UPDATE for tracked tables"""
    if raw or is_suspended():
        return
    table = sender._meta.db_table
    if table not in TRACKED_TABLES:
        return
    emit_change(table, 'INSERT' if created else 'UPDATE', instance.pk)


@receiver(post_delete)
def record_delete(sender, instance, **kwargs):
    """Emit DELETE for tracked tables"""
    if is_suspended():
        return
    table = sender._meta.db_table
    if table not in TRACKED_TABLES:
        return
    emit_change(table, 'DELETE', instance.pk)
