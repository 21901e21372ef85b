"""
Delete change feed events older than the retention window
Usage: python manage.py prune_change_events [--days N]
"""
from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone

from agencyhub.core.models import ChangeEvent


class Command(BaseCommand):
    help = 'Delete change feed events older than N days'

    def add_arguments(self, parser):
        parser.add_argument(
            '--days',
            type=int,
            default=getattr(settings, 'CHANGE_FEED_RETENTION_DAYS', 7),
            help='Keep events from the last N days',
        )

    def handle(self, *args, **options):
        days = options['days']
        if days < 0:
            self.stdout.write(self.style.ERROR('--days must not be negative'))
            return
        cutoff = timezone.now() - timedelta(days=days)
        deleted, _ = ChangeEvent.objects.filter(created_at__lt=cutoff).delete()
        self.stdout.write(self.style.SUCCESS(f'✓ Deleted {deleted} change event(s) older than {days} day(s)'))
