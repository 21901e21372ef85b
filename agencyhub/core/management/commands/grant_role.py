"""
Grant a portal role to a user
Usage: python manage.py grant_role <username> <role> [--replace]
"""
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from agencyhub.core.models import User, UserRole, ROLE_CHOICES


class Command(BaseCommand):
    help = 'Grant a portal role (admin, developer, designer, writer, client, team) to a user'

    def add_arguments(self, parser):
        parser.add_argument('username')
        parser.add_argument('role', choices=[choice for choice, _ in ROLE_CHOICES])
        parser.add_argument(
            '--replace',
            action='store_true',
            help='Remove every other role the user holds',
        )

    def handle(self, *args, **options):
        try:
            user = User.objects.get(username=options['username'])
        except User.DoesNotExist:
            raise CommandError(f'User "{options["username"]}" does not exist')

        role = options['role']
        with transaction.atomic():
            if options['replace']:
                removed, _ = UserRole.objects.filter(user=user).exclude(role=role).delete()
                if removed:
                    self.stdout.write(f'  Removed {removed} other role(s)')
            _, created = UserRole.objects.get_or_create(user=user, role=role)

        if created:
            self.stdout.write(self.style.SUCCESS(f'✓ Granted role "{role}" to {user.username}'))
        else:
            self.stdout.write(f'  {user.username} already holds role "{role}"')
