from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'agencyhub.core'

    def ready(self):
        """Import signals when app is ready"""
        import agencyhub.core.profile_signals  # noqa: F401
        import agencyhub.core.realtime  # noqa: F401  # Change feed signals
