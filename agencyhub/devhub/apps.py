from django.apps import AppConfig


class DevhubConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'agencyhub.devhub'
