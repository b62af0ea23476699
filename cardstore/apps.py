from django.apps import AppConfig

class CardstoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'cardstore'
