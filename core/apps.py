from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'core'

    def ready(self):
        # Must run after every other app's admin module is loaded
        from .admin_setup import auto_register_models

        auto_register_models()
