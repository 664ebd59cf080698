from django.apps import AppConfig


class BundlesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'bundles'

    def ready(self):
        """Import signals when app is ready."""
        import bundles.signals  # noqa
