from django.apps import AppConfig
from django.conf import settings


class MediaConfig(AppConfig):
    name = 'media'
    default_auto_field = 'django.db.models.BigAutoField'

    def ready(self):
        """Start the Prometheus exporter when a port is configured"""
        port = getattr(settings, 'YTSYNC_METRICS_PORT', 0)
        if port:
            from media.metrics import start_metrics_server

            start_metrics_server(port)
