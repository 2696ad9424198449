import logging
import os

from celery import Celery
from celery.signals import worker_ready

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'clinic_dashboard.settings')

logger = logging.getLogger(__name__)

app = Celery('clinic_dashboard')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()


@worker_ready.connect
def setup_metrics_server(sender, **kwargs):
    """Start the Prometheus metrics HTTP server once the worker is ready (daemon thread)"""
    from clinic.celery_metrics import start_metrics_server
    try:
        start_metrics_server()
    except OSError:
        logger.warning("metrics port already in use, worker metrics server not started")
