"""
Prometheus endpoint of the Celery worker.
The worker is a separate process from the web server, so it serves its own /metrics.
"""
from prometheus_client import start_http_server

METRICS_PORT = 9090


def start_metrics_server(port=METRICS_PORT):
    """Non-blocking, the HTTP server runs in a daemon thread"""
    import clinic.metrics  # noqa: F401 - register the collectors
    start_http_server(port)
