"""
Worker process metrics, sent over StatsD UDP and exposed by statsd_exporter.
Prefork workers do not share memory, so prometheus_client counters would not aggregate.
"""
import os

import statsd

_STATSD_HOST = os.getenv("STATSD_HOST", "localhost")
_STATSD_PORT = int(os.getenv("STATSD_PORT", "9125"))
_PREFIX = "clinic"

_client = None


def _get_client():
    global _client
    if _client is None:
        _client = statsd.StatsClient(_STATSD_HOST, _STATSD_PORT, prefix=_PREFIX)
    return _client


def message_completed():
    _get_client().incr("message_completed")


def message_failed():
    _get_client().incr("message_failed")


def celery_task_duration_seconds(seconds: float):
    _get_client().timing("celery_task_duration", int(seconds * 1000))


def celery_task_failure():
    _get_client().incr("celery_task_failure")


def celery_task_retry():
    _get_client().incr("celery_task_retry")


def llm_provider_usage(provider: str):
    # provider travels in the metric name, statsd_exporter mapping turns it into a label
    _get_client().incr(f"llm_provider_usage.{provider}")


def llm_api_latency_seconds(seconds: float):
    _get_client().timing("llm_api_latency", int(seconds * 1000))


def llm_api_error():
    _get_client().incr("llm_api_error")
