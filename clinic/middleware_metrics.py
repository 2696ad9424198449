"""
Prometheus middleware: request duration per endpoint group, 4xx / 5xx counts
"""
import time

from clinic_dashboard.exceptions import BaseAppException

from .metrics import (
    API_QUESTIONNAIRE_DURATION,
    API_CONSULTATION_DURATION,
    API_DASHBOARD_DURATION,
    API_MESSAGE_STATUS_DURATION,
    HTTP_4XX,
    HTTP_5XX,
)


class MetricsMiddleware:

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        start = time.perf_counter()
        try:
            response = self.get_response(request)
        except Exception as exc:
            self._record(request, self._status_from_exception(exc), time.perf_counter() - start)
            raise
        self._record(request, response.status_code, time.perf_counter() - start)
        return response

    def _status_from_exception(self, exc):
        if isinstance(exc, BaseAppException):
            return exc.http_status
        return 500

    def _histogram_for(self, path):
        if path.startswith("/api/questionnaires/") or path.startswith("/api/intake/"):
            return API_QUESTIONNAIRE_DURATION
        if path.startswith("/api/consultations/"):
            return API_CONSULTATION_DURATION
        if path.startswith("/api/dashboard/") or path.startswith("/api/stats/"):
            return API_DASHBOARD_DURATION
        if path == "/api/messages/status/":
            return API_MESSAGE_STATUS_DURATION
        return None

    def _record(self, request, status, duration):
        if status >= 500:
            HTTP_5XX.inc()
        elif status >= 400:
            HTTP_4XX.labels(code=str(status)).inc()

        histogram = self._histogram_for(getattr(request, "path", "") or "")
        if histogram is not None:
            histogram.observe(duration)
