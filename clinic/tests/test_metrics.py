"""
Prometheus counters recorded by the middleware and the exception handler.
"""
import json

import pytest
from prometheus_client import REGISTRY


def sample(name, labels=None):
    return REGISTRY.get_sample_value(name, labels or {}) or 0


@pytest.mark.django_db
class TestMetricsMiddleware:

    def test_4xx_counted_by_status(self, client):
        before = sample("http_4xx_total", {"code": "401"})
        client.get("/api/dashboard/")
        assert sample("http_4xx_total", {"code": "401"}) == before + 1

    def test_endpoint_histogram(self, auth_client):
        before = sample("api_dashboard_duration_seconds_count")
        auth_client.get("/api/stats/sales/")
        assert sample("api_dashboard_duration_seconds_count") == before + 1


@pytest.mark.django_db
class TestBusinessCounters:

    def test_duplicate_block_counted(self, auth_client, questionnaire_payload):
        labels = {"code": "DUPLICATE_RESIDENT_ID"}
        before = sample("duplication_block_total", labels)
        body = json.dumps(questionnaire_payload)
        auth_client.post("/api/questionnaires/", data=body, content_type="application/json")
        auth_client.post("/api/questionnaires/", data=body, content_type="application/json")
        assert sample("duplication_block_total", labels) == before + 1

    def test_validation_error_counted(self, auth_client):
        before = sample("validation_error_total")
        auth_client.post("/api/consultations/", data="{}", content_type="application/json")
        assert sample("validation_error_total") == before + 1

    def test_questionnaire_source_label(self, client, questionnaire_payload):
        labels = {"source": "webform"}
        before = sample("questionnaire_submitted_total", labels)
        client.post("/api/intake/webform/", data=json.dumps(questionnaire_payload), content_type="application/json")
        assert sample("questionnaire_submitted_total", labels) == before + 1
