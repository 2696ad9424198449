"""
Prometheus /metrics endpoint
"""
from django.http import HttpResponse
from django.views.decorators.cache import never_cache
from django.views.decorators.http import require_GET

from prometheus_client import REGISTRY, generate_latest, CONTENT_TYPE_LATEST


@require_GET
@never_cache
def metrics(request):
    """Scraped by Prometheus, no session required"""
    return HttpResponse(generate_latest(REGISTRY), content_type=CONTENT_TYPE_LATEST)
