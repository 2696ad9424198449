"""
Celery task: generate the patient message for one request row
Retries up to 3 times with exponential backoff
"""
import logging
import time

from celery import shared_task
from django.db import transaction

from clinic.llm_service import generate_patient_message
from clinic.metrics import (
    MESSAGE_COMPLETED,
    MESSAGE_FAILED,
    CELERY_TASK_DURATION,
    CELERY_TASK_FAILURE,
    CELERY_TASK_RETRY,
)
from clinic.models import MessageGeneration, MessageStorage
from clinic.statsd_metrics import (
    celery_task_duration_seconds,
    celery_task_failure,
    celery_task_retry,
    message_completed,
    message_failed,
)

logger = logging.getLogger(__name__)


def store_generated_message(request, content):
    """Write the storage row and mark the request completed in one transaction"""
    with transaction.atomic():
        MessageStorage.objects.update_or_create(
            generation=request,
            defaults={"custom_message": content},
        )
        request.status = 'completed'
        request.error_message = ''
        request.save(update_fields=['status', 'error_message', 'updated_at'])


def mark_failed(request, error):
    request.status = 'failed'
    request.error_message = str(error)
    request.save(update_fields=['status', 'error_message', 'updated_at'])


@shared_task(bind=True, max_retries=3)
def generate_message_task(self, request_id):
    """
    Load the request -> call the LLM -> store the text
    Backoff between attempts: 2^retries seconds (1st: 1s, 2nd: 2s, 3rd: 4s)
    """
    start = time.perf_counter()
    try:
        request = MessageGeneration.objects.get(id=request_id)
    except MessageGeneration.DoesNotExist:
        logger.warning("message request #%s not found, skipped", request_id)
        return

    if request.status == 'pending':
        # same conditional claim as run_message_worker
        claimed = MessageGeneration.objects.filter(id=request.id, status='pending').update(status='processing')
        if not claimed:
            logger.info("message request #%s claimed by another worker, skipped", request_id)
            return
        request.status = 'processing'
    elif request.status != 'processing' or not self.request.retries:
        # 'processing' on a first attempt belongs to another worker; a retry owns it
        return

    try:
        content = generate_patient_message(request, llm_provider=request.llm_provider or None)
        store_generated_message(request, content)
    except Exception as exc:
        if self.request.retries >= self.max_retries:
            logger.error("message request #%s failed: %s", request_id, exc)
            mark_failed(request, exc)
            MESSAGE_FAILED.inc()
            CELERY_TASK_FAILURE.inc()
            message_failed()
            celery_task_failure()
            CELERY_TASK_DURATION.observe(time.perf_counter() - start)
            raise
        logger.info("message request #%s retry %s: %s", request_id, self.request.retries + 1, exc)
        CELERY_TASK_RETRY.inc()
        celery_task_retry()
        raise self.retry(exc=exc, countdown=2 ** self.request.retries)

    duration = time.perf_counter() - start
    MESSAGE_COMPLETED.inc()
    message_completed()
    CELERY_TASK_DURATION.observe(duration)
    celery_task_duration_seconds(duration)
    logger.info("message request #%s completed in %.2fs", request_id, duration)
