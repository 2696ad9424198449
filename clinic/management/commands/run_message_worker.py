"""
Polling worker: picks pending message requests from the database, generates the
text and stores it. Same job as the Celery task, for setups without a broker.
Run: python manage.py run_message_worker
"""
import logging
import time

from django.core.management.base import BaseCommand

from clinic.llm_service import generate_patient_message
from clinic.models import MessageGeneration
from clinic.tasks import mark_failed, store_generated_message

logger = logging.getLogger(__name__)


def claim_next_request():
    """Oldest pending request, switched to 'processing'; None when the queue is empty"""
    request = MessageGeneration.objects.filter(status='pending').order_by('message_requested_at', 'id').first()
    if request is None:
        return None
    # another worker may have claimed it between the select and this update
    claimed = MessageGeneration.objects.filter(id=request.id, status='pending').update(status='processing')
    if not claimed:
        return None
    request.status = 'processing'
    return request


def process_one_request():
    """Process one pending request, True when something was processed"""
    request = claim_next_request()
    if request is None:
        return False

    try:
        content = generate_patient_message(request, llm_provider=request.llm_provider or None)
    except Exception as e:
        logger.error("message request #%s failed: %s", request.id, e)
        mark_failed(request, e)
    else:
        store_generated_message(request, content)
        logger.info("message request #%s completed", request.id)
    return True


class Command(BaseCommand):
    help = 'Poll pending message requests, generate the text with the LLM and store it'

    def add_arguments(self, parser):
        parser.add_argument('--interval', type=float, default=5.0, help='seconds between polls when idle')
        parser.add_argument('--once', action='store_true', help='drain the pending requests and exit')

    def handle(self, *args, **options):
        self.stdout.write('Worker started, waiting for requests... (Ctrl+C to stop)')
        while True:
            try:
                processed = process_one_request()
                if processed:
                    continue
                if options['once']:
                    self.stdout.write('No pending requests left')
                    break
                time.sleep(options['interval'])
            except KeyboardInterrupt:
                self.stdout.write('Worker stopped')
                break
